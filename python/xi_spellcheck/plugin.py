# Copyright 2017 The xi-editor Authors.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http:#www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.


import logging

from . import edit

PLUGIN_ACK_OK = 1


class Plugin(object):
    def __init__(self):
        self.identifier = type(self).__name__
        self.log = logging.getLogger(self.identifier)

    def new_edit(self, rev, edit_range, new_text,
                 priority=edit.EDIT_PRIORITY_NORMAL, after_cursor=False):
        return edit.Edit(rev, edit_range, new_text,
                         self.identifier, priority, after_cursor)

    def initialize(self, view):
        self.log.debug("initialize: %s", view.view_id)

    def did_save(self, view, old_path):
        self.log.debug("did_save: %s", view.view_id)

    def update(self, view, start, end, new_len, rev, edit_type, author, text=None,
               edit=None):
        self.log.debug("update: %s", view.view_id)
        return PLUGIN_ACK_OK

    def idle(self):
        """Called when no input arrived for the host's idle timeout."""
        pass

    def shutdown(self):
        self.log.debug("shutdown")


class GlobalPlugin(Plugin):

    def initialize(self, views):
        self.log.debug("initialize global: %s", ', '.join(v.view_id for v in views))

    def new_buffer(self, view):
        self.log.debug("new_buffer: %s", view.view_id)

    def did_close(self, view_id):
        self.log.debug("did_close: %s", view_id)
