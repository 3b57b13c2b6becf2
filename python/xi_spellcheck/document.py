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

from .engine import EditRange


class TextDocument(object):
    """A plain in-memory document, for hosts that are not xi."""
    def __init__(self, doc_id, text=''):
        self.doc_id = doc_id
        self.text = text
        self.revision = 0

    def replace(self, start, end, new_text):
        """Replaces text[start:end] and returns the matching EditRange."""
        if not 0 <= start <= end <= len(self.text):
            raise IndexError("range {}..{} invalid for text length {}".format(
                start, end, len(self.text)))
        self.text = self.text[:start] + new_text + self.text[end:]
        self.revision += 1
        return EditRange(start, end, len(new_text))

    def insert(self, offset, new_text):
        return self.replace(offset, offset, new_text)

    def delete(self, start, end):
        return self.replace(start, end, '')

    def __repr__(self):
        return "TextDocument({!r}, rev={})".format(self.doc_id, self.revision)
