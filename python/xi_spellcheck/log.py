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

"""Logging setup for plugin processes.

stdout carries the RPC stream, so everything goes to stderr, where xi-core
forwards it to its own log.
"""

import logging
import sys

LOG_FORMAT = "PLUGIN.PY %(name)s>>> %(message)s"


def configure_logging(level_name="INFO", stream=None):
    level = getattr(logging, level_name.upper(), logging.INFO)
    root = logging.getLogger()
    root.setLevel(level)
    # a second call only updates the level
    for handler in root.handlers:
        if getattr(handler, '_xi_spellcheck', False):
            handler.setLevel(level)
            return handler
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._xi_spellcheck = True
    root.addHandler(handler)
    return handler
