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


"""Incremental spell checking for xi-editor buffers (and any other text)."""

from .config import SpellcheckConfig
from .dictionary import (DictionaryProvider, DictionarySet, EnchantDictionary,
                         WordListDictionary, load_dictionary,
                         VALID, INVALID, UNRESOLVED)
from .document import TextDocument
from .engine import (SpellcheckEngine, EditRange, MisspelledSpan, SpanDelta,
                     apply_delta)
from .errors import (SpellcheckError, DictionaryLoadError, TokenizeError,
                     PersistenceError)
from .host import start_plugin, PluginHost, PluginPeer
from .log import configure_logging
from .overrides import OverrideStore, WordListStore
from .plugin import Plugin, GlobalPlugin
from .tokenizer import Token, tokenize, normalize
