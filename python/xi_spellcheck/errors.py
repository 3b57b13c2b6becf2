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

"""Errors surfaced by the spellcheck engine to its host."""


class SpellcheckError(Exception):
    """Base spellcheck error."""


class DictionaryLoadError(SpellcheckError):
    """A language dictionary could not be loaded.

    The language stays inactive for the session until the host explicitly
    activates it again.
    """
    def __init__(self, language, cause=None):
        self.language = language
        self.cause = cause
        if cause is None:
            msg = "dictionary {} could not be loaded".format(language)
        else:
            msg = "dictionary {} could not be loaded: {}".format(language, cause)
        super(DictionaryLoadError, self).__init__(msg)


class TokenizeError(SpellcheckError):
    """An excluded-region detector failed on a piece of text."""


class PersistenceError(SpellcheckError):
    """The custom dictionary could not be written (or read) on disk."""
    def __init__(self, path, cause=None):
        self.path = path
        self.cause = cause
        super(PersistenceError, self).__init__(
            "custom dictionary {} not persisted: {}".format(path, cause))
