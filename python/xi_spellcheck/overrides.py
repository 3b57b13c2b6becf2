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

"""User overrides: session-ignored words and the persisted custom dictionary.

Resolution order is custom dictionary, then ignored words, then the
language dictionaries.
"""

import logging
import os
import tempfile
from pathlib import Path

from .dictionary import VALID
from .errors import PersistenceError
from .tokenizer import normalize

log = logging.getLogger(__name__)


class WordListStore(object):
    """Keeps the custom dictionary in a UTF-8 file, one word per line."""

    def __init__(self, path):
        self.path = Path(path)

    def load(self):
        if not self.path.exists():
            return []
        try:
            text = self.path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as err:
            raise PersistenceError(self.path, err) from err
        return [line.strip() for line in text.splitlines() if line.strip()]

    def save(self, words):
        """Replaces the file contents with `words`, atomically."""
        data = ''.join(word + '\n' for word in words)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent),
                                            prefix=self.path.name, suffix='.tmp')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    f.write(data)
                os.replace(tmp_path, str(self.path))
            except BaseException:
                os.unlink(tmp_path)
                raise
        except OSError as err:
            raise PersistenceError(self.path, err) from err


class OverrideStore(object):
    """Ignored words and custom dictionary entries, both normalized.

    `storage` is anything with `load()` and `save(words)`; when given, the
    custom dictionary is read from it once and written back after every
    change. The in-memory set stays authoritative when a write fails.

    If the stored words cannot be read, `load_error` holds the error and
    nothing is written until a later read succeeds, so the file is never
    replaced by a partial list.
    """

    def __init__(self, provider, storage=None):
        self.provider = provider
        self.storage = storage
        self._ignored = set()
        # removed while the stored words could not be read
        self._removed = set()
        # dict as an insertion-ordered set
        self._custom = {}
        self.unsaved = False
        self.load_error = None
        if storage is not None:
            try:
                words = storage.load()
            except PersistenceError as err:
                log.error("%s", err)
                self.load_error = err
                words = []
            self._custom = dict.fromkeys(normalize(w) for w in words)

    @property
    def custom_words(self):
        return list(self._custom)

    @property
    def ignored_words(self):
        return set(self._ignored)

    def is_ignored(self, word):
        return normalize(word) in self._ignored

    def in_custom_dictionary(self, word):
        return normalize(word) in self._custom

    def is_overridden(self, normalized):
        return normalized in self._custom or normalized in self._ignored

    def ignore(self, word):
        """Accepts `word` for the rest of the session. Returns the normalized form."""
        normalized = normalize(word)
        self._ignored.add(normalized)
        return normalized

    def unignore(self, word):
        normalized = normalize(word)
        self._ignored.discard(normalized)
        return normalized

    def add_to_custom_dictionary(self, word):
        """Adds `word` permanently. Returns the normalized form.

        Raises PersistenceError if the word could not be saved; it is
        accepted for this session regardless.
        """
        normalized = normalize(word)
        if normalized not in self._custom:
            self._custom[normalized] = None
            self._removed.discard(normalized)
            self._save()
        elif self.unsaved:
            self._save()
        return normalized

    def remove_from_custom_dictionary(self, word):
        normalized = normalize(word)
        if normalized in self._custom:
            del self._custom[normalized]
            self._removed.add(normalized)
            self._save()
        elif self.unsaved:
            self._save()
        return normalized

    def _save(self):
        if self.storage is None:
            return
        self.unsaved = True
        if self.load_error is not None:
            self._reload()
        self.storage.save(list(self._custom))
        self.unsaved = False
        self._removed.clear()

    def _reload(self):
        # stored words come first, then the ones added this session
        words = self.storage.load()
        stored = dict.fromkeys(normalize(w) for w in words)
        for removed in self._removed:
            stored.pop(removed, None)
        stored.update(self._custom)
        self._custom = stored
        log.info("read custom dictionary after earlier failure")
        self.load_error = None

    def resolve(self, normalized):
        if normalized in self._custom:
            return VALID
        if normalized in self._ignored:
            return VALID
        return self.provider.resolve(normalized)
