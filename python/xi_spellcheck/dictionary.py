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

"""Language dictionaries and the provider that loads and queries them.

Dictionaries load on a worker thread; everything else (activation,
installing finished loads, lookups) happens on the caller's thread. A
loaded `DictionarySet` is never mutated, so lookups need no locking.
"""

import abc
import concurrent.futures
import logging
from pathlib import Path

from symspellpy import SymSpell, Verbosity

from .errors import DictionaryLoadError
from .tokenizer import normalize

log = logging.getLogger(__name__)

VALID = 'valid'
INVALID = 'invalid'
UNRESOLVED = 'unresolved'

INACTIVE = 'inactive'
LOADING = 'loading'
READY = 'ready'
FAILED = 'failed'

DEFAULT_SUGGESTION_LIMIT = 5


class DictionarySet(abc.ABC):
    """A loaded, read-only dictionary for one language."""

    def __init__(self, language):
        self.language = language

    @abc.abstractmethod
    def is_valid(self, normalized):
        """Whether the normalized word is spelt correctly in this language."""

    @abc.abstractmethod
    def suggest(self, normalized, limit=DEFAULT_SUGGESTION_LIMIT):
        """Returns up to `limit` candidate spellings, best first."""

    def __repr__(self):
        return "<{} {}>".format(type(self).__name__, self.language)


class EnchantDictionary(DictionarySet):
    """Dictionary backed by pyenchant (hunspell, aspell, ...).

    The backend does affix expansion itself. It is case sensitive, so a
    normalized word is also tried capitalized to accept proper nouns.
    """

    def __init__(self, language):
        super(EnchantDictionary, self).__init__(language)
        try:
            import enchant
        except ImportError as err:
            raise DictionaryLoadError(language, err) from err
        try:
            self._dict = enchant.Dict(language)
        except enchant.errors.DictNotFoundError as err:
            raise DictionaryLoadError(language, err) from err

    def is_valid(self, normalized):
        if self._dict.check(normalized):
            return True
        capitalized = normalized[:1].upper() + normalized[1:]
        return capitalized != normalized and self._dict.check(capitalized)

    def suggest(self, normalized, limit=DEFAULT_SUGGESTION_LIMIT):
        return self._dict.suggest(normalized)[:limit]


class WordListDictionary(DictionarySet):
    """Dictionary built from a plain list of words.

    Membership is exact on the normalized form; suggestions come from a
    symspellpy index built once, when the dictionary is created.
    """

    def __init__(self, language, words, max_edit_distance=2, prefix_length=7):
        super(WordListDictionary, self).__init__(language)
        self._verbosity = Verbosity.ALL
        self._words = frozenset(normalize(w) for w in words if w)
        self._sym_spell = SymSpell(max_dictionary_edit_distance=max_edit_distance,
                                   prefix_length=prefix_length)
        for word in self._words:
            self._sym_spell.create_dictionary_entry(word, 1)

    @classmethod
    def from_file(cls, language, path, **kwargs):
        """Loads a one-word-per-line list or a hunspell `.dic` file.

        For `.dic` files the count header and `/FLAGS` suffixes are
        dropped; affix rules are not applied.
        """
        path = Path(path)
        try:
            lines = path.read_text(encoding='utf-8').splitlines()
        except (OSError, UnicodeDecodeError) as err:
            raise DictionaryLoadError(language, err) from err
        if path.suffix == '.dic' and lines and lines[0].strip().isdigit():
            lines = lines[1:]
        words = []
        for line in lines:
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            words.append(line.split()[0].split('/')[0])
        return cls(language, words, **kwargs)

    def __len__(self):
        return len(self._words)

    def is_valid(self, normalized):
        return normalized in self._words

    def suggest(self, normalized, limit=DEFAULT_SUGGESTION_LIMIT):
        items = self._sym_spell.lookup(normalized, self._verbosity)
        return [item.term for item in items if item.term != normalized][:limit]


def load_dictionary(language, dictionary_dirs=()):
    """Default loader: `<language>.dic` or `.txt` from `dictionary_dirs`, else enchant."""
    for directory in dictionary_dirs:
        for suffix in (".dic", ".txt"):
            path = Path(directory) / (language + suffix)
            if path.is_file():
                return WordListDictionary.from_file(language, path)
    return EnchantDictionary(language)


class DictionaryProvider(object):
    """Loads, caches and queries the active language dictionaries.

    A word is valid if any ready dictionary accepts it. While a language
    is still loading (or before any language is ready) words that no
    dictionary accepts are unresolved rather than invalid.
    """

    def __init__(self, loader=None, executor=None, max_workers=2):
        self._loader = loader or load_dictionary
        self._executor = executor
        self._owns_executor = executor is None
        self._max_workers = max_workers
        self._order = []
        self._ready = {}
        self._loading = {}
        self._failed = {}

    def _get_executor(self):
        if self._executor is None:
            self._executor = concurrent.futures.ThreadPoolExecutor(
                max_workers=self._max_workers,
                thread_name_prefix='xi-spellcheck-dict')
        return self._executor

    @property
    def languages(self):
        """Activated languages (loading or ready), in activation order."""
        return list(self._order)

    @property
    def ready_languages(self):
        return [lang for lang in self._order if lang in self._ready]

    @property
    def is_loading(self):
        return bool(self._loading)

    def status(self, language):
        if language in self._ready:
            return READY
        if language in self._loading:
            return LOADING
        if language in self._failed:
            return FAILED
        return INACTIVE

    def error(self, language):
        return self._failed.get(language)

    def activate(self, language):
        """Starts loading `language` and returns a future for its dictionary.

        Activating a failed language retries the load.
        """
        if language in self._loading:
            return self._loading[language]
        if language in self._ready:
            future = concurrent.futures.Future()
            future.set_result(self._ready[language])
            return future
        self._failed.pop(language, None)
        if language not in self._order:
            self._order.append(language)
        log.info("loading dictionary for %s", language)
        future = self._get_executor().submit(self._load, language)
        self._loading[language] = future
        return future

    def deactivate(self, language):
        if language in self._order:
            self._order.remove(language)
        self._ready.pop(language, None)
        self._failed.pop(language, None)
        future = self._loading.pop(language, None)
        if future is not None:
            future.cancel()

    def _load(self, language):
        try:
            return self._loader(language)
        except DictionaryLoadError:
            raise
        except Exception as err:
            raise DictionaryLoadError(language, err) from err

    def poll(self):
        """Installs finished loads.

        Returns `(language, error)` pairs for every load that completed
        since the last call; `error` is None on success.
        """
        finished = []
        for language in list(self._order):
            future = self._loading.get(language)
            if future is None or not future.done():
                continue
            del self._loading[language]
            try:
                self._ready[language] = future.result()
            except DictionaryLoadError as err:
                log.error("%s", err)
                self._order.remove(language)
                self._failed[language] = err
                finished.append((language, err))
            else:
                log.info("loaded dictionary for %s", language)
                finished.append((language, None))
        return finished

    def wait(self, timeout=None):
        """Blocks until every in-flight load has finished (or `timeout`)."""
        concurrent.futures.wait(list(self._loading.values()), timeout=timeout)

    def is_valid(self, languages, normalized):
        for language in languages:
            dictionary = self._ready.get(language)
            if dictionary is not None and dictionary.is_valid(normalized):
                return True
        return False

    def resolve(self, normalized):
        if self.is_valid(self._order, normalized):
            return VALID
        if self._loading or not self._ready:
            return UNRESOLVED
        return INVALID

    def suggest(self, normalized, limit=DEFAULT_SUGGESTION_LIMIT):
        suggestions = []
        for language in self.ready_languages:
            for candidate in self._ready[language].suggest(normalized, limit):
                if candidate not in suggestions:
                    suggestions.append(candidate)
        return suggestions[:limit]

    def shutdown(self):
        for future in self._loading.values():
            future.cancel()
        self._loading.clear()
        if self._owns_executor and self._executor is not None:
            self._executor.shutdown(wait=False)
            self._executor = None
