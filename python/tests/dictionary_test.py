# Copyright 2017 Google Inc. All rights reserved.
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

import threading

import pytest

from xi_spellcheck.dictionary import (FAILED, INACTIVE, INVALID, LOADING, READY,
                                      UNRESOLVED, VALID, DictionaryProvider,
                                      EnchantDictionary, WordListDictionary,
                                      load_dictionary)
from xi_spellcheck.errors import DictionaryLoadError

WORDS = {
    'en_US': ["hello", "help", "world", "the"],
    'de_DE': ["hallo", "welt", "straße"],
}


def loader(language):
    if language not in WORDS:
        raise DictionaryLoadError(language, "no test dictionary")
    return WordListDictionary(language, WORDS[language])


def ready_provider(*languages):
    provider = DictionaryProvider(loader=loader)
    for language in languages:
        provider.activate(language)
    provider.wait(5)
    provider.poll()
    return provider


def test_word_list_membership_is_normalized():
    d = WordListDictionary('en_US', ["Hello", "world", "Don’t"])
    assert len(d) == 3
    assert d.is_valid("hello")
    assert d.is_valid("don't")
    assert not d.is_valid("helo")
    assert repr(d) == "<WordListDictionary en_US>"


def test_word_list_suggestions():
    d = WordListDictionary('en_US', WORDS['en_US'])
    suggestions = d.suggest("helo")
    assert set(suggestions) == {"hello", "help"}
    assert len(d.suggest("helo", 1)) == 1
    assert "hello" not in d.suggest("hello")


def test_word_list_from_hunspell_dic(tmp_path):
    path = tmp_path / "en_US.dic"
    path.write_text("3\nhello/S\nworld\n# comment\nfoo/XY\n", encoding='utf-8')
    d = WordListDictionary.from_file('en_US', path)
    assert len(d) == 3
    assert d.is_valid("hello")
    assert d.is_valid("foo")


def test_word_list_from_missing_file(tmp_path):
    with pytest.raises(DictionaryLoadError):
        WordListDictionary.from_file('en_US', tmp_path / "nope.txt")


def test_load_dictionary_prefers_word_lists(tmp_path):
    (tmp_path / "xx_XX.txt").write_text("alpha\nbeta\n", encoding='utf-8')
    d = load_dictionary('xx_XX', dictionary_dirs=[tmp_path])
    assert isinstance(d, WordListDictionary)
    assert d.is_valid("beta")


def test_missing_enchant_dictionary_fails_to_load():
    with pytest.raises(DictionaryLoadError) as info:
        EnchantDictionary('xx_NOT_A_LANGUAGE')
    assert info.value.language == 'xx_NOT_A_LANGUAGE'


def test_words_are_unresolved_while_loading():
    release = threading.Event()

    def slow_loader(language):
        release.wait(5)
        return loader(language)

    provider = DictionaryProvider(loader=slow_loader)
    provider.activate('en_US')
    assert provider.status('en_US') == LOADING
    assert provider.is_loading
    assert provider.resolve("hello") == UNRESOLVED
    assert provider.resolve("zzz") == UNRESOLVED
    assert provider.poll() == []

    release.set()
    provider.wait(5)
    assert provider.poll() == [('en_US', None)]
    assert provider.status('en_US') == READY
    assert provider.resolve("hello") == VALID
    assert provider.resolve("zzz") == INVALID
    provider.shutdown()


def test_activate_twice_returns_the_same_load():
    provider = DictionaryProvider(loader=loader)
    first = provider.activate('en_US')
    assert provider.activate('en_US') is first
    provider.wait(5)
    provider.poll()
    assert provider.activate('en_US').result() is first.result()


def test_failed_language_does_not_block_others():
    provider = ready_provider('en_US', 'xx_XX')
    assert provider.status('xx_XX') == FAILED
    assert isinstance(provider.error('xx_XX'), DictionaryLoadError)
    assert provider.status('en_US') == READY
    assert provider.languages == ['en_US']
    assert provider.resolve("zzz") == INVALID


def test_nothing_is_invalid_without_a_ready_language():
    provider = ready_provider('xx_XX')
    assert provider.status('xx_XX') == FAILED
    assert not provider.is_loading
    assert provider.resolve("zzz") == UNRESOLVED

    provider.activate('en_US')
    provider.wait(5)
    provider.poll()
    assert provider.resolve("zzz") == INVALID


def test_failed_load_reports_error_once():
    provider = DictionaryProvider(loader=loader)
    provider.activate('xx_XX')
    provider.wait(5)
    (language, error), = provider.poll()
    assert language == 'xx_XX'
    assert error.language == 'xx_XX'
    assert provider.poll() == []


def test_unexpected_loader_errors_are_wrapped():
    def broken(language):
        raise ValueError("corrupt")

    provider = DictionaryProvider(loader=broken)
    provider.activate('en_US')
    provider.wait(5)
    (_, error), = provider.poll()
    assert isinstance(error, DictionaryLoadError)
    assert isinstance(error.cause, ValueError)


def test_explicit_retry_after_failure():
    attempts = []

    def flaky(language):
        attempts.append(language)
        if len(attempts) == 1:
            raise DictionaryLoadError(language, "first try fails")
        return loader(language)

    provider = DictionaryProvider(loader=flaky)
    provider.activate('en_US')
    provider.wait(5)
    provider.poll()
    assert provider.status('en_US') == FAILED

    provider.activate('en_US')
    provider.wait(5)
    assert provider.poll() == [('en_US', None)]
    assert provider.status('en_US') == READY
    assert len(attempts) == 2


def test_union_of_languages():
    provider = ready_provider('en_US', 'de_DE')
    assert provider.is_valid(['en_US', 'de_DE'], "straße")
    assert not provider.is_valid(['en_US'], "straße")
    assert provider.resolve("straße") == VALID
    assert provider.resolve("hello") == VALID


def test_deactivate():
    provider = ready_provider('en_US', 'de_DE')
    provider.deactivate('de_DE')
    assert provider.status('de_DE') == INACTIVE
    assert provider.languages == ['en_US']
    assert provider.resolve("straße") == INVALID


def test_no_ready_language_leaves_words_unresolved():
    provider = DictionaryProvider(loader=loader)
    assert provider.resolve("hello") == UNRESOLVED


def test_suggestions_merge_languages():
    provider = ready_provider('en_US', 'de_DE')
    suggestions = provider.suggest("helo", 5)
    assert "hello" in suggestions
    assert "hallo" in suggestions
    assert len(set(suggestions)) == len(suggestions)
    assert len(provider.suggest("helo", 1)) == 1
