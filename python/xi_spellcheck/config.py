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

"""Spellcheck configuration, with environment variable overrides.

Environment variables:
- XI_SPELLCHECK_LANGUAGES        comma separated, e.g. "en_US,de_DE"
                                 (default: the language part of LC_CTYPE)
- XI_SPELLCHECK_DEBOUNCE_MS      int
- XI_SPELLCHECK_MIN_WORD_LENGTH  int
- XI_SPELLCHECK_SUGGESTIONS      int, max suggestions returned
- XI_SPELLCHECK_CUSTOM_DICT      path of the custom dictionary file
- XI_SPELLCHECK_DICT_DIRS        os.pathsep separated word-list directories
- XI_SPELLCHECK_MARKUP           "1"/"true"/"yes": skip code spans and links
- XI_SPELLCHECK_LOG_LEVEL        DEBUG/INFO/WARNING/ERROR
"""

import os
from pathlib import Path

from .dictionary import DEFAULT_SUGGESTION_LIMIT
from .regions import detect_markup_regions
from .scheduler import DEFAULT_DEBOUNCE_MS

DEFAULT_LANGUAGE = 'en_US'


class SpellcheckConfig(object):
    def __init__(self, active_languages=(DEFAULT_LANGUAGE,),
                 debounce_ms=DEFAULT_DEBOUNCE_MS, min_word_length=1,
                 excluded_region_detector=None, custom_dictionary_path=None,
                 dictionary_dirs=(), suggestion_limit=DEFAULT_SUGGESTION_LIMIT,
                 log_level='INFO'):
        self.active_languages = list(dict.fromkeys(active_languages))
        self.debounce_ms = debounce_ms
        self.min_word_length = min_word_length
        self.excluded_region_detector = excluded_region_detector
        self.custom_dictionary_path = custom_dictionary_path
        self.dictionary_dirs = list(dictionary_dirs)
        self.suggestion_limit = suggestion_limit
        self.log_level = log_level

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        kwargs = {
            'active_languages': [_language_from_locale(env)],
            'excluded_region_detector': detect_markup_regions,
            'custom_dictionary_path': _default_custom_dictionary_path(env),
        }

        langs = env.get('XI_SPELLCHECK_LANGUAGES')
        if langs and _split_list(langs, ','):
            kwargs['active_languages'] = _split_list(langs, ',')

        _int_env(env, kwargs, 'debounce_ms', 'XI_SPELLCHECK_DEBOUNCE_MS')
        _int_env(env, kwargs, 'min_word_length', 'XI_SPELLCHECK_MIN_WORD_LENGTH')
        _int_env(env, kwargs, 'suggestion_limit', 'XI_SPELLCHECK_SUGGESTIONS')

        path = env.get('XI_SPELLCHECK_CUSTOM_DICT')
        if path:
            kwargs['custom_dictionary_path'] = Path(path).expanduser()

        dirs = env.get('XI_SPELLCHECK_DICT_DIRS')
        if dirs:
            kwargs['dictionary_dirs'] = [Path(d).expanduser()
                                         for d in _split_list(dirs, os.pathsep)]

        markup = env.get('XI_SPELLCHECK_MARKUP')
        if markup is not None and not _truthy(markup):
            kwargs['excluded_region_detector'] = None

        level = env.get('XI_SPELLCHECK_LOG_LEVEL')
        if level:
            kwargs['log_level'] = level.strip().upper()

        return cls(**kwargs)

    def __repr__(self):
        return ("SpellcheckConfig(languages={}, debounce_ms={}, min_word_length={})"
                .format(self.active_languages, self.debounce_ms, self.min_word_length))


def _language_from_locale(env):
    # same lookup the original xi spellcheck plugin did
    lang = env.get('LC_CTYPE', DEFAULT_LANGUAGE + '.utf-8').split('.')[0]
    if not lang or lang in ('C', 'POSIX'):
        return DEFAULT_LANGUAGE
    return lang


def _default_custom_dictionary_path(env):
    base = env.get('XDG_CONFIG_HOME') or os.path.join('~', '.config')
    return Path(base).expanduser() / 'xi' / 'spellcheck' / 'custom_dictionary.txt'


def _split_list(s, sep):
    return [part.strip() for part in s.split(sep) if part.strip()]


def _truthy(s):
    return s.strip().lower() in {'1', 'true', 'yes', 'on'}


def _int_env(env, kwargs, key, env_key):
    val = env.get(env_key)
    if val and val.strip().isdigit():
        kwargs[key] = int(val)
