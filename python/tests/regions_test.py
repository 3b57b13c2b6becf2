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

from xi_spellcheck.regions import (combine_detectors, detect_fenced_blocks,
                                   detect_inline_code, detect_link_targets,
                                   detect_markup_regions, detect_urls)
from xi_spellcheck.tokenizer import find_excluded_regions, tokenize


def checked_words(text):
    excluded = find_excluded_regions(text, detect_markup_regions)
    return [t.raw for t in tokenize(text, excluded=excluded)]


def test_fenced_blocks():
    text = "intro\n```\nbad wrods\n```\noutro"
    assert detect_fenced_blocks(text) == [(6, 23)]
    assert checked_words(text) == ["intro", "outro"]


def test_unterminated_fence_runs_to_end():
    assert checked_words("a\n~~~\nxyz qq") == ["a"]


def test_inline_code():
    text = "use `fooo barr` here"
    assert detect_inline_code(text) == [(4, 15)]
    assert checked_words(text) == ["use", "here"]


def test_urls_and_emails():
    text = "visit https://exmaple.com/pathh or www.foo.org today"
    assert len(detect_urls(text)) == 2
    assert checked_words(text) == ["visit", "or", "today"]
    assert checked_words("mail bob.smith@exmaple.com now") == ["mail", "now"]


def test_link_targets():
    text = "[click](http://x.y/zz) and ![img](pic.png)"
    assert len(detect_link_targets(text)) == 2
    assert checked_words(text) == ["click", "and", "img"]


def test_combine_detectors():
    detect = combine_detectors(lambda t: [(0, 1)], lambda t: [(3, 4)])
    assert sorted(detect("abcdef")) == [(0, 1), (3, 4)]
