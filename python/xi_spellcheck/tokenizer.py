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

"""Splits text into word tokens for spellchecking.

A word is a maximal run of letters, apostrophes and hyphens. Leading and
trailing apostrophes/hyphens are not part of the word; internal ones are, so
"don't" and "well-known" are single tokens. Runs containing digits or
underscores (numbers, identifiers) are not words at all.

Nothing here knows about markup: callers pass the ranges to skip, usually
computed with `find_excluded_regions` and one of the detectors in
`xi_spellcheck.regions`.
"""

import logging
import re
import unicodedata
from collections import namedtuple

from .errors import TokenizeError

log = logging.getLogger(__name__)

Token = namedtuple('Token', ['start', 'end', 'raw', 'normalized'])

# word characters, apostrophes, hyphens and combining diacritics
_WORD_CHARS = r"\w'\u2019\u0300-\u036f-"
_CHUNK_RE = re.compile(r"[{}]+".format(_WORD_CHARS))
_WORD_CHAR_RE = re.compile(r"[{}]".format(_WORD_CHARS))
_NOT_A_WORD_RE = re.compile(r"[\d_]")
_EDGE_PUNCTUATION = "'\u2019-"
_APOSTROPHES = {"\u2019": "'", "\u2018": "'", "\u02bc": "'"}
_APOSTROPHE_RE = re.compile('|'.join(_APOSTROPHES))


def normalize(word):
    """Returns the lookup form of `word`.

    NFC composed, typographic apostrophes folded to ASCII, lowercased.
    `str.lower` rather than `str.casefold` so that letters such as 'ß'
    keep their spelling.
    """
    word = unicodedata.normalize('NFC', word)
    word = _APOSTROPHE_RE.sub(lambda m: _APOSTROPHES[m.group(0)], word)
    return word.lower()


def is_word_char(char):
    return _WORD_CHAR_RE.match(char) is not None


def merge_ranges(ranges):
    """Sorts `(start, end)` ranges and merges the ones that overlap or touch."""
    merged = []
    for start, end in sorted(ranges):
        if start >= end:
            continue
        if merged and start <= merged[-1][1]:
            if end > merged[-1][1]:
                merged[-1] = (merged[-1][0], end)
        else:
            merged.append((start, end))
    return merged


def find_excluded_regions(text, detector):
    """Runs `detector` over `text` and returns clipped, merged ranges.

    A detector that raises excludes the whole text: a broken detector
    must never produce spans inside code or links.
    """
    if detector is None or not text:
        return []
    try:
        ranges = list(detector(text))
    except Exception as err:
        log.warning("%s", TokenizeError(
            "excluded region detector {!r} failed: {}".format(detector, err)),
            exc_info=True)
        return [(0, len(text))]
    size = len(text)
    return merge_ranges((max(0, s), min(size, e)) for s, e in ranges)


def _segments(start, end, excluded):
    """Yields the parts of [start, end) not covered by `excluded`."""
    pos = start
    for ex_start, ex_end in excluded:
        if ex_end <= pos:
            continue
        if ex_start >= end:
            break
        if ex_start > pos:
            yield pos, ex_start
        pos = max(pos, ex_end)
        if pos >= end:
            return
    if pos < end:
        yield pos, end


def tokenize(text, start=0, end=None, excluded=(), min_length=1):
    """Yields the `Token`s of `text[start:end]`.

    `excluded` is an iterable of `(start, end)` ranges which produce no
    tokens; characters inside them act as word boundaries. Calling again
    with the same arguments yields the same tokens.
    """
    if end is None:
        end = len(text)
    excluded = merge_ranges(excluded)
    for seg_start, seg_end in _segments(start, end, excluded):
        for match in _CHUNK_RE.finditer(text, seg_start, seg_end):
            chunk = match.group(0)
            stripped = chunk.lstrip(_EDGE_PUNCTUATION)
            tok_start = match.start() + len(chunk) - len(stripped)
            raw = stripped.rstrip(_EDGE_PUNCTUATION)
            if not raw or len(raw) < min_length:
                continue
            if _NOT_A_WORD_RE.search(raw):
                continue
            yield Token(tok_start, tok_start + len(raw), raw, normalize(raw))


def word_bounds(text, lo, hi, pad=1):
    """Widens [lo, hi) so that it starts and ends on word boundaries.

    After snapping outwards to the enclosing words, the range grows by `pad`
    more words on each side. A word that an edit split or joined is then
    always inside the returned range.
    """
    size = len(text)
    lo = max(0, min(lo, size))
    hi = max(lo, min(hi, size))
    while lo > 0 and is_word_char(text[lo - 1]):
        lo -= 1
    while hi < size and is_word_char(text[hi]):
        hi += 1
    for _ in range(pad):
        while lo > 0 and not is_word_char(text[lo - 1]):
            lo -= 1
        while lo > 0 and is_word_char(text[lo - 1]):
            lo -= 1
        while hi < size and not is_word_char(text[hi]):
            hi += 1
        while hi < size and is_word_char(text[hi]):
            hi += 1
    return lo, hi
