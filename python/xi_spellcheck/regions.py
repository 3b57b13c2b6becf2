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

"""Detectors for text that should never be spellchecked.

A detector is any callable taking the document text and returning an
iterable of `(start, end)` ranges. These cover the common cases for prose
written in Markdown-ish buffers; hosts can pass their own instead.
"""

import re

FENCED_BLOCK_RE = re.compile(
    r"^(?P<fence>`{3,}|~{3,})[^\n]*\n.*?(?:^(?P=fence)[ \t]*$|\Z)",
    re.MULTILINE | re.DOTALL)
INLINE_CODE_RE = re.compile(r"(`+)[^\n]*?\1")
URL_RE = re.compile(r"\b(?:[a-zA-Z][a-zA-Z0-9+.-]*://|www\.)[^\s<>()\[\]`\"']+")
EMAIL_RE = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")
LINK_TARGET_RE = re.compile(r"\]\([^)\n]*\)")


def _find(regex, text):
    return [m.span() for m in regex.finditer(text)]


def detect_fenced_blocks(text):
    return _find(FENCED_BLOCK_RE, text)


def detect_inline_code(text):
    return _find(INLINE_CODE_RE, text)


def detect_urls(text):
    return _find(URL_RE, text) + _find(EMAIL_RE, text)


def detect_link_targets(text):
    return _find(LINK_TARGET_RE, text)


def combine_detectors(*detectors):
    """Returns a detector reporting the ranges of all `detectors`."""
    def detect(text):
        ranges = []
        for detector in detectors:
            ranges.extend(detector(text))
        return ranges
    return detect


detect_markup_regions = combine_detectors(
    detect_fenced_blocks, detect_inline_code, detect_urls, detect_link_targets)
