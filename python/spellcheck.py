#!/usr/bin/env python3

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

from xi_spellcheck import (GlobalPlugin, SpellcheckConfig,
                           SpellcheckEngine, configure_logging, start_plugin)

SPELLCHECK_SCOPE = 'invalid.illegal.spellcheck'


class Spellcheck(GlobalPlugin):
    """Spellcheck for every open buffer.

    Edits are handed to the engine as they arrive and rechecked once
    typing pauses; the engine's deltas come back as span updates.
    """
    def __init__(self, engine=None, config=None):
        super(Spellcheck, self).__init__()
        self.config = config or SpellcheckConfig.from_env()
        self.engine = engine or SpellcheckEngine(config=self.config)
        self.views = {}
        self.has_sent_scopes = set()
        self.engine.subscribe(self.render)
        self.engine.subscribe_errors(self.report)
        self.log.info("spellchecking in %s", ', '.join(self.engine.languages) or "no languages")

    def _open(self, view):
        self.views[view.doc_id] = view
        self.engine.open(view.lines)

    def initialize(self, views):
        for view in views:
            self._open(view)

    def new_buffer(self, view):
        self._open(view)

    def did_close(self, view_id):
        for doc_id, view in list(self.views.items()):
            if view.view_id == view_id:
                del self.views[doc_id]
                self.engine.close(doc_id)

    def update(self, view, author, rev, start, end,
               new_len, edit_type, text=None, edit=None):
        # our own replacements change the text too, so they are not skipped
        if edit is None:
            self.engine.full_scan(view.lines)
        else:
            self.engine.notify_edit(view.lines, edit)
        return 0

    def idle(self):
        self.engine.poll()

    def shutdown(self):
        self.engine.shutdown()

    def render(self, doc_id, delta):
        """Sends the spans of the region a delta touched to core."""
        view = self.views.get(doc_id)
        if view is None:
            return
        bounds = changed_bounds(delta)
        if bounds is None:
            return
        lo, hi = bounds
        if doc_id not in self.has_sent_scopes:
            view.add_scopes([[SPELLCHECK_SCOPE]])
            self.has_sent_scopes.add(doc_id)
        # core counts bytes, and a span is offset relative to the group's start.
        lines = view.lines
        byte_lo = lines.byte_offset(lo)
        spans = [{'start': lines.byte_offset(s.start) - byte_lo,
                  'end': lines.byte_offset(s.end) - byte_lo,
                  'scope_id': 0}
                 for s in sorted(self.engine.spans(doc_id))
                 if lo <= s.start and s.end <= hi]
        view.update_spans(byte_lo, lines.byte_offset(hi) - byte_lo, spans, lines.revision)

    def report(self, error):
        self.log.warning("%s", error)

    # custom commands

    def ignore_word(self, word, view=None):
        self.engine.ignore_word(word)

    def add_word(self, word, view=None):
        self.engine.add_to_custom_dictionary(word)

    def remove_word(self, word, view=None):
        self.engine.remove_from_custom_dictionary(word)

    def toggle_language(self, language, enabled=True, view=None):
        self.engine.toggle_language(language, enabled)

    def suggest(self, word, limit=None, view=None):
        return self.engine.suggest(word, limit)

    def replace_word(self, view, offset, replacement=None):
        """Replaces the misspelled word at byte `offset`.

        Without a `replacement` the best suggestion is used.
        """
        self.engine.flush(view.doc_id)
        lines = view.lines
        span = misspelling_at(self.engine.spans(view.doc_id), lines.char_offset(offset))
        if span is None:
            self.log.info("no misspelled word at %d", offset)
            return
        if replacement is None:
            suggestions = self.engine.suggest(span.word, 1)
            if not suggestions:
                self.log.info("no suggestions for %r", span.word)
                return
            replacement = match_case(span.word, suggestions[0])
        edit_range = (lines.byte_offset(span.start), lines.byte_offset(span.end))
        view.edit(self.new_edit(lines.revision, edit_range, replacement))


def changed_bounds(delta):
    """Post-edit `(lo, hi)` covering every span a delta adds or removes."""
    edit = delta.edit
    ranges = [(s.start, s.end) for s in delta.added]
    for s in delta.removed:
        if edit is None:
            ranges.append((s.start, s.end))
        else:
            ranges.append((edit.shift(s.start), edit.shift(s.end)))
    if edit is not None and not edit.is_noop:
        ranges.append((edit.start, edit.start + edit.inserted))
    if not ranges:
        return None
    return min(lo for lo, _ in ranges), max(hi for _, hi in ranges)


def misspelling_at(spans, offset):
    for span in spans:
        if span.start <= offset <= span.end:
            return span
    return None


def match_case(original, suggestion):
    if original.isupper() and len(original) > 1:
        return suggestion.upper()
    if original[:1].isupper():
        return suggestion[:1].upper() + suggestion[1:]
    return suggestion


def main():
    config = SpellcheckConfig.from_env()
    configure_logging(config.log_level)
    start_plugin(Spellcheck(config=config))


if __name__ == "__main__":
    main()
