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

"""Keeps the set of misspelled spans of open documents up to date.

A document is anything with `doc_id`, `text` and `revision` attributes.
The engine never edits it; the host tells the engine about every edit,
either directly (`on_edit`, which rechecks immediately) or debounced
(`notify_edit`, rechecked from `poll` once typing pauses).

Results are published as `SpanDelta`s. A consumer that starts from an
empty set and folds every delta with `apply_delta` always holds exactly
the engine's spans.
"""

import bisect
import functools
import logging
from collections import namedtuple

from .config import SpellcheckConfig
from .dictionary import INVALID, UNRESOLVED, DictionaryProvider, load_dictionary
from .errors import PersistenceError
from .overrides import OverrideStore, WordListStore
from .scheduler import RecheckScheduler
from .tokenizer import find_excluded_regions, normalize, tokenize, word_bounds

log = logging.getLogger(__name__)

UNINITIALIZED = 'uninitialized'
SCANNING = 'scanning'
SETTLED = 'settled'
CLOSED = 'closed'

MisspelledSpan = namedtuple('MisspelledSpan', ['start', 'end', 'word'])


class EditRange(namedtuple('EditRange', ['start', 'end', 'inserted'])):
    """`text[start:end]` of the old text was replaced by `inserted` characters."""
    __slots__ = ()

    @property
    def delta(self):
        return self.inserted - (self.end - self.start)

    @property
    def is_noop(self):
        return self.start == self.end and self.inserted == 0

    def shift(self, offset):
        """Maps a pre-edit offset to post-edit text.

        Offsets inside the replaced text collapse onto the end of the
        inserted text.
        """
        if offset <= self.start:
            return offset
        if offset >= self.end:
            return offset + self.delta
        return self.start + self.inserted

    def shift_span(self, span):
        """Maps a span (or token, or `(start, end)` range) to post-edit offsets.

        Returns None if the span overlaps the replaced text.
        """
        start, end = span[0], span[1]
        if end <= self.start:
            return span
        if start >= self.end:
            if self.delta == 0:
                return span
            return _move(span, start + self.delta, end + self.delta)
        return None

    def merge(self, later):
        """Combines this edit with one made right after it.

        `later` is in the coordinates produced by this edit; the result is a
        single edit against this edit's original text covering both.
        """
        lo = min(self.start, later.start)
        hi = max(self.start + self.inserted, later.end)
        return EditRange(lo, hi - self.delta, hi + later.delta - lo)


def _move(span, start, end):
    if isinstance(span, tuple) and hasattr(span, '_replace'):
        return span._replace(start=start, end=end)
    return (start, end)


class SpanDelta(object):
    """A change to a document's misspelled spans.

    `removed` holds spans as previously published (pre-edit offsets),
    `added` holds new spans (post-edit offsets). `edit` is the edit to apply
    to every span that was kept, or None if offsets did not move.
    """
    def __init__(self, added=(), removed=(), edit=None):
        self.added = frozenset(added)
        self.removed = frozenset(removed)
        self.edit = edit

    def __bool__(self):
        return bool(self.added or self.removed)

    def __eq__(self, other):
        if not isinstance(other, SpanDelta):
            return NotImplemented
        return (self.added, self.removed, self.edit) == (other.added, other.removed, other.edit)

    def __repr__(self):
        return "SpanDelta(added={}, removed={}, edit={})".format(
            sorted(self.added), sorted(self.removed), self.edit)


def apply_delta(spans, delta):
    """Folds `delta` into a set of spans and returns the new set."""
    kept = set(spans) - delta.removed
    if delta.edit is not None:
        kept = {delta.edit.shift_span(span) for span in kept} - {None}
    return frozenset(kept | delta.added)


class DocumentState(object):
    """What the engine knows about one document."""
    def __init__(self, doc_id):
        self.doc_id = doc_id
        self.status = UNINITIALIZED
        # sorted by offset; never overlapping
        self.spans = []
        self.unresolved = []
        self.regions = []
        self.length = 0
        self.revision = None
        # edits received but not yet rechecked, merged into one
        self.pending = None
        self.document = None
        self.needs_reresolve = False


class SpellcheckEngine(object):
    def __init__(self, provider=None, overrides=None, config=None, scheduler=None):
        self.config = config or SpellcheckConfig()
        if provider is None:
            loader = functools.partial(load_dictionary,
                                       dictionary_dirs=self.config.dictionary_dirs)
            provider = DictionaryProvider(loader=loader)
        self.provider = provider
        if overrides is None:
            storage = None
            if self.config.custom_dictionary_path:
                storage = WordListStore(self.config.custom_dictionary_path)
            overrides = OverrideStore(provider, storage)
        self.overrides = overrides
        self.scheduler = scheduler or RecheckScheduler(self.config.debounce_ms)
        self._docs = {}
        self._closed = set()
        self._listeners = []
        self._error_listeners = []
        for language in self.config.active_languages:
            self.provider.activate(language)

    # subscriptions

    def subscribe(self, callback):
        """Calls `callback(doc_id, delta)` for every published delta.

        Returns a function that removes the subscription.
        """
        self._listeners.append(callback)
        return functools.partial(_remove, self._listeners, callback)

    def subscribe_errors(self, callback):
        """Calls `callback(error)` for load, persistence and recheck failures.

        A custom dictionary that could not be read when the engine started
        is reported to the new subscriber right away.
        """
        self._error_listeners.append(callback)
        if self.overrides.load_error is not None:
            callback(self.overrides.load_error)
        return functools.partial(_remove, self._error_listeners, callback)

    def _publish(self, doc_id, delta):
        if not delta and delta.edit is None:
            return
        for callback in list(self._listeners):
            callback(doc_id, delta)

    def _report(self, error):
        for callback in list(self._error_listeners):
            callback(error)

    # queries

    @property
    def languages(self):
        return self.provider.languages

    def status(self, doc_id):
        state = self._docs.get(doc_id)
        if state is not None:
            return state.status
        return CLOSED if doc_id in self._closed else UNINITIALIZED

    def spans(self, doc_id):
        state = self._docs.get(doc_id)
        return frozenset(state.spans) if state is not None else frozenset()

    def unresolved(self, doc_id):
        state = self._docs.get(doc_id)
        return list(state.unresolved) if state is not None else []

    def suggest(self, word, limit=None):
        return self.provider.suggest(normalize(word), limit or self.config.suggestion_limit)

    # document lifecycle

    def open(self, document):
        """Starts tracking `document` and scans it."""
        self._closed.discard(document.doc_id)
        if document.doc_id not in self._docs:
            self._docs[document.doc_id] = DocumentState(document.doc_id)
        return self.full_scan(document)

    def close(self, doc_id):
        self.scheduler.cancel(doc_id)
        state = self._docs.pop(doc_id, None)
        if state is not None:
            state.status = CLOSED
            self._closed.add(doc_id)

    def shutdown(self):
        for doc_id in list(self._docs):
            self.close(doc_id)
        self.provider.shutdown()

    # scanning

    def _check(self, text, start, end, regions):
        """Resolves the tokens of text[start:end]. Returns (spans, unresolved)."""
        spans = []
        unresolved = []
        seen = {}
        for token in tokenize(text, start, end, regions, self.config.min_word_length):
            resolution = seen.get(token.normalized)
            if resolution is None:
                resolution = self.overrides.resolve(token.normalized)
                seen[token.normalized] = resolution
            if resolution == INVALID:
                spans.append(MisspelledSpan(token.start, token.end, token.raw))
            elif resolution == UNRESOLVED:
                unresolved.append(token)
        return spans, unresolved

    def full_scan(self, document):
        """Rechecks the whole document and returns its misspelled spans."""
        if document.doc_id not in self._docs:
            return self.open(document)
        state = self._docs[document.doc_id]
        previous_status = state.status
        state.status = SCANNING
        try:
            delta = self._rescan(state, document)
        except Exception as err:
            self._recheck_failed(state, err, previous_status)
            return frozenset(state.spans)
        self._publish(state.doc_id, delta)
        return frozenset(state.spans)

    def _rescan(self, state, document):
        text = document.text
        regions = find_excluded_regions(text, self.config.excluded_region_detector)
        spans, unresolved = self._check(text, 0, len(text), regions)
        old = state.spans
        if state.pending is None and state.length == len(text):
            delta = SpanDelta(set(spans) - set(old), set(old) - set(spans))
        else:
            delta = SpanDelta(spans, old, state.pending)
        self._install(state, document, spans, unresolved, regions)
        return delta

    def _install(self, state, document, spans, unresolved, regions):
        self.scheduler.cancel(state.doc_id)
        state.spans = spans
        state.unresolved = unresolved
        state.regions = regions
        state.length = len(document.text)
        state.revision = document.revision
        state.document = document
        state.pending = None
        state.status = SETTLED

    def _recheck_failed(self, state, err, previous_status=SETTLED):
        log.error("recheck of %s failed, keeping previous spans", state.doc_id,
                  exc_info=err)
        if state.pending is None and previous_status == SETTLED:
            state.status = SETTLED
        else:
            state.status = SCANNING
        self._report(err)

    def on_edit(self, document, edit):
        """Rechecks the text around `edit` right away, publishes and returns the delta.

        `edit` is an `EditRange` (or `(start, end, inserted)`) against the
        text as the engine last saw it. A document the engine has not seen
        yet is opened instead.
        """
        if document.doc_id not in self._docs:
            return SpanDelta(added=self.open(document))
        state = self._docs[document.doc_id]
        edit = EditRange(*edit)
        if state.pending is not None:
            edit = state.pending.merge(edit)
        state.pending = edit
        state.document = document
        delta = self._run(state)
        if delta is None:
            return SpanDelta()
        self._publish(state.doc_id, delta)
        return delta

    def notify_edit(self, document, edit):
        """Records `edit` and schedules a debounced recheck."""
        if document.doc_id not in self._docs:
            self.open(document)
            return
        state = self._docs[document.doc_id]
        edit = EditRange(*edit)
        if state.pending is None and edit.is_noop:
            return
        state.pending = edit if state.pending is None else state.pending.merge(edit)
        state.document = document
        state.status = SCANNING
        self.scheduler.schedule(state.doc_id, functools.partial(self._run_scheduled, state.doc_id))

    def _run_scheduled(self, doc_id):
        state = self._docs.get(doc_id)
        if state is None:
            return
        delta = self._run(state)
        if delta is not None:
            self._publish(doc_id, delta)

    def _run(self, state):
        """Rechecks the pending edit. Returns the delta, or None on failure."""
        self.scheduler.cancel(state.doc_id)
        edit = state.pending
        if edit is None or edit.is_noop:
            state.pending = None
            state.status = SETTLED
            return SpanDelta()
        state.status = SCANNING
        try:
            return self._recheck(state, state.document, edit)
        except Exception as err:
            self._recheck_failed(state, err)
            return None

    def _recheck(self, state, document, edit):
        text = document.text
        if len(text) != state.length + edit.delta:
            log.warning("%s: length %d does not match edit %r, rescanning",
                        state.doc_id, len(text), edit)
            return self._rescan(state, document)

        regions = find_excluded_regions(text, self.config.excluded_region_detector)
        lo, hi = edit.start, edit.start + edit.inserted
        # regions the edit touched keep their mapped extent so it gets rechecked
        moved = {(edit.shift(s), edit.shift(e)) for s, e in state.regions}
        changed = moved.symmetric_difference(regions)
        if changed:
            lo = min(lo, min(start for start, _ in changed))
            hi = max(hi, max(end for _, end in changed))
        lo, hi = word_bounds(text, lo, hi, pad=1)
        old_hi = hi - edit.delta

        spans, unresolved = self._check(text, lo, hi, regions)

        i = bisect.bisect_left(state.spans, (lo,))
        j = bisect.bisect_left(state.spans, (old_hi,))
        old_window = state.spans[i:j]
        new_window = set(spans)
        removed = [s for s in old_window if edit.shift_span(s) not in new_window]
        added = new_window - {edit.shift_span(s) for s in old_window}

        spans = (state.spans[:i] + spans +
                 [edit.shift_span(s) for s in state.spans[j:]])
        k = bisect.bisect_left(state.unresolved, (lo,))
        m = bisect.bisect_left(state.unresolved, (old_hi,))
        unresolved = (state.unresolved[:k] + unresolved +
                      [edit.shift_span(t) for t in state.unresolved[m:]])

        self._install(state, document, spans, unresolved, regions)
        return SpanDelta(added, removed, edit)

    def flush(self, doc_id=None):
        """Runs pending rechecks now, for one document or all of them."""
        if doc_id is None:
            states = list(self._docs.values())
        else:
            states = [self._docs[doc_id]] if doc_id in self._docs else []
        for state in states:
            if state.pending is not None:
                self._run_scheduled(state.doc_id)

    def poll(self, now=None):
        """Installs finished dictionary loads and runs due rechecks.

        Hosts call this from their event loop.
        """
        finished = self.provider.poll()
        for _, error in finished:
            if error is not None:
                self._report(error)
        if finished:
            for state in self._docs.values():
                state.needs_reresolve = True
        for state in list(self._docs.values()):
            if state.needs_reresolve:
                self._reresolve(state)
        return self.scheduler.run_due(now)

    def _reresolve(self, state):
        """Resolves tokens that were waiting on a dictionary."""
        if state.pending is not None:
            self._run_scheduled(state.doc_id)
            if state.pending is not None:
                return
        state.needs_reresolve = False
        if not state.unresolved:
            return
        added = []
        still_unresolved = []
        for token in state.unresolved:
            resolution = self.overrides.resolve(token.normalized)
            if resolution == INVALID:
                added.append(MisspelledSpan(token.start, token.end, token.raw))
            elif resolution == UNRESOLVED:
                still_unresolved.append(token)
        state.unresolved = still_unresolved
        if added:
            state.spans = sorted(state.spans + added)
            self._publish(state.doc_id, SpanDelta(added=added))

    # languages and overrides

    def toggle_language(self, language, enabled):
        """Turns a language on or off and rescans every open document."""
        if enabled:
            self.provider.activate(language)
        else:
            self.provider.deactivate(language)
        self.rescan_all()

    def rescan_all(self):
        for state in list(self._docs.values()):
            if state.document is not None:
                self.full_scan(state.document)

    def ignore_word(self, word):
        """Accepts `word` for this session and unflags it everywhere."""
        self._drop_word(self.overrides.ignore(word))

    def unignore_word(self, word):
        self.overrides.unignore(word)
        self.rescan_all()

    def add_to_custom_dictionary(self, word):
        """Accepts `word` permanently and unflags it everywhere."""
        try:
            normalized = self.overrides.add_to_custom_dictionary(word)
        except PersistenceError as err:
            log.error("%s", err)
            self._report(err)
            normalized = normalize(word)
        self._drop_word(normalized)

    def remove_from_custom_dictionary(self, word):
        try:
            self.overrides.remove_from_custom_dictionary(word)
        except PersistenceError as err:
            log.error("%s", err)
            self._report(err)
        self.rescan_all()

    def _drop_word(self, normalized):
        for state in list(self._docs.values()):
            if state.pending is not None:
                self._run_scheduled(state.doc_id)
            removed = [s for s in state.spans if normalize(s.word) == normalized]
            state.unresolved = [t for t in state.unresolved if t.normalized != normalized]
            if removed:
                state.spans = [s for s in state.spans if normalize(s.word) != normalized]
                self._publish(state.doc_id, SpanDelta(removed=removed))


def _remove(listeners, callback):
    if callback in listeners:
        listeners.remove(callback)
