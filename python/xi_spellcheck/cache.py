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

import bisect
import logging

from .engine import EditRange

log = logging.getLogger(__name__)


class LineCache(object):
    """Basic access to the core's buffer.

    LineCache behaves like a list of lines. Individual lines can be accessed
    with the lines[idx] syntax. If a line is not present in the cache,
    it will be fetched, blocking the caller until it arrives.

    It is also the document the spellcheck engine reads: `doc_id` is the
    buffer id, `text` the whole buffer and `revision` the core's revision.
    """
    def __init__(self, peer, buffer_id, views, buf_size, nb_lines, rev, syntax=None,
                 *, test_data=None, path=None, config=None):
        self.buffer_id = buffer_id
        self.total_bytes = buf_size
        self.nb_lines = nb_lines
        self.revision = rev
        self.path = path
        self.syntax = syntax
        self.config = config or {}
        self.view_id = views[0]
        self.peer = peer
        if test_data is not None:
            raw_data = test_data
        else:
            raw_data = peer.get_data(self.view_id, 0, self.revision) or ''
        if isinstance(raw_data, bytes):
            raw_data = raw_data.decode('utf-8')
        # keep ends to make calculating offsets simple
        self.raw_lines = raw_data.splitlines(True) or ['']  # handle empty buffer
        self._recalculate_offsets()

    @property
    def doc_id(self):
        return self.buffer_id

    @property
    def text(self):
        if self.has_missing():
            self.get_data(self.peer, self.total_bytes)
        return ''.join(self.raw_lines)

    def _recalculate_offsets(self):
        # `offsets` count UTF-8 bytes like core does, `char_offsets` count str characters
        self.offsets = [0]
        self.char_offsets = [0]
        for line in self.raw_lines:
            self.offsets.append(self.offsets[-1] + len(line.encode('utf-8')))
            self.char_offsets.append(self.char_offsets[-1] + len(line))

    def __len__(self):
        while self.has_missing():
            self.get_data(self.peer, to_offset=self.total_bytes)
        return len(self.raw_lines)

    def __getitem__(self, idx):
        if idx >= len(self.raw_lines) and self.has_missing():
            self.get_data(self.peer, to_offset=self.total_bytes)
        # trim trailing newline
        return self.raw_lines[idx].rstrip('\n')

    def has_missing(self):
        """Returns true if the cache does not have a copy of the full buffer."""
        return self.offsets[-1] < self.total_bytes

    def char_offset(self, byte_offset):
        """Converts a byte offset from core into an offset into `text`."""
        if byte_offset > self.offsets[-1] and self.peer is not None:
            self.get_data(self.peer, byte_offset)
        idx = bisect.bisect(self.offsets[:-1], byte_offset) - 1
        in_line = self.raw_lines[idx].encode('utf-8')[:byte_offset - self.offsets[idx]]
        return self.char_offsets[idx] + len(in_line.decode('utf-8', 'ignore'))

    def byte_offset(self, char_offset):
        """Converts an offset into `text` into the byte offset core expects."""
        idx = bisect.bisect(self.char_offsets[:-1], char_offset) - 1
        in_line = self.raw_lines[idx][:char_offset - self.char_offsets[idx]]
        return self.offsets[idx] + len(in_line.encode('utf-8'))

    def apply_update(self, peer, author, rev, start, end, new_len, edit_type, text=None):
        """Applies an update from core.

        `start`, `end` and `new_len` count bytes; the returned `EditRange`
        counts characters, so it lines up with `text`.
        """
        if end > self.offsets[-1]:
            self.get_data(peer, end)
        char_start = self.char_offset(start)
        char_end = self.char_offset(end)
        self.revision = rev
        self.total_bytes += new_len - (end - start)

        if text is None and new_len > 0:
            # core leaves out the text of very large updates
            return self._refetch_edit(peer, start, new_len, char_start, char_end)
        text = text or ""
        if len(text.encode('utf-8')) != new_len:
            log.warning("update text has %d bytes, expected %d; refetching",
                        len(text.encode('utf-8')), new_len)
            return self._refetch_edit(peer, start, new_len, char_start, char_end)

        # cannot index past last offset (which is really the bounds of the buffer)
        first_changed_idx = bisect.bisect(self.offsets[:-1], start) - 1
        last_changed_idx = bisect.bisect(self.offsets[:-1], end) - 1

        orig_first_line = self.raw_lines[first_changed_idx]
        first_line_start = char_start - self.char_offsets[first_changed_idx]
        f_end = min(char_end - self.char_offsets[first_changed_idx], len(orig_first_line))
        first_line = ''.join((orig_first_line[:first_line_start], text, orig_first_line[f_end:]))

        # append remainder of last affected line, then recalculate lines in that interval
        if first_changed_idx != last_changed_idx:
            l_end = char_end - self.char_offsets[last_changed_idx]
            first_line += self.raw_lines[last_changed_idx][l_end:]
        new_lines = first_line.splitlines(True) or ['']

        self.raw_lines[first_changed_idx:last_changed_idx+1] = new_lines
        self._recalculate_offsets()
        return EditRange(char_start, char_end, len(text))

    def _refetch_edit(self, peer, start, new_len, char_start, char_end):
        self.refetch(peer)
        return EditRange(char_start, char_end, self.char_offset(start + new_len) - char_start)

    def refetch(self, peer):
        """Drops the cached text and fetches the buffer again from the start."""
        self.raw_lines = ['']
        self._recalculate_offsets()
        self.get_data(peer, self.total_bytes)

    def get_data(self, peer, to_offset):
        while to_offset > self.offsets[-1]:
            raw_data = peer.get_data(self.view_id, self.offsets[-1], self.revision)
            if not raw_data:
                log.warning("%s: no data past offset %d", self.buffer_id, self.offsets[-1])
                self.total_bytes = self.offsets[-1]
                return
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode('utf-8')
            raw_lines = raw_data.splitlines(True)

            # if current last line does not contain newline, append first new line directly
            if not self.raw_lines[-1].endswith('\n'):
                self.raw_lines[-1] += raw_lines[0]
                self.offsets[-1] += len(raw_lines[0].encode('utf-8'))
                self.char_offsets[-1] += len(raw_lines[0])
                raw_lines = raw_lines[1:]

            for line in raw_lines:
                self.offsets.append(self.offsets[-1] + len(line.encode('utf-8')))
                self.char_offsets.append(self.char_offsets[-1] + len(line))
            self.raw_lines.extend(raw_lines)
