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

import time

DEFAULT_DEBOUNCE_MS = 300


class RecheckScheduler(object):
    """Debounces rechecks: one pending task per key.

    Scheduling a key that already has a task replaces the task and restarts
    its delay. Nothing runs on its own; the owner calls `run_due` from its
    event loop.
    """
    def __init__(self, delay_ms=DEFAULT_DEBOUNCE_MS, clock=time.monotonic):
        self.delay = delay_ms / 1000.0
        self.clock = clock
        self._slots = {}

    def schedule(self, key, callback):
        self._slots[key] = (self.clock() + self.delay, callback)

    def cancel(self, key):
        return self._slots.pop(key, None) is not None

    def is_pending(self, key):
        return key in self._slots

    def next_deadline(self):
        """The earliest deadline, or None if nothing is pending."""
        if not self._slots:
            return None
        return min(deadline for deadline, _ in self._slots.values())

    def run_due(self, now=None):
        """Runs every task whose delay has elapsed. Returns how many ran."""
        if now is None:
            now = self.clock()
        due = [key for key, (deadline, _) in self._slots.items() if deadline <= now]
        for key in due:
            _, callback = self._slots.pop(key)
            callback()
        return len(due)

    def flush(self, key):
        """Runs the pending task for `key` now. Returns whether there was one."""
        slot = self._slots.pop(key, None)
        if slot is None:
            return False
        slot[1]()
        return True
