# Copyright 2016 The xi-editor Authors.
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

import json
import logging
import queue
import sys
import threading
from collections import deque

log = logging.getLogger(__name__)


class RpcError(Exception):
    """The other side broke the protocol."""


class RpcPeer(object):
    '''
    This is a simple RPC peer with some limitations. It assumes a single-threaded
    execution model, and only allows one outgoing RPC at a time. Incoming RPC's
    are queued.

    With `idle_timeout` set (in seconds), input is read on a helper thread
    and the main loop calls `handler.idle(peer)` whenever that long passes
    without input. Plugins use it to run deferred work such as debounced
    rechecks. The idle hook never runs while waiting for an RPC response.
    '''

    def __init__(self, handler, stdin=None, stdout=None, idle_timeout=None):
        self.handler = handler
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.idle_timeout = idle_timeout
        self.pending = deque()
        self.id_counter = 0
        self.done = False
        self._lines = None

    def normalize_encoding(self, text):
        if isinstance(text, bytes):
            text = text.decode('utf-8', errors='ignore')
        return text

    def _read_lines(self):
        while True:
            line = self.stdin.readline()
            self._lines.put(line)
            if len(line) == 0:
                return

    def readline(self, idle=True):
        """Returns the next input line, calling the idle hook while waiting."""
        if self.idle_timeout is None:
            return self.stdin.readline()
        if self._lines is None:
            self._lines = queue.Queue()
            reader = threading.Thread(target=self._read_lines, name="xi-rpc-reader",
                                      daemon=True)
            reader.start()
        while idle:
            try:
                return self._lines.get(timeout=self.idle_timeout)
            except queue.Empty:
                self.idle()
        return self._lines.get()

    def idle(self):
        f = getattr(self.handler, 'idle', None)
        if f is not None:
            f(self)
        # requests that arrived during a sync rpc made from the idle hook
        while self.has_pending():
            self.handle(self.pending.popleft())

    def mainloop(self, waiting_for=None):
        while not self.done:
            line = self.readline(idle=waiting_for is None)
            if len(line) == 0:
                self.done = True
                return None
            line = self.normalize_encoding(line)
            data = json.loads(line)
            # 'id' is unique required field in response objects
            if waiting_for is not None and 'id' in data:
                if data['id'] != waiting_for:
                    raise RpcError('waiting for {}, got {}'.format(
                        waiting_for, data['id']))
                try:
                    return data['result']
                except KeyError as err:
                    log.error("key error in mainloop: %s", err)
                    return None
            self.pending.append(data)
            if waiting_for is None:
                while self.has_pending():
                    self.handle(self.pending.popleft())

    def handle(self, data):
        req_id = data.get('id', None)
        method = data['method']
        params = data['params'] or {}
        f = getattr(self.handler, method, None)
        if f is None:
            log.warning("plugin handler has no method for %s", method)
            return

        result = f(self, **params)

        if result is not None:
            if req_id is None:
                raise RpcError('unexpected return value on method ' + method)
            if hasattr(result, 'to_dict'):
                result = result.to_dict()
            resp = {'result': result, 'id': req_id}
            self.send(resp)
        elif req_id is not None:
            raise RpcError('expected return value for method: ' + method + ' id: ' + str(req_id))

    def send(self, data):
        self.stdout.write(json.dumps(data))
        self.stdout.write('\n')
        self.stdout.flush()

    def send_rpc(self, method, params, req_id=None):
        req = {'method': method, 'params': params}
        if req_id is not None:
            req['id'] = req_id
        self.send(req)

    def send_rpc_sync(self, method, params):
        req_id = self.id_counter
        self.id_counter += 1
        self.send_rpc(method, params, req_id)
        return self.mainloop(waiting_for=req_id)

    def has_pending(self):
        return len(self.pending) != 0
