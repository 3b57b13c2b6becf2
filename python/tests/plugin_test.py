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

import io
import json
import os

from spellcheck import Spellcheck, changed_bounds, match_case
from xi_spellcheck.config import SpellcheckConfig
from xi_spellcheck.dictionary import DictionaryProvider, WordListDictionary
from xi_spellcheck.engine import (CLOSED, EditRange, MisspelledSpan, SpanDelta,
                                  SpellcheckEngine)
from xi_spellcheck.host import start_plugin
from xi_spellcheck.rpc import RpcPeer

WORDS = ["hello", "world", "the", "quick", "brown", "fox"]


def make_plugin(debounce_ms=300):
    config = SpellcheckConfig(active_languages=['en_US'], debounce_ms=debounce_ms)
    provider = DictionaryProvider(loader=lambda lang: WordListDictionary(lang, WORDS))
    engine = SpellcheckEngine(provider=provider, config=config)
    provider.wait(5)
    engine.poll()
    return Spellcheck(engine=engine, config=config)


def initialize(text, rev=1):
    return [
        {'method': 'initialize',
         'params': {'plugin_pid': 1,
                    'buffer_info': [{'buffer_id': 'buffer-id-1',
                                     'views': ['view-id-1'],
                                     'rev': rev,
                                     'buf_size': len(text.encode('utf-8')),
                                     'nb_lines': text.count('\n') + 1,
                                     'path': '/tmp/notes.md',
                                     'syntax': 'Markdown',
                                     'config': {}}]}},
        # response to the plugin's get_data
        {'id': 0, 'result': text},
    ]


def run(plugin, messages):
    stdin = io.StringIO(''.join(json.dumps(m) + '\n' for m in messages))
    stdout = io.StringIO()
    start_plugin(plugin, idle_timeout=None, stdin=stdin, stdout=stdout)
    return [json.loads(line) for line in stdout.getvalue().splitlines()]


def sent(output, method):
    return [m['params'] for m in output if m.get('method') == method]


def test_initialize_renders_spans():
    plugin = make_plugin()
    output = run(plugin, initialize("Helo wrold"))
    assert output[0] == {'method': 'get_data', 'id': 0,
                         'params': {'view_id': 'view-id-1', 'plugin_id': 1,
                                    'offset': 0, 'max_size': 1024 * 1024, 'rev': 1}}
    assert sent(output, 'add_scopes') == [{'view_id': 'view-id-1', 'plugin_id': 1,
                                           'scopes': [['invalid.illegal.spellcheck']]}]
    assert sent(output, 'update_spans') == [
        {'view_id': 'view-id-1', 'plugin_id': 1, 'start': 0, 'len': 10, 'rev': 1,
         'spans': [{'start': 0, 'end': 4, 'scope_id': 0},
                   {'start': 5, 'end': 10, 'scope_id': 0}]}]


def test_update_and_replace_word():
    plugin = make_plugin()
    update = {'method': 'update', 'id': 1,
              'params': {'view_id': 'view-id-1', 'author': 'core', 'rev': 2,
                         'start': 1, 'end': 2, 'new_len': 2,
                         'edit_type': 'insert', 'text': 'el'}}
    replace = {'method': 'custom_command',
               'params': {'method': 'replace_word',
                          'params': {'view': 'view-id-1', 'offset': 8}}}
    output = run(plugin, initialize("Helo wrold") + [update, replace])

    assert {'result': 0, 'id': 1} in output
    updates = sent(output, 'update_spans')
    assert updates[-1] == {'view_id': 'view-id-1', 'plugin_id': 1,
                           'start': 0, 'len': 5, 'rev': 2, 'spans': []}
    edit, = sent(output, 'edit')
    assert edit['edit']['start'] == 6
    assert edit['edit']['end'] == 11
    assert edit['edit']['text'] == 'world'
    assert edit['edit']['rev'] == 2
    assert edit['edit']['author'] == 'Spellcheck'


def test_spans_and_edits_use_byte_offsets():
    plugin = make_plugin()
    # "ß" takes two bytes, so "wrold" starts at byte 8 but character 7
    replace = {'method': 'custom_command',
               'params': {'method': 'replace_word',
                          'params': {'view': 'view-id-1', 'offset': 9}}}
    output = run(plugin, initialize("Straße wrold") + [replace])
    assert sent(output, 'update_spans') == [
        {'view_id': 'view-id-1', 'plugin_id': 1, 'start': 0, 'len': 13, 'rev': 1,
         'spans': [{'start': 0, 'end': 7, 'scope_id': 0},
                   {'start': 8, 'end': 13, 'scope_id': 0}]}]
    edit, = sent(output, 'edit')
    assert edit['edit']['start'] == 8
    assert edit['edit']['end'] == 13
    assert edit['edit']['text'] == 'world'


def test_multibyte_update_maps_to_characters():
    plugin = make_plugin()
    update = {'method': 'update', 'id': 1,
              'params': {'view_id': 'view-id-1', 'author': 'core', 'rev': 2,
                         'start': 8, 'end': 13, 'new_len': 5,
                         'edit_type': 'insert', 'text': 'world'}}
    run(plugin, initialize("Straße wrold") + [update])
    plugin.engine.flush('buffer-id-1')
    assert plugin.engine.spans('buffer-id-1') == {MisspelledSpan(0, 6, "Straße")}


def test_suggest_command_answers_request():
    plugin = make_plugin()
    suggest = {'method': 'custom_command', 'id': 7,
               'params': {'method': 'suggest', 'params': {'word': 'wrold'}}}
    output = run(plugin, initialize("Helo wrold") + [suggest])
    response, = [m for m in output if m.get('id') == 7]
    assert response['result'][0] == 'world'


def test_ignore_word_command_clears_spans():
    plugin = make_plugin()
    ignore = {'method': 'custom_command',
              'params': {'method': 'ignore_word', 'params': {'word': 'Helo'}}}
    output = run(plugin, initialize("Helo wrold") + [ignore])
    assert sent(output, 'update_spans')[-1]['spans'] == []
    assert plugin.engine.spans('buffer-id-1') == {MisspelledSpan(5, 10, "wrold")}


def test_idle_runs_debounced_rechecks():
    plugin = make_plugin(debounce_ms=0)
    update = {'method': 'update', 'id': 1,
              'params': {'view_id': 'view-id-1', 'author': 'core', 'rev': 2,
                         'start': 10, 'end': 10, 'new_len': 4,
                         'edit_type': 'insert', 'text': ' teh'}}
    run(plugin, initialize("Helo wrold") + [update])
    assert len(plugin.engine.spans('buffer-id-1')) == 2
    plugin.idle()
    assert plugin.engine.spans('buffer-id-1') == {
        MisspelledSpan(0, 4, "Helo"), MisspelledSpan(5, 10, "wrold"),
        MisspelledSpan(11, 14, "teh")}


def test_did_close_closes_the_document():
    plugin = make_plugin()
    close = {'method': 'did_close', 'params': {'view_id': 'view-id-1'}}
    run(plugin, initialize("Helo wrold") + [close])
    assert plugin.engine.status('buffer-id-1') == CLOSED
    assert plugin.views == {}


def test_shutdown_stops_the_main_loop():
    plugin = make_plugin()
    shutdown = {'method': 'shutdown', 'params': {}}
    ping = {'method': 'ping', 'params': {}}
    output = run(plugin, initialize("hello") + [shutdown, ping])
    assert sent(output, 'update_spans') == []
    assert plugin.engine.status('buffer-id-1') == CLOSED


def test_changed_bounds():
    assert changed_bounds(SpanDelta()) is None
    delta = SpanDelta(added=[MisspelledSpan(10, 15, "wrold")],
                      removed=[MisspelledSpan(0, 4, "Helo")],
                      edit=EditRange(1, 2, 2))
    assert changed_bounds(delta) == (0, 15)
    assert changed_bounds(SpanDelta(edit=EditRange(3, 3, 2))) == (3, 5)


def test_match_case():
    assert match_case("Wrold", "world") == "World"
    assert match_case("WROLD", "world") == "WORLD"
    assert match_case("wrold", "world") == "world"


class IdleHandler(object):

    def __init__(self, write_end):
        self.write_end = write_end
        self.idles = 0
        self.pings = 0

    def idle(self, peer):
        self.idles += 1
        if self.idles == 1:
            self.write_end.write('{"method": "ping", "params": {}}\n')
            self.write_end.flush()
        elif self.idles == 2:
            self.write_end.close()

    def ping(self, peer):
        self.pings += 1


def test_idle_hook_runs_between_messages():
    read_fd, write_fd = os.pipe()
    stdin = os.fdopen(read_fd, 'r')
    handler = IdleHandler(os.fdopen(write_fd, 'w'))
    peer = RpcPeer(handler, stdin=stdin, stdout=io.StringIO(), idle_timeout=0.01)
    peer.mainloop()
    stdin.close()
    assert handler.pings == 1
    assert handler.idles >= 2
    assert peer.done
