"""
Pytest configuration and shared fixtures

This file is automatically loaded by pytest and provides
fixtures that can be used across all test files.
"""

import pytest
from typing import List, Optional, Tuple

from midi2input.focus.watcher import FocusWatcher
from midi2input.handler.protocol import MidiHandler
from midi2input.midi.protocol import MidiBackendProtocol
from midi2input.models.midi_event import MidiEvent
from midi2input.models.router_config import RouterConfig


class FakeBackend(MidiBackendProtocol):
    """In-memory backend: tests feed bytes in and inspect what was sent."""

    def __init__(self, name: str = 'fake', config: Optional[RouterConfig] = None,
                 fail_open: bool = False):
        super().__init__(config)
        self.name = name
        self.fail_open = fail_open
        self.sent: List[MidiEvent] = []
        self.release_count = 0

    def feed(self, *messages) -> None:
        for message in messages:
            self._push_incoming(message)

    def shut_down(self, reason: str = 'test') -> None:
        self._invalidate(reason)

    def _open_transport(self) -> None:
        if self.fail_open:
            raise RuntimeError("cannot connect")

    def _release_transport(self) -> None:
        self.release_count += 1

    def _send_event(self, event: MidiEvent) -> None:
        self.sent.append(event)


class RecordingHandler(MidiHandler):
    """Handler recording every call; optional hooks run inside the calls."""

    def __init__(self):
        self.midi: List[Tuple[int, int, int]] = []
        self.focus: List[str] = []
        self.on_midi_hook = None
        self.on_focus_hook = None

    def on_midi(self, status, data1, data2):
        self.midi.append((status, data1, data2))
        if self.on_midi_hook:
            self.on_midi_hook(status, data1, data2)

    def on_focus(self, title):
        self.focus.append(title)
        if self.on_focus_hook:
            self.on_focus_hook(title)


class ScriptedFocusWatcher(FocusWatcher):
    """Focus watcher returning a scripted sequence of titles."""

    def __init__(self, titles):
        super().__init__()
        self._titles = list(titles)

    def _query(self):
        if not self._titles:
            return None
        return self._titles.pop(0)


@pytest.fixture
def fast_config():
    """Config with a short poll interval so loop tests finish quickly"""
    return RouterConfig(poll_interval=0.01, max_events_per_backend=4, queue_size=64)


@pytest.fixture
def handler():
    return RecordingHandler()


@pytest.fixture
def make_backend(fast_config):
    def factory(name='fake', valid=True):
        backend = FakeBackend(name, fast_config, fail_open=not valid)
        backend.open()
        return backend
    return factory


@pytest.fixture
def scripted_watcher():
    """Factory for focus watchers returning the given titles in order"""
    return ScriptedFocusWatcher
