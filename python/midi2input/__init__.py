"""
midi2input - Python Package

Routes MIDI control-surface events to a user-programmable handler script.

This package provides:
- MIDI backends (JACK, ALSA sequencer via rtmidi)
- Window focus watching
- A dispatcher loop feeding events to a handler script
- CLI entry point

Example:
    from midi2input import Dispatcher, RouterConfig, ScriptHandler
    from midi2input.midi import create_backend
"""

__version__ = '1.0.0'

from .models.midi_event import MidiEvent
from .models.router_config import RouterConfig
from .core.dispatcher import Dispatcher, DispatcherState
from .handler.script import ScriptHandler

__all__ = [
    '__version__',
    'MidiEvent',
    'RouterConfig',
    'Dispatcher',
    'DispatcherState',
    'ScriptHandler',
]
