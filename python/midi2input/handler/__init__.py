"""
Handler module for midi2input

The handler is the user-programmable part: a Python script receiving MIDI
events and focus changes, and calling back into the host to send MIDI or
run commands.
"""

from .protocol import MidiHandler, HostPrimitives
from .script import ScriptHandler
from .discovery import candidate_config_paths, find_config

__all__ = [
    'MidiHandler',
    'HostPrimitives',
    'ScriptHandler',
    'candidate_config_paths',
    'find_config',
]
