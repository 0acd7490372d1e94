"""
Data models for midi2input.
"""

from .midi_event import MidiEvent
from .router_config import RouterConfig

__all__ = [
    'MidiEvent',
    'RouterConfig',
]
