"""
MIDI module for midi2input

Provides the MIDI backends the dispatcher multiplexes.

Backends:
    - JackMidiBackend: JACK graph client with midi_in/midi_out ports
    - AlsaMidiBackend: ALSA sequencer client via python-rtmidi

Usage:
    from midi2input.midi import create_backend

    backend = create_backend('jack', config)
    if backend.open():
        dispatcher.add_backend(backend)
"""

from typing import Dict, Optional, Type

from .protocol import MidiBackendProtocol
from .jack_backend import JackMidiBackend
from .alsa_backend import AlsaMidiBackend
from ..models.router_config import RouterConfig

BACKENDS: Dict[str, Type[MidiBackendProtocol]] = {
    JackMidiBackend.name: JackMidiBackend,
    AlsaMidiBackend.name: AlsaMidiBackend,
}


def create_backend(kind: str, config: Optional[RouterConfig] = None) -> MidiBackendProtocol:
    """
    Construct (but do not open) a backend by variant name.

    Raises:
        ValueError: Unknown backend name
        BackendUnavailableError: Transport library not installed
    """
    try:
        backend_class = BACKENDS[kind]
    except KeyError:
        raise ValueError(f"Unknown MIDI backend: {kind!r} (expected one of {sorted(BACKENDS)})") from None
    return backend_class(config)


__all__ = [
    'MidiBackendProtocol',
    'JackMidiBackend',
    'AlsaMidiBackend',
    'BACKENDS',
    'create_backend',
]
