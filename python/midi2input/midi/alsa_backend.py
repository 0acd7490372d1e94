"""
ALSA MIDI Backend

MIDI input/output backend using the ALSA sequencer through python-rtmidi.
rtmidi opens one sequencer client per direction, so patchbays (aconnect,
qjackctl, ...) show two clients with the configured name: one owning the
virtual midi_in port and one owning midi_out.
"""

import logging
from typing import Optional

try:
    import rtmidi
except ImportError:
    rtmidi = None

from .protocol import MidiBackendProtocol
from ..errors import BackendUnavailableError
from ..models.midi_event import MidiEvent
from ..models.router_config import RouterConfig

logger = logging.getLogger(__name__)


class AlsaMidiBackend(MidiBackendProtocol):
    """
    MIDI backend using the ALSA sequencer API of python-rtmidi.

    rtmidi delivers inbound messages on its own thread through a callback;
    they are queued for the dispatcher.

    Example:
        backend = AlsaMidiBackend(RouterConfig(client_name="midi2input"))
        if backend.open():
            backend.send(MidiEvent(0xB0, 7, 100))
        backend.close()
    """

    name = 'alsa'

    def __init__(self, config: Optional[RouterConfig] = None):
        if rtmidi is None:
            raise BackendUnavailableError(
                "ALSA backend not available: python-rtmidi not installed. "
                "Install with: pip install python-rtmidi"
            )
        if rtmidi.API_LINUX_ALSA not in rtmidi.get_compiled_api():
            raise BackendUnavailableError("ALSA backend not available: rtmidi was built without ALSA support")
        super().__init__(config)

        self._midi_in: Optional['rtmidi.MidiIn'] = None
        self._midi_out: Optional['rtmidi.MidiOut'] = None

    def _open_transport(self) -> None:
        client_name = self._config.client_name

        self._midi_in = rtmidi.MidiIn(rtmidi.API_LINUX_ALSA, name=client_name,
                                      queue_size_limit=self._config.queue_size)
        self._midi_in.ignore_types(sysex=True, timing=True, active_sense=True)
        self._midi_in.set_callback(self._input_callback)
        self._midi_in.open_virtual_port('midi_in')

        self._midi_out = rtmidi.MidiOut(rtmidi.API_LINUX_ALSA, name=client_name)
        self._midi_out.open_virtual_port('midi_out')

        # Installed after the ports exist: a custom callback replaces
        # rtmidi's default handler, which raises on port creation errors
        self._midi_in.set_error_callback(self._error_callback)
        self._midi_out.set_error_callback(self._error_callback)

        logger.info("Sequencer client '%s' with ports midi_in, midi_out", client_name)

    def _input_callback(self, message_and_delta, data=None) -> None:
        """rtmidi input callback - runs on rtmidi's input thread."""
        message, _delta = message_and_delta
        self._push_incoming(message)

    def _error_callback(self, error_type, message: str, data=None) -> None:
        logger.error("ALSA: %s (%s)", message, error_type)

    def _send_event(self, event: MidiEvent) -> None:
        try:
            self._midi_out.send_message(event.to_message())
        except Exception as e:
            logger.error("Failed to send %s: %s", event, e)

    def _release_transport(self) -> None:
        if self._midi_in is not None:
            try:
                self._midi_in.cancel_callback()
                self._midi_in.close_port()
                self._midi_in.delete()
            except Exception as e:
                logger.warning("Error closing ALSA input: %s", e)
        if self._midi_out is not None:
            try:
                self._midi_out.close_port()
                self._midi_out.delete()
            except Exception as e:
                logger.warning("Error closing ALSA output: %s", e)

        self._midi_in = None
        self._midi_out = None
