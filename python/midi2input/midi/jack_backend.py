"""
JACK MIDI Backend

MIDI input/output backend using JACK Audio Connection Kit.
Registers one MIDI input and one MIDI output port on a JACK client.
"""

import logging
import queue
from typing import Optional

try:
    import jack
except (ImportError, OSError):
    # OSError: JACK-Client is installed but libjack cannot be loaded
    jack = None

from .protocol import MidiBackendProtocol
from ..errors import BackendUnavailableError
from ..models.midi_event import MidiEvent
from ..models.router_config import RouterConfig

logger = logging.getLogger(__name__)


def _log_jack_error(message: str) -> None:
    logger.error("JACK: %s", message)


def _log_jack_info(message: str) -> None:
    logger.debug("JACK: %s", message)


class JackMidiBackend(MidiBackendProtocol):
    """
    MIDI backend using JACK Audio Connection Kit.

    Inbound events are read in the JACK process callback and queued for
    the dispatcher. Outbound events are queued by ``send`` and written to
    the output port on the next process cycle.

    Example:
        backend = JackMidiBackend(RouterConfig(client_name="midi2input"))
        if backend.open():
            backend.send(MidiEvent(0x90, 60, 100))
        backend.close()
    """

    name = 'jack'

    def __init__(self, config: Optional[RouterConfig] = None):
        if jack is None:
            raise BackendUnavailableError(
                "JACK backend not available: JACK-Client library or libjack not installed. "
                "Install with: pip install JACK-Client"
            )
        super().__init__(config)

        self._jack_client: Optional['jack.Client'] = None
        self._midi_in_port = None
        self._midi_out_port = None
        self._outgoing: queue.Queue = queue.Queue(maxsize=self._config.queue_size)

    def _open_transport(self) -> None:
        jack.set_error_function(_log_jack_error)
        jack.set_info_function(_log_jack_info)

        self._jack_client = jack.Client(self._config.client_name)
        self._midi_in_port = self._jack_client.midi_inports.register('midi_in')
        self._midi_out_port = self._jack_client.midi_outports.register('midi_out')

        self._jack_client.set_process_callback(self._process_callback)
        self._jack_client.set_shutdown_callback(self._shutdown_callback)
        self._jack_client.activate()

        logger.info("Client activated: %s", self._jack_client.name)
        logger.info("MIDI input: %s, MIDI output: %s",
                    self._midi_in_port.name, self._midi_out_port.name)

        self._connect_configured_ports()

    def _connect_configured_ports(self) -> None:
        """Connect the ports listed in the config. Failures are logged only."""
        for source in self._config.jack_connect_inputs:
            try:
                self._jack_client.connect(source, self._midi_in_port)
                logger.info("Connected %s -> %s", source, self._midi_in_port.name)
            except Exception as e:
                logger.warning("Could not connect %s to our input: %s", source, e)

        for destination in self._config.jack_connect_outputs:
            try:
                self._jack_client.connect(self._midi_out_port, destination)
                logger.info("Connected %s -> %s", self._midi_out_port.name, destination)
            except Exception as e:
                logger.warning("Could not connect our output to %s: %s", destination, e)

    def _process_callback(self, frames: int) -> None:
        """
        JACK process callback - runs in real-time audio thread.
        Queues incoming events and writes all queued outgoing events.
        """
        for offset, data in self._midi_in_port.incoming_midi_events():
            self._push_incoming(data)

        self._midi_out_port.clear_buffer()
        while True:
            try:
                event = self._outgoing.get_nowait()
            except queue.Empty:
                break
            try:
                self._midi_out_port.write_midi_event(0, bytes(event.to_message()))
            except Exception:
                # Output buffer full for this cycle; can't log in callback
                self.dropped_events += 1

    def _shutdown_callback(self, status, reason: str) -> None:
        """Called by JACK when the server shuts the client down."""
        self._invalidate(f"JACK server shut down the client ({reason})")

    def _send_event(self, event: MidiEvent) -> None:
        try:
            self._outgoing.put_nowait(event)
        except queue.Full:
            self.dropped_events += 1
            logger.warning("Output queue full, dropping %s", event)

    def _release_transport(self) -> None:
        if self._jack_client is not None:
            try:
                self._jack_client.deactivate()
                self._jack_client.close()
                logger.debug("Client closed")
            except Exception as e:
                logger.warning("Error closing JACK client: %s", e)

        self._jack_client = None
        self._midi_in_port = None
        self._midi_out_port = None
