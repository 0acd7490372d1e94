"""
MIDI Backend Protocol

Defines the interface that all MIDI backends must implement, plus the
inbound queue shared by every transport.
"""

import logging
import queue
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..models.midi_event import MidiEvent
from ..models.router_config import RouterConfig

logger = logging.getLogger(__name__)


class MidiBackendProtocol(ABC):
    """
    Abstract base class defining the MIDI backend interface.

    A backend owns one transport client with one input and one output port.
    Transport threads push inbound events with ``_push_incoming``; the
    dispatcher drains them from its own thread with ``has_pending_input``
    and ``receive``.

    ``valid`` is decided once by ``open()``. It only ever changes afterwards
    if the transport signals that the client was shut down, and then
    permanently to False.
    """

    #: Variant name, used for the dispatcher's per-variant slot
    name: str = ''

    def __init__(self, config: Optional[RouterConfig] = None):
        self._config = config or RouterConfig()
        self._valid = False
        self._opened = False
        self._closed = False
        self._incoming: queue.Queue = queue.Queue(maxsize=self._config.queue_size)
        self._notify: Optional[Callable[[], None]] = None
        self.dropped_events = 0

    @property
    def valid(self) -> bool:
        """True if the transport opened successfully and has not shut down."""
        return self._valid

    @property
    def client_name(self) -> str:
        return self._config.client_name

    def open(self) -> bool:
        """
        Acquire the transport client and its ports.

        Only the first call does any work; later calls return the
        current ``valid`` flag without reconnecting.

        Returns:
            True if the backend is valid
        """
        if self._opened:
            return self._valid
        self._opened = True
        try:
            self._open_transport()
            self._valid = True
            logger.info("%s backend ready as '%s'", self.name, self.client_name)
        except Exception as e:
            logger.error("%s backend failed to open: %s", self.name, e)
            self._valid = False
            self._release_transport()
        return self._valid

    def close(self) -> None:
        """Release the transport handle. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._valid = False
        self._release_transport()
        logger.info("%s backend closed", self.name)

    def set_notifier(self, callback: Optional[Callable[[], None]]) -> None:
        """Install a callback run (on the transport thread) after each inbound event."""
        self._notify = callback

    def has_pending_input(self) -> bool:
        """Non-blocking check for queued inbound events."""
        return not self._incoming.empty()

    def receive(self, timeout: Optional[float] = None) -> MidiEvent:
        """
        Take the next inbound event in transport-delivery order.

        Blocks until an event is available (or ``timeout`` elapses, raising
        ``queue.Empty``) when called without pending input.
        """
        return self._incoming.get(timeout=timeout)

    def send(self, event: MidiEvent) -> None:
        """
        Send one event. A silent no-op on an invalid backend.
        """
        if not self._valid:
            return
        self._send_event(event)

    def _push_incoming(self, data) -> None:
        """
        Queue raw transport bytes as an inbound event.

        Runs on the transport's thread; must not block.
        """
        try:
            event = MidiEvent.from_bytes(data)
        except ValueError:
            self.dropped_events += 1
            return
        try:
            self._incoming.put_nowait(event)
        except queue.Full:
            self.dropped_events += 1
            return
        if self._notify is not None:
            self._notify()

    def _invalidate(self, reason: str) -> None:
        """Permanently mark the backend invalid after a transport shutdown."""
        if not self._valid:
            return
        self._valid = False
        logger.error("%s backend shut down: %s", self.name, reason)

    @abstractmethod
    def _open_transport(self) -> None:
        """Create the client and ports. Raise on any failure."""
        pass

    @abstractmethod
    def _release_transport(self) -> None:
        """Close the client and drop all handles. Must tolerate partial opens."""
        pass

    @abstractmethod
    def _send_event(self, event: MidiEvent) -> None:
        """Hand one event to the transport."""
        pass
