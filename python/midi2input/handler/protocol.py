"""
Handler Protocol

The narrow boundary between the dispatcher and user handler logic.
"""

from abc import ABC, abstractmethod


class HostPrimitives(ABC):
    """
    Operations the host exposes to handler code.

    The handler never sees backends or transport handles, only these.
    """

    @abstractmethod
    def send(self, status: int, data1: int, data2: int) -> None:
        """Send one event on every valid backend."""
        pass

    @abstractmethod
    def run_external(self, command: str) -> bool:
        """Run a shell command, logging its output. Returns True on exit status 0."""
        pass


class MidiHandler(ABC):
    """
    Receives notifications from the dispatcher.

    Calls are made synchronously from the dispatcher's loop thread, one at
    a time. Exceptions raised here are caught and logged by the dispatcher.
    """

    @abstractmethod
    def on_midi(self, status: int, data1: int, data2: int) -> None:
        pass

    def on_focus(self, title: str) -> None:
        """Focus title changed. Default: ignored."""
        pass
