"""
MIDI Event Model

A fixed three-byte MIDI message (status, data1, data2).
"""

from dataclasses import dataclass
from typing import Iterator, List, Sequence, Union

# Tune request and system real-time messages
_ONE_BYTE_STATUS = frozenset((0xF6, 0xF8, 0xF9, 0xFA, 0xFB, 0xFC, 0xFD, 0xFE, 0xFF))


@dataclass(frozen=True)
class MidiEvent:
    """
    One MIDI channel message.

    Always exactly three bytes. Variable length messages (SysEx) are not
    representable; short messages such as program change are zero-padded.

    Attributes:
        status: Status byte (e.g. 0x90 for note-on, channel 1)
        data1: First data byte (note number, controller number, ...)
        data2: Second data byte (velocity, controller value, ...)
    """
    status: int
    data1: int = 0
    data2: int = 0

    def __post_init__(self):
        for name in ('status', 'data1', 'data2'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{name} must be an int, got {value!r}")
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} out of byte range: {value}")

    @classmethod
    def from_bytes(cls, data: Union[bytes, bytearray, Sequence[int]]) -> 'MidiEvent':
        """
        Create an event from raw transport bytes.

        Args:
            data: 1 to 3 bytes as delivered by the transport

        Raises:
            ValueError: If the message is empty or longer than 3 bytes
        """
        raw = bytes(data)
        if not raw:
            raise ValueError("empty MIDI message")
        if len(raw) > 3:
            raise ValueError(f"MIDI message too long ({len(raw)} bytes), only 3-byte events are supported")
        raw = raw.ljust(3, b'\x00')
        return cls(raw[0], raw[1], raw[2])

    @classmethod
    def from_sequence(cls, values: Sequence[Union[int, float]]) -> 'MidiEvent':
        """
        Create an event from a sequence of exactly three numbers.

        Floats are accepted when they hold an integral value, so handler
        scripts may pass the result of arithmetic directly.
        """
        try:
            items = list(values)
        except TypeError:
            raise ValueError(f"expected a sequence of 3 numbers, got {values!r}") from None
        if len(items) != 3:
            raise ValueError(f"expected 3 numbers, got {len(items)}")

        converted = []
        for item in items:
            if isinstance(item, float):
                if not item.is_integer():
                    raise ValueError(f"MIDI byte must be integral, got {item}")
                item = int(item)
            converted.append(item)
        return cls(*converted)

    @property
    def kind(self) -> int:
        """High nibble of the status byte (0x80 note-off, 0x90 note-on, 0xB0 CC, ...)."""
        return self.status & 0xF0

    @property
    def channel(self) -> int:
        """Low nibble of the status byte (0-based MIDI channel)."""
        return self.status & 0x0F

    def to_bytes(self) -> bytes:
        return bytes((self.status, self.data1, self.data2))

    def to_list(self) -> List[int]:
        return [self.status, self.data1, self.data2]

    @property
    def message_length(self) -> int:
        """Number of bytes this message has on the wire (1 to 3)."""
        if self.status in _ONE_BYTE_STATUS:
            return 1
        if self.kind in (0xC0, 0xD0) or self.status in (0xF1, 0xF3):
            return 2
        return 3

    def to_message(self) -> List[int]:
        """Bytes to transmit, without the zero padding of short messages."""
        return self.to_list()[:self.message_length]

    def __iter__(self) -> Iterator[int]:
        return iter((self.status, self.data1, self.data2))

    def __str__(self) -> str:
        return f"[0x{self.status:02X}, 0x{self.data1:02X}, 0x{self.data2:02X}]"
