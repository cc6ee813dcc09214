"""The event record used to extend a TDX runtime measurement register."""

from __future__ import annotations

import struct
from dataclasses import dataclass, replace

EXTEND_DATA_SIZE = 48
_HEADER = struct.Struct(f"<IQ{EXTEND_DATA_SIZE}sII")
_U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class TdxRtmrEvent:
    """An RTMR extend request; builder methods return new events."""

    version: int = 1
    rtmr_index: int = 2
    extend_data: bytes = bytes(EXTEND_DATA_SIZE)
    event_type: int = 0
    event_data_size: int = 0
    event_data: bytes = b""

    def with_extend_data(self, extend_data: bytes) -> TdxRtmrEvent:
        """Return a copy carrying ``extend_data`` (exactly 48 bytes)."""
        if len(extend_data) != EXTEND_DATA_SIZE:
            raise ValueError(f"extend data must be {EXTEND_DATA_SIZE} bytes")
        return replace(self, extend_data=bytes(extend_data))

    def with_rtmr_index(self, rtmr_index: int) -> TdxRtmrEvent:
        """Return a copy that targets register ``rtmr_index``."""
        if not 0 <= rtmr_index <= _U64_MAX:
            raise ValueError("RTMR index must fit in 64 bits")
        return replace(self, rtmr_index=rtmr_index)

    def to_bytes(self) -> bytes:
        """Serialise as the packed record followed by the event data."""
        if self.event_data_size > len(self.event_data):
            raise ValueError("event data is shorter than event_data_size")
        header = _HEADER.pack(
            self.version,
            self.rtmr_index,
            self.extend_data,
            self.event_type,
            self.event_data_size,
        )
        return header + bytes(self.event_data[: self.event_data_size])