"""Reader for the tagged, length-prefixed chunk stream of M2 files."""
import struct
from dataclasses import dataclass

from .errors import TruncatedError


@dataclass(frozen=True)
class ChunkRecord:
    """One chunk as found in the file."""

    tag: bytes
    size: int
    payload: bytes
    offset: int = 0

    @property
    def name(self) -> str:
        return self.tag.decode("ascii", errors="replace")


class ChunkReader:
    """Iterates the chunks of a buffer in file order.

    A chunk header is a 4-byte tag followed by a u32 payload size. Tags are
    not interpreted, so chunks nobody understands still come back as raw
    payloads. The iterator is single use: create a new reader per buffer.
    """

    HEADER_SIZE = 8

    def __init__(self, data: bytes, offset: int = 0):
        """Initialize reader over ``data``.

        Args:
            data: Buffer holding the chunk stream
            offset: Position of the first chunk header
        """
        self.data = data
        self.offset = offset

    def __iter__(self):
        return self

    def __next__(self) -> ChunkRecord:
        remaining = len(self.data) - self.offset
        if remaining <= 0:
            raise StopIteration

        if remaining < self.HEADER_SIZE:
            raise TruncatedError(self.HEADER_SIZE, remaining, "chunk header")

        start = self.offset
        tag = bytes(self.data[start:start + 4])
        size = struct.unpack_from("<I", self.data, start + 4)[0]

        payload_start = start + self.HEADER_SIZE
        available = len(self.data) - payload_start
        if size > available:
            raise TruncatedError(
                size, available, f"chunk {tag.decode('ascii', errors='replace')}"
            )

        self.offset = payload_start + size
        return ChunkRecord(
            tag=tag,
            size=size,
            payload=bytes(self.data[payload_start:self.offset]),
            offset=start,
        )


def write_chunk(tag: bytes, payload: bytes) -> bytes:
    """Frame ``payload`` with its tag and exact size."""
    if len(tag) != 4:
        raise ValueError(f"Chunk tag must be 4 bytes: {tag!r}")
    return tag + struct.pack("<I", len(payload)) + payload
