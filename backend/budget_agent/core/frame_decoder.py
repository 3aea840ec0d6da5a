"""Frame Decoder - arbitrary byte chunks -> complete SSE frames -> data payloads.

Invariants:
    - A frame ends at the first b"\\n\\n" in the accumulated buffer
    - Output is identical however the same bytes are split into chunks
    - Frames are decoded as UTF-8 only after reassembly (split code points survive)
    - A non-empty leftover at end of input is discarded, never parsed
    - Only `data:` lines are significant; the `[DONE]` sentinel is skipped

Design Decisions:
    - Byte buffer, not str buffer: decoding per chunk would corrupt multi-byte
      characters that straddle a chunk boundary
    - One decoder per stream; decode_frames() builds a fresh one each call
"""

import logging
from collections.abc import AsyncIterable, AsyncIterator

logger = logging.getLogger(__name__)

FRAME_DELIMITER = b"\n\n"
DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"


class FrameDecoder:
    """Incremental splitter for blank-line-delimited frames."""

    def __init__(self):
        self._buffer = bytearray()

    @property
    def pending(self) -> int:
        """Bytes buffered but not yet part of a complete frame."""
        return len(self._buffer)

    def feed(self, chunk: bytes) -> list[str]:
        """Append a chunk; return every frame it completed, in order."""
        self._buffer.extend(chunk)
        frames = []
        while True:
            idx = self._buffer.find(FRAME_DELIMITER)
            if idx < 0:
                break
            raw = bytes(self._buffer[:idx])
            del self._buffer[:idx + len(FRAME_DELIMITER)]
            frames.append(raw.decode("utf-8", errors="replace"))
        return frames

    def finish(self) -> int:
        """End of input. Drops any truncated trailing frame; returns its size."""
        leftover = len(self._buffer)
        if leftover and self._buffer.strip():
            logger.warning(
                "Discarding %d bytes of incomplete trailing frame", leftover,
            )
        self._buffer.clear()
        return leftover


async def decode_frames(chunks: AsyncIterable[bytes]) -> AsyncIterator[str]:
    """Lazily yield complete frames from an async byte source."""
    decoder = FrameDecoder()
    async for chunk in chunks:
        for frame in decoder.feed(chunk):
            yield frame
    decoder.finish()


def frame_payloads(frame: str) -> list[str]:
    """Extract significant payloads (data lines) from one frame."""
    payloads = []
    for line in frame.split("\n"):
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            continue
        data = line[len(DATA_PREFIX):]
        if data.startswith(" "):
            data = data[1:]
        if data.strip() == DONE_SENTINEL or not data.strip():
            continue
        payloads.append(data)
    return payloads
