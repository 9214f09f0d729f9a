"""Parsing of WAV header fields used for playback timing."""

from __future__ import annotations

import struct
from dataclasses import dataclass

HEADER_READ_SIZE = 512

_RIFF_SIZE = 12
_CHUNK_HEADER_SIZE = 8
_FMT_FORMAT = "<4sIHHIIHH"
_CHUNK_FORMAT = "<4sI"
_WAVE = b"WAVE"
_DATA = b"data"
_SKIPPABLE = (b"fact", b"LIST")


class WavError(Exception):
    """Raised when a WAV file cannot be opened or parsed.

    ``code`` tells what went wrong: OPEN_FAILED, NOT_WAV or NO_DATA.
    """

    OPEN_FAILED = 1
    NOT_WAV = 2
    NO_DATA = 3

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code


@dataclass(frozen=True)
class WavInfo:
    """Format and data layout of a WAV file."""

    audio_format: int
    channels: int
    block_align: int
    data_size: int
    bitrate: int
    sample_rate: int
    bits_per_sample: int
    data_start: int

    @property
    def is_pcm(self) -> bool:
        return self.audio_format == 1

    def total_seconds(self) -> int:
        """Length of the audio in whole seconds."""
        byte_rate = self.bitrate // 8
        if byte_rate == 0:
            raise ValueError("WAV bitrate is zero")
        return self.data_size // byte_rate

    def current_second(self, position: int) -> int:
        """Playback second reached when the file is read up to byte ``position``."""
        total = self.total_seconds()
        if self.data_size == 0:
            return 0
        offset = position - self.data_start
        value = abs(offset) * total // self.data_size
        return -value if offset < 0 else value


def _chunk_at(buf: bytes, offset: int) -> tuple[bytes, int]:
    if offset < 0 or offset + _CHUNK_HEADER_SIZE > len(buf):
        raise WavError(WavError.NO_DATA, f"chunk at offset {offset} lies outside the header")
    return struct.unpack_from(_CHUNK_FORMAT, buf, offset)


def parse_wav_info(path: str) -> WavInfo:
    """Read the first 512 bytes of ``path`` and describe the WAV data.

    A "fact" or "LIST" chunk directly after "fmt " is skipped; the "data"
    chunk must follow.
    """
    try:
        with open(path, "rb") as fp:
            buf = fp.read(HEADER_READ_SIZE)
    except OSError as exc:
        raise WavError(WavError.OPEN_FAILED, f"cannot open {path}: {exc}") from exc
    if len(buf) < HEADER_READ_SIZE:
        raise WavError(
            WavError.OPEN_FAILED,
            f"header read failed: {len(buf)} of {HEADER_READ_SIZE} bytes",
        )

    if buf[8:12] != _WAVE:
        raise WavError(WavError.NOT_WAV, "not a WAVE file")

    (
        _fmt_id,
        fmt_size,
        audio_format,
        channels,
        sample_rate,
        byte_rate,
        block_align,
        bits_per_sample,
    ) = struct.unpack_from(_FMT_FORMAT, buf, _RIFF_SIZE)

    next_offset = _RIFF_SIZE + _CHUNK_HEADER_SIZE + fmt_size
    chunk_id, chunk_size = _chunk_at(buf, next_offset)
    if chunk_id in _SKIPPABLE:
        data_offset = next_offset + _CHUNK_HEADER_SIZE + chunk_size
    else:
        data_offset = next_offset

    data_id, data_size = _chunk_at(buf, data_offset)
    if data_id != _DATA:
        raise WavError(WavError.NO_DATA, f"data chunk not found at offset {data_offset}")

    return WavInfo(
        audio_format=audio_format,
        channels=channels,
        block_align=block_align,
        data_size=data_size,
        bitrate=(byte_rate * 8) & 0xFFFFFFFF,
        sample_rate=sample_rate,
        bits_per_sample=bits_per_sample,
        data_start=data_offset + _CHUNK_HEADER_SIZE,
    )