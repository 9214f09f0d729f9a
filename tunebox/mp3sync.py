"""Locating MPEG audio sync words and reporting frame information."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .frameheader import (
    SYNCWORDH,
    SYNCWORDL,
    FrameHeader,
    InvalidFrameHeader,
    unpack_frame_header,
)

OUTPUT_BITS_PER_SAMPLE = 16


@dataclass
class FrameInfo:
    """Summary of one layer 3 frame: rates, channels and decoded sample count."""

    bitrate: int = 0
    n_chans: int = 0
    samprate: int = 0
    bits_per_sample: int = 0
    output_samps: int = 0
    layer: int = 0
    version: int = 0


def find_sync_word(buf: bytes) -> int:
    """Offset of the first byte-aligned sync word in ``buf``, or -1 if none."""
    for i in range(len(buf) - 1):
        if (buf[i] & SYNCWORDH) == SYNCWORDH and (buf[i + 1] & SYNCWORDL) == SYNCWORDL:
            return i
    return -1


def find_free_sync(buf: bytes, first_header: bytes) -> int:
    """Bytes from the start of ``buf`` to the next frame matching ``first_header``.

    Used in free-bitrate mode to measure frame length. The padding byte of
    the current frame is not counted. Returns -1 if no matching header is found.
    """
    if len(first_header) < 3:
        raise ValueError("first_header needs at least 3 bytes")
    padded = (first_header[2] >> 1) & 0x01
    pos = 0
    while True:
        offset = find_sync_word(buf[pos:])
        if offset < 0:
            return -1
        p = pos + offset
        if p + 2 >= len(buf):
            return -1
        if (
            buf[p] == first_header[0]
            and buf[p + 1] == first_header[1]
            and (buf[p + 2] & 0xFC) == (first_header[2] & 0xFC)
        ):
            return p - 1 if padded else p
        pos = p + 3


def frame_info(header: Optional[FrameHeader]) -> FrameInfo:
    """Frame information for a parsed header; all zero unless it is layer 3."""
    if header is None or header.layer != 3:
        return FrameInfo()
    n_chans = header.n_chans()
    return FrameInfo(
        bitrate=header.bitrate(),
        n_chans=n_chans,
        samprate=header.sample_rate(),
        bits_per_sample=OUTPUT_BITS_PER_SAMPLE,
        output_samps=n_chans * header.samples_per_frame(),
        layer=header.layer,
        version=int(header.ver),
    )


def next_frame_info(buf: bytes) -> FrameInfo:
    """Parse the frame header at the start of ``buf`` and describe the frame.

    Raises InvalidFrameHeader if the header is invalid or not layer 3.
    """
    header = unpack_frame_header(buf)
    if header.layer != 3:
        raise InvalidFrameHeader(f"layer {header.layer} is not supported")
    return frame_info(header)