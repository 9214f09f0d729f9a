"""MP3 file detection and ID3 tag headers."""

from __future__ import annotations

import io
import struct
from dataclasses import dataclass
from typing import BinaryIO, Optional

ID3V1_SIZE = 128
ID3V2_HEADER_SIZE = 10

_ID3V1_FORMAT = "<3s30s30s30s4s30sB"
_ID3V2_FORMAT = "<3sBBB4s"

# Frame-sync prefixes accepted as the start of a bare MP3 stream.
_MP3_MAGICS = (b"\xff\xfb", b"\xff\xf3", b"\xff\xf2")


def _text(raw: bytes) -> str:
    return raw.split(b"\x00", 1)[0].decode("latin-1").rstrip()


@dataclass(frozen=True)
class Id3v1Tag:
    """The 128-byte ID3v1 tag found at the end of an MP3 file."""

    title: str
    artist: str
    album: str
    year: str
    comment: str
    genre: int

    @classmethod
    def from_bytes(cls, raw: bytes) -> Optional["Id3v1Tag"]:
        """Parse a tag; None if ``raw`` is too short or lacks the "TAG" marker."""
        if len(raw) < ID3V1_SIZE:
            return None
        header, title, artist, album, year, comment, genre = struct.unpack(
            _ID3V1_FORMAT, raw[:ID3V1_SIZE]
        )
        if header != b"TAG":
            return None
        return cls(
            title=_text(title),
            artist=_text(artist),
            album=_text(album),
            year=_text(year),
            comment=_text(comment),
            genre=genre,
        )


@dataclass(frozen=True)
class Id3v2Header:
    """The 10-byte header that opens an ID3v2 tag."""

    version: int
    revision: int
    flags: int
    size_bytes: bytes

    @property
    def tag_size(self) -> int:
        """Tag size decoded from its four 7-bit syncsafe bytes."""
        size = 0
        for byte in self.size_bytes:
            size = (size << 7) | (byte & 0x7F)
        return size

    @classmethod
    def from_bytes(cls, raw: bytes) -> Optional["Id3v2Header"]:
        """Parse a header; None if ``raw`` is too short or lacks the "ID3" marker."""
        if len(raw) < ID3V2_HEADER_SIZE:
            return None
        header, version, revision, flags, size = struct.unpack(
            _ID3V2_FORMAT, raw[:ID3V2_HEADER_SIZE]
        )
        if header != b"ID3":
            return None
        return cls(version=version, revision=revision, flags=flags, size_bytes=size)


def read_id3v2_header(fp: BinaryIO) -> Optional[Id3v2Header]:
    """Read the ID3v2 header at the start of ``fp``; the file is left at offset 0."""
    fp.seek(0)
    raw = fp.read(ID3V2_HEADER_SIZE)
    fp.seek(0)
    return Id3v2Header.from_bytes(raw)


def read_id3v1_tag(fp: BinaryIO) -> Optional[Id3v1Tag]:
    """Read the ID3v1 tag at the end of ``fp``; the file position is kept."""
    position = fp.tell()
    try:
        end = fp.seek(0, io.SEEK_END)
        if end < ID3V1_SIZE:
            return None
        fp.seek(end - ID3V1_SIZE)
        return Id3v1Tag.from_bytes(fp.read(ID3V1_SIZE))
    finally:
        fp.seek(position)


def is_mp3(fp: BinaryIO) -> bool:
    """True if ``fp`` starts with an MP3 frame sync or an ID3v2 tag.

    The file is left at offset 0 so no frames are missed when decoding.
    """
    fp.seek(0)
    magic = fp.read(3)
    result = False
    if len(magic) == 3:
        if magic[:2] in _MP3_MAGICS:
            result = True
        elif magic == b"ID3":
            result = read_id3v2_header(fp) is not None
    fp.seek(0)
    return result