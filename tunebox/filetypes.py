"""File type recognition by extension, folder sizes and copying with progress."""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from typing import Callable, Optional

# Type codes: high nibble is the category, low nibble the entry within it.
T_BIN = 0x00
T_LRC = 0x10
T_NES = 0x20
T_SMS = 0x21
T_TEXT = 0x30
T_C = 0x31
T_H = 0x32
T_WAV = 0x40
T_MP3 = 0x41
T_APE = 0x42
T_FLAC = 0x43
T_BMP = 0x51
T_JPG = 0x52
T_JPEG = 0x53
T_GIF = 0x54
T_PNG = 0x55
T_AVI = 0x60
UNKNOWN_TYPE = 0xFF

# Progress callback mode bits.
UPDATE_NAME = 0x01
UPDATE_PERCENT = 0x02
UPDATE_FOLDER = 0x04

_FILE_TYPE_TABLE: tuple[tuple[str, ...], ...] = (
    ("BIN",),
    ("LRC",),
    ("NES", "SMS"),
    ("TXT", "C", "H"),
    ("WAV", "MP3", "OGG", "FLAC", "AAC", "WMA", "MID"),
    ("DB", "BMP", "JPG", "JPEG", "GIF", "PNG"),
    ("AVI",),
)

_MAX_NAME_SCAN = 250
_MAX_EXT_SCAN = 5
_COPY_CHUNK = 8192

ProgressFn = Callable[[Optional[str], int, int], object]


class CopyAborted(Exception):
    """Raised when the progress callback asks a copy to stop."""


@dataclass
class CopyCounters:
    """Running totals shared by the steps of a folder copy."""

    total_size: int = 0
    copied_size: int = 0


def _char_upper(c: str) -> str:
    code = ord(c)
    if code < ord("A"):
        return c
    if ord("a") <= code < 0x100:
        return chr(code - 0x20)
    return c


def file_type(name: str) -> int:
    """Classify a file name by its extension; UNKNOWN_TYPE if unrecognised."""
    if len(name) >= _MAX_NAME_SCAN - 1:
        return UNKNOWN_TYPE
    ext = None
    for back in range(1, _MAX_EXT_SCAN + 1):
        pos = len(name) - back
        if pos < 0:
            break
        if name[pos] == ".":
            ext = name[pos + 1:]
            break
    if ext is None:
        return UNKNOWN_TYPE
    ext = "".join(_char_upper(c) for c in ext[:4]) + ext[4:]
    for category, names in enumerate(_FILE_TYPE_TABLE):
        if ext in names:
            return (category << 4) | names.index(ext)
    return UNKNOWN_TYPE


def is_audio_type(code: int) -> bool:
    """True if a type code belongs to the music category."""
    return (code & 0xF0) == 0x40


def source_dir_name(path: str) -> Optional[str]:
    """Last component of a path, or None if the path is only a volume label."""
    if len(path) < 4:
        return None
    cut = max(path.rfind("/"), path.rfind("\\"))
    return path[cut + 1:]


def folder_size(path: str) -> int:
    """Total size of the files below a folder; 0 if it cannot be read."""
    try:
        entries = list(os.scandir(path))
    except OSError:
        return 0
    size = 0
    try:
        for entry in entries:
            if entry.name.startswith("."):
                continue
            if entry.is_dir():
                size += folder_size(entry.path)
            else:
                size += entry.stat().st_size
    except OSError:
        return 0
    return size


def disk_usage(path: str) -> tuple[int, int]:
    """Total and free space of the disk holding ``path``, in KB."""
    usage = shutil.disk_usage(path)
    return usage.total // 1024, usage.free // 1024


def file_copy(
    progress: ProgressFn,
    src: str,
    dst: str,
    total_size: int,
    copied_size: int,
    overwrite: bool,
) -> int:
    """Copy one file, reporting percentage progress.

    With ``total_size`` 0 the percentage covers this file alone; otherwise it
    is ``copied_size`` plus this file's progress against ``total_size``.
    Raises FileExistsError when ``dst`` exists and ``overwrite`` is false, and
    CopyAborted when the callback returns a true value after a percentage
    change. Returns the number of bytes written.
    """
    mode = "wb" if overwrite else "xb"
    written = 0
    with open(src, "rb") as fsrc, open(dst, mode) as fdst:
        if total_size == 0:
            total_size = os.fstat(fsrc.fileno()).st_size
            copied_size = 0
            percent = 0
        else:
            percent = copied_size * 100 // total_size
        progress(src, percent, UPDATE_PERCENT)
        while chunk := fsrc.read(_COPY_CHUNK):
            count = fdst.write(chunk)
            written += count
            copied_size += count
            new_percent = copied_size * 100 // total_size
            if new_percent != percent:
                percent = new_percent
                if progress(src, percent, UPDATE_PERCENT):
                    raise CopyAborted(src)
            if count < len(chunk):
                break
    return written


def folder_copy(
    progress: ProgressFn,
    src: str,
    dst: str,
    counters: CopyCounters,
    overwrite: bool,
) -> str:
    """Copy folder ``src`` into folder ``dst``; returns the created folder path.

    Entries whose names start with a dot are skipped. ``counters.copied_size``
    grows by each copied file's size.
    """
    entries = sorted(os.scandir(src), key=lambda e: e.name)
    name = source_dir_name(src)
    target = os.path.join(dst, src[0] if name is None else name)
    progress(name, 0, UPDATE_FOLDER)
    os.makedirs(target, exist_ok=True)
    for entry in entries:
        if entry.name.startswith("."):
            continue
        source_path = os.path.join(src, entry.name)
        if entry.is_dir():
            folder_copy(progress, source_path, target, counters, overwrite)
        else:
            progress(entry.name, 0, UPDATE_NAME)
            file_copy(
                progress,
                source_path,
                os.path.join(target, entry.name),
                counters.total_size,
                counters.copied_size,
                overwrite,
            )
            counters.copied_size += entry.stat().st_size
    return target


def count_audio_files(path: str) -> int:
    """Number of entries in a folder whose names mark them as music; 0 on error."""
    try:
        names = [entry.name for entry in os.scandir(path)]
    except OSError:
        return 0
    return sum(1 for name in names if is_audio_type(file_type(name)))