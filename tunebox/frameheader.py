"""MPEG audio frame header and layer 3 side information parsing."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

SYNCWORDH = 0xFF
SYNCWORDL = 0xF0

NGRANS_MPEG1 = 2
NGRANS_MPEG2 = 1
MAX_SCFBD = 4

SIBYTES_MPEG1_MONO = 17
SIBYTES_MPEG1_STEREO = 32
SIBYTES_MPEG2_MONO = 9
SIBYTES_MPEG2_STEREO = 17

# [version][sample rate index] -> Hz
SAMPLE_RATE_TABLE: tuple[tuple[int, ...], ...] = (
    (44100, 48000, 32000),
    (22050, 24000, 16000),
    (11025, 12000, 8000),
)

# [version][layer - 1][bitrate index] -> kbps; index 0 is free mode
BITRATE_TABLE: tuple[tuple[tuple[int, ...], ...], ...] = (
    (
        (0, 32, 64, 96, 128, 160, 192, 224, 256, 288, 320, 352, 384, 416, 448),
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320, 384),
        (0, 32, 40, 48, 56, 64, 80, 96, 112, 128, 160, 192, 224, 256, 320),
    ),
    (
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    ),
    (
        (0, 32, 48, 56, 64, 80, 96, 112, 128, 144, 160, 176, 192, 224, 256),
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
        (0, 8, 16, 24, 32, 40, 48, 56, 64, 80, 96, 112, 128, 144, 160),
    ),
)

# [version][layer - 1] -> samples per channel in one frame
SAMPLES_PER_FRAME_TABLE: tuple[tuple[int, ...], ...] = (
    (384, 1152, 1152),
    (384, 1152, 576),
    (384, 1152, 576),
)

# layers 1, 2, 3
BITS_PER_SLOT_TABLE: tuple[int, ...] = (32, 8, 8)

# [version][mono=0 / stereo=1] -> side info bytes
SIDE_BYTES_TABLE: tuple[tuple[int, ...], ...] = (
    (17, 32),
    (9, 17),
    (9, 17),
)

# [version][sample rate index][bitrate index] -> layer 3 frame bytes without padding
SLOT_TABLE: tuple[tuple[tuple[int, ...], ...], ...] = (
    (
        (0, 104, 130, 156, 182, 208, 261, 313, 365, 417, 522, 626, 731, 835, 1044),
        (0, 96, 120, 144, 168, 192, 240, 288, 336, 384, 480, 576, 672, 768, 960),
        (0, 144, 180, 216, 252, 288, 360, 432, 504, 576, 720, 864, 1008, 1152, 1440),
    ),
    (
        (0, 26, 52, 78, 104, 130, 156, 182, 208, 261, 313, 365, 417, 470, 522),
        (0, 24, 48, 72, 96, 120, 144, 168, 192, 240, 288, 336, 384, 432, 480),
        (0, 36, 72, 108, 144, 180, 216, 252, 288, 360, 432, 504, 576, 648, 720),
    ),
    (
        (0, 52, 104, 156, 208, 261, 313, 365, 417, 522, 626, 731, 835, 940, 1044),
        (0, 48, 96, 144, 192, 240, 288, 336, 384, 480, 576, 672, 768, 864, 960),
        (0, 72, 144, 216, 288, 360, 432, 504, 576, 720, 864, 1008, 1152, 1296, 1440),
    ),
)


@dataclass(frozen=True)
class SFBand:
    """First bin of each critical band, for long and short blocks."""

    long: tuple[int, ...]
    short: tuple[int, ...]


# [version][sample rate index]
SF_BAND_TABLE: tuple[tuple[SFBand, ...], ...] = (
    (
        SFBand(
            (0, 4, 8, 12, 16, 20, 24, 30, 36, 44, 52, 62, 74, 90, 110, 134, 162, 196, 238, 288, 342, 418, 576),
            (0, 4, 8, 12, 16, 22, 30, 40, 52, 66, 84, 106, 136, 192),
        ),
        SFBand(
            (0, 4, 8, 12, 16, 20, 24, 30, 36, 42, 50, 60, 72, 88, 106, 128, 156, 190, 230, 276, 330, 384, 576),
            (0, 4, 8, 12, 16, 22, 28, 38, 50, 64, 80, 100, 126, 192),
        ),
        SFBand(
            (0, 4, 8, 12, 16, 20, 24, 30, 36, 44, 54, 66, 82, 102, 126, 156, 194, 240, 296, 364, 448, 550, 576),
            (0, 4, 8, 12, 16, 22, 30, 42, 58, 78, 104, 138, 180, 192),
        ),
    ),
    (
        SFBand(
            (0, 6, 12, 18, 24, 30, 36, 44, 54, 66, 80, 96, 116, 140, 168, 200, 238, 284, 336, 396, 464, 522, 576),
            (0, 4, 8, 12, 18, 24, 32, 42, 56, 74, 100, 132, 174, 192),
        ),
        SFBand(
            (0, 6, 12, 18, 24, 30, 36, 44, 54, 66, 80, 96, 114, 136, 162, 194, 232, 278, 332, 394, 464, 540, 576),
            (0, 4, 8, 12, 18, 26, 36, 48, 62, 80, 104, 136, 180, 192),
        ),
        SFBand(
            (0, 6, 12, 18, 24, 30, 36, 44, 54, 66, 80, 96, 116, 140, 168, 200, 238, 284, 336, 396, 464, 522, 576),
            (0, 4, 8, 12, 18, 26, 36, 48, 62, 80, 104, 134, 174, 192),
        ),
    ),
    (
        SFBand(
            (0, 6, 12, 18, 24, 30, 36, 44, 54, 66, 80, 96, 116, 140, 168, 200, 238, 284, 336, 396, 464, 522, 576),
            (0, 4, 8, 12, 18, 26, 36, 48, 62, 80, 104, 134, 174, 192),
        ),
        SFBand(
            (0, 6, 12, 18, 24, 30, 36, 44, 54, 66, 80, 96, 116, 140, 168, 200, 238, 284, 336, 396, 464, 522, 576),
            (0, 4, 8, 12, 18, 26, 36, 48, 62, 80, 104, 134, 174, 192),
        ),
        SFBand(
            (0, 12, 24, 36, 48, 60, 72, 88, 108, 132, 160, 192, 232, 280, 336, 400, 476, 566, 568, 570, 572, 574, 576),
            (0, 8, 16, 24, 36, 52, 72, 96, 124, 160, 162, 164, 166, 192),
        ),
    ),
)


class InvalidFrameHeader(ValueError):
    """Raised when bytes do not hold a usable frame header or side info."""


class MPEGVersion(IntEnum):
    MPEG1 = 0
    MPEG2 = 1
    MPEG25 = 2


class StereoMode(IntEnum):
    STEREO = 0
    JOINT = 1
    DUAL = 2
    MONO = 3


class BitReader:
    """Reads big-endian bit fields from a byte buffer; bits past the end read as 0."""

    def __init__(self, buf: bytes, n_bytes: Optional[int] = None) -> None:
        limit = len(buf) if n_bytes is None else min(n_bytes, len(buf))
        self._data = bytes(buf[:limit])
        self._pos = 0

    def get_bits(self, n: int) -> int:
        """Return the next ``n`` bits (``n`` taken modulo 32) as an unsigned int."""
        n &= 0x1F
        value = 0
        for _ in range(n):
            byte_index, bit_index = divmod(self._pos, 8)
            bit = 0
            if byte_index < len(self._data):
                bit = (self._data[byte_index] >> (7 - bit_index)) & 1
            value = (value << 1) | bit
            self._pos += 1
        return value

    def bits_used(self) -> int:
        """Number of bits read so far."""
        return self._pos


@dataclass
class FrameHeader:
    """Fields of one MPEG audio frame header."""

    ver: MPEGVersion
    layer: int
    crc: int
    br_idx: int
    sr_idx: int
    padding_bit: int
    private_bit: int
    s_mode: StereoMode
    mode_ext: int
    copy_flag: int
    orig_flag: int
    emphasis: int
    crc_word: int = 0
    size: int = 4

    def n_chans(self) -> int:
        return 1 if self.s_mode == StereoMode.MONO else 2

    def sample_rate(self) -> int:
        return SAMPLE_RATE_TABLE[self.ver][self.sr_idx]

    def n_grans(self) -> int:
        return NGRANS_MPEG1 if self.ver == MPEGVersion.MPEG1 else NGRANS_MPEG2

    def samples_per_frame(self) -> int:
        return SAMPLES_PER_FRAME_TABLE[self.ver][self.layer - 1]

    def bitrate(self) -> int:
        """Bitrate in bits per second; 0 in free mode."""
        return BITRATE_TABLE[self.ver][self.layer - 1][self.br_idx] * 1000

    def n_slots(self) -> int:
        """Main data bytes in this frame; 0 in free mode, where it must be measured."""
        if not self.br_idx:
            return 0
        side = SIDE_BYTES_TABLE[self.ver][0 if self.s_mode == StereoMode.MONO else 1]
        return (
            SLOT_TABLE[self.ver][self.sr_idx][self.br_idx]
            - side
            - 4
            - (2 if self.crc else 0)
            + (1 if self.padding_bit else 0)
        )

    @property
    def sf_band(self) -> SFBand:
        return SF_BAND_TABLE[self.ver][self.sr_idx]


@dataclass
class SideInfoSub:
    """Side info for one granule of one channel."""

    part23_length: int = 0
    n_bigvals: int = 0
    global_gain: int = 0
    sf_compress: int = 0
    win_switch_flag: int = 0
    block_type: int = 0
    mixed_block: int = 0
    table_select: list[int] = field(default_factory=lambda: [0, 0, 0])
    sub_block_gain: list[int] = field(default_factory=lambda: [0, 0, 0])
    region0_count: int = 0
    region1_count: int = 0
    pre_flag: int = 0
    sfact_scale: int = 0
    count1_table_select: int = 0


@dataclass
class SideInfo:
    """Layer 3 side information of one frame."""

    main_data_begin: int = 0
    private_bits: int = 0
    scfsi: list[list[int]] = field(default_factory=list)
    sis: list[list[SideInfoSub]] = field(default_factory=list)
    size: int = 0


def unpack_frame_header(buf: bytes) -> FrameHeader:
    """Parse a frame header (4 bytes, 6 with CRC) from the start of ``buf``."""
    if len(buf) < 4:
        raise InvalidFrameHeader("frame header needs at least 4 bytes")
    if (buf[0] & SYNCWORDH) != SYNCWORDH or (buf[1] & SYNCWORDL) != SYNCWORDL:
        raise InvalidFrameHeader("sync word not found")

    ver_idx = (buf[1] >> 3) & 0x03
    if ver_idx == 0:
        ver = MPEGVersion.MPEG25
    elif ver_idx & 0x01:
        ver = MPEGVersion.MPEG1
    else:
        ver = MPEGVersion.MPEG2
    layer = 4 - ((buf[1] >> 1) & 0x03)
    crc = 1 - (buf[1] & 0x01)
    br_idx = (buf[2] >> 4) & 0x0F
    sr_idx = (buf[2] >> 2) & 0x03
    s_mode = StereoMode((buf[3] >> 6) & 0x03)
    mode_ext = (buf[3] >> 4) & 0x03

    if sr_idx == 3 or layer == 4 or br_idx == 15:
        raise InvalidFrameHeader("reserved value in frame header")
    if s_mode != StereoMode.JOINT:
        mode_ext = 0

    header = FrameHeader(
        ver=ver,
        layer=layer,
        crc=crc,
        br_idx=br_idx,
        sr_idx=sr_idx,
        padding_bit=(buf[2] >> 1) & 0x01,
        private_bit=buf[2] & 0x01,
        s_mode=s_mode,
        mode_ext=mode_ext,
        copy_flag=(buf[3] >> 3) & 0x01,
        orig_flag=(buf[3] >> 2) & 0x01,
        emphasis=buf[3] & 0x03,
    )
    if crc:
        if len(buf) < 6:
            raise InvalidFrameHeader("CRC word missing")
        header.crc_word = (buf[4] << 8) | buf[5]
        header.size = 6
    return header


def unpack_side_info(header: FrameHeader, buf: bytes) -> SideInfo:
    """Parse layer 3 side info that follows ``header``."""
    mono = header.s_mode == StereoMode.MONO
    n_chans = header.n_chans()
    info = SideInfo()

    if header.ver == MPEGVersion.MPEG1:
        n_bytes = SIBYTES_MPEG1_MONO if mono else SIBYTES_MPEG1_STEREO
    else:
        n_bytes = SIBYTES_MPEG2_MONO if mono else SIBYTES_MPEG2_STEREO
    if len(buf) < n_bytes:
        raise InvalidFrameHeader(f"side info needs {n_bytes} bytes, got {len(buf)}")
    reader = BitReader(buf, n_bytes)

    if header.ver == MPEGVersion.MPEG1:
        info.main_data_begin = reader.get_bits(9)
        info.private_bits = reader.get_bits(5 if mono else 3)
        info.scfsi = [
            [reader.get_bits(1) for _ in range(MAX_SCFBD)] for _ in range(n_chans)
        ]
    else:
        info.main_data_begin = reader.get_bits(8)
        info.private_bits = reader.get_bits(1 if mono else 2)
        info.scfsi = [[0] * MAX_SCFBD for _ in range(n_chans)]

    for _ in range(header.n_grans()):
        granule = []
        for _ in range(n_chans):
            sub = SideInfoSub()
            sub.part23_length = reader.get_bits(12)
            sub.n_bigvals = reader.get_bits(9)
            sub.global_gain = reader.get_bits(8)
            sub.sf_compress = reader.get_bits(4 if header.ver == MPEGVersion.MPEG1 else 9)
            sub.win_switch_flag = reader.get_bits(1)
            if sub.win_switch_flag:
                sub.block_type = reader.get_bits(2)
                sub.mixed_block = reader.get_bits(1)
                sub.table_select = [reader.get_bits(5), reader.get_bits(5), 0]
                sub.sub_block_gain = [reader.get_bits(3) for _ in range(3)]
                if sub.block_type == 0:
                    sub.n_bigvals = 0
                    sub.part23_length = 0
                    sub.sf_compress = 0
                elif sub.block_type == 2 and sub.mixed_block == 0:
                    sub.region0_count = 8
                else:
                    sub.region0_count = 7
                sub.region1_count = 20 - sub.region0_count
            else:
                sub.table_select = [reader.get_bits(5) for _ in range(3)]
                sub.region0_count = reader.get_bits(4)
                sub.region1_count = reader.get_bits(3)
            sub.pre_flag = reader.get_bits(1) if header.ver == MPEGVersion.MPEG1 else 0
            sub.sfact_scale = reader.get_bits(1)
            sub.count1_table_select = reader.get_bits(1)
            granule.append(sub)
        info.sis.append(granule)

    info.size = n_bytes
    return info