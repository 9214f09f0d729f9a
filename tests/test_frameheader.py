import pytest

from tunebox.frameheader import (
    SLOT_TABLE,
    SIDE_BYTES_TABLE,
    BitReader,
    InvalidFrameHeader,
    MPEGVersion,
    StereoMode,
    unpack_frame_header,
    unpack_side_info,
)

JOINT_128K = bytes([0xFF, 0xFB, 0x90, 0x64])
MONO_128K = bytes([0xFF, 0xFB, 0x90, 0xC4])
MPEG2_HDR = bytes([0xFF, 0xF3, 0x90, 0xC4])


def _pack(fields):
    """Pack (value, width) pairs MSB first into bytes, zero padded."""
    bits = "".join(format(value, f"0{width}b") for value, width in fields)
    bits += "0" * (-len(bits) % 8)
    return bytes(int(bits[i:i + 8], 2) for i in range(0, len(bits), 8))


def test_bit_reader_reads_fields():
    reader = BitReader(b"\xab\xcd")
    assert reader.get_bits(4) == 0xA
    assert reader.get_bits(8) == 0xBC
    assert reader.get_bits(4) == 0xD
    assert reader.bits_used() == 16


def test_bit_reader_zero_and_past_end():
    reader = BitReader(b"\xff", 1)
    assert reader.get_bits(0) == 0
    assert reader.get_bits(4) == 0xF
    assert reader.get_bits(8) == 0xF0


def test_bit_reader_masks_width():
    reader = BitReader(b"\xff\xff\xff\xff")
    assert reader.get_bits(32) == 0
    assert reader.bits_used() == 0


def test_mpeg1_joint_header():
    h = unpack_frame_header(JOINT_128K)
    assert h.ver == MPEGVersion.MPEG1
    assert h.layer == 3
    assert h.crc == 0
    assert h.size == 4
    assert h.sample_rate() == 44100
    assert h.bitrate() == 128000
    assert h.s_mode == StereoMode.JOINT
    assert h.mode_ext == (JOINT_128K[3] >> 4) & 3
    assert h.n_chans() == 2
    assert h.samples_per_frame() == 1152
    assert h.n_slots() + SIDE_BYTES_TABLE[0][1] + 4 == SLOT_TABLE[0][0][h.br_idx]


def test_mono_header():
    h = unpack_frame_header(MONO_128K)
    assert h.s_mode == StereoMode.MONO
    assert h.n_chans() == 1
    assert h.mode_ext == 0


def test_stereo_mode_ext_cleared():
    h = unpack_frame_header(bytes([0xFF, 0xFB, 0x90, 0x34]))
    assert h.s_mode == StereoMode.STEREO
    assert h.mode_ext == 0


def test_padding_adds_one_slot():
    plain = unpack_frame_header(JOINT_128K)
    padded = unpack_frame_header(bytes([0xFF, 0xFB, 0x92, 0x64]))
    assert padded.padding_bit == 1
    assert padded.n_slots() == plain.n_slots() + 1


def test_mpeg2_header():
    h = unpack_frame_header(MPEG2_HDR)
    assert h.ver == MPEGVersion.MPEG2
    assert h.sample_rate() == 22050
    assert h.samples_per_frame() == 576


def test_crc_header():
    h = unpack_frame_header(bytes([0xFF, 0xFA, 0x90, 0x64, 0x12, 0x34]))
    assert h.crc == 1
    assert h.size == 6
    assert h.crc_word == 0x1234


def test_free_mode():
    h = unpack_frame_header(bytes([0xFF, 0xFB, 0x00, 0x64]))
    assert h.bitrate() == 0
    assert h.n_slots() == 0


@pytest.mark.parametrize(
    "buf",
    [
        bytes([0x00, 0x00, 0x90, 0x64]),
        bytes([0xFF, 0xFB, 0x9C, 0x64]),
        bytes([0xFF, 0xFB, 0xF0, 0x64]),
        bytes([0xFF, 0xF9, 0x90, 0x64]),
        bytes([0xFF, 0xFB]),
        bytes([0xFF, 0xFA, 0x90, 0x64]),
    ],
)
def test_invalid_headers(buf):
    with pytest.raises(InvalidFrameHeader):
        unpack_frame_header(buf)


def _normal_granule(part23, bigvals, gain, sfc, sfc_bits, tables, r0, r1, pre=None):
    fields = [(part23, 12), (bigvals, 9), (gain, 8), (sfc, sfc_bits), (0, 1)]
    fields += [(t, 5) for t in tables]
    fields += [(r0, 4), (r1, 3)]
    if pre is not None:
        fields.append((pre, 1))
    fields += [(1, 1), (0, 1)]
    return fields


def test_side_info_mpeg1_mono_round_trip():
    header = unpack_frame_header(MONO_128K)
    fields = [(300, 9), (5, 5), (1, 1), (0, 1), (1, 1), (0, 1)]
    fields += _normal_granule(1000, 200, 150, 9, 4, (1, 2, 3), 5, 6, pre=1)
    fields += _normal_granule(900, 100, 140, 3, 4, (7, 8, 9), 4, 2, pre=0)
    buf = _pack(fields)
    info = unpack_side_info(header, buf)
    assert info.size == len(buf)
    assert info.main_data_begin == 300
    assert info.private_bits == 5
    assert info.scfsi == [[1, 0, 1, 0]]
    first, second = info.sis[0][0], info.sis[1][0]
    assert (first.part23_length, first.n_bigvals, first.global_gain) == (1000, 200, 150)
    assert first.sf_compress == 9
    assert first.table_select == [1, 2, 3]
    assert (first.region0_count, first.region1_count) == (5, 6)
    assert first.pre_flag == 1 and first.sfact_scale == 1
    assert second.table_select == [7, 8, 9]
    assert second.pre_flag == 0


def test_side_info_window_switch_short_block():
    header = unpack_frame_header(MONO_128K)
    gran = [(500, 12), (50, 9), (100, 8), (2, 4), (1, 1), (2, 2), (0, 1),
            (4, 5), (6, 5), (1, 3), (2, 3), (3, 3), (0, 1), (0, 1), (1, 1)]
    buf = _pack([(0, 9), (0, 5), (0, 4)] + gran + gran)
    sub = unpack_side_info(header, buf).sis[0][0]
    assert sub.block_type == 2
    assert sub.table_select == [4, 6, 0]
    assert sub.sub_block_gain == [1, 2, 3]
    assert sub.region0_count == 8
    assert sub.region0_count + sub.region1_count == 20
    assert sub.count1_table_select == 1


def test_side_info_block_type_zero_clears_fields():
    header = unpack_frame_header(MONO_128K)
    gran = [(500, 12), (50, 9), (100, 8), (2, 4), (1, 1), (0, 2), (0, 1),
            (4, 5), (6, 5), (1, 3), (2, 3), (3, 3), (0, 1), (0, 1), (0, 1)]
    buf = _pack([(0, 9), (0, 5), (0, 4)] + gran + gran)
    sub = unpack_side_info(header, buf).sis[1][0]
    assert (sub.part23_length, sub.n_bigvals, sub.sf_compress) == (0, 0, 0)
    assert sub.global_gain == 100


def test_side_info_mpeg2_stereo_shape():
    header = unpack_frame_header(bytes([0xFF, 0xF3, 0x90, 0x04]))
    info = unpack_side_info(header, bytes([0xFF] * 17))
    assert info.size == 17
    assert info.main_data_begin == 0xFF
    assert len(info.sis) == 1
    assert len(info.sis[0]) == 2
    assert all(sub.pre_flag == 0 for sub in info.sis[0])


def test_side_info_too_short():
    header = unpack_frame_header(JOINT_128K)
    with pytest.raises(InvalidFrameHeader):
        unpack_side_info(header, bytes(10))