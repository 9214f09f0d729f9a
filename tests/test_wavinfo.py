import struct

import pytest

from tunebox.wavinfo import HEADER_READ_SIZE, WavError, WavInfo, parse_wav_info

SAMPLE_RATE = 44100
CHANNELS = 2
BITS = 16
BYTE_RATE = SAMPLE_RATE * CHANNELS * BITS // 8
BLOCK_ALIGN = CHANNELS * BITS // 8
DATA_SIZE = BYTE_RATE * 3


def _fmt_chunk():
    return b"fmt " + struct.pack(
        "<IHHIIHH", 16, 1, CHANNELS, SAMPLE_RATE, BYTE_RATE, BLOCK_ALIGN, BITS
    )


def _write(tmp_path, body, name="song.wav", fmt=b"WAVE", pad=True):
    content = b"RIFF" + struct.pack("<I", 36 + DATA_SIZE) + fmt + body
    if pad:
        content += bytes(max(0, HEADER_READ_SIZE + 100 - len(content)))
    path = tmp_path / name
    path.write_bytes(content)
    return str(path)


def _plain(tmp_path):
    body = _fmt_chunk() + b"data" + struct.pack("<I", DATA_SIZE)
    return _write(tmp_path, body)


def test_parses_plain_pcm_header(tmp_path):
    info = parse_wav_info(_plain(tmp_path))
    assert info.audio_format == 1
    assert info.is_pcm
    assert info.channels == CHANNELS
    assert info.sample_rate == SAMPLE_RATE
    assert info.bits_per_sample == BITS
    assert info.block_align == BLOCK_ALIGN
    assert info.data_size == DATA_SIZE
    assert info.data_start == 44


def test_cd_quality_bitrate(tmp_path):
    info = parse_wav_info(_plain(tmp_path))
    assert info.bitrate == 1411200


def test_list_chunk_is_skipped(tmp_path):
    list_payload = b"INFOxxxxxxxx"
    body = (
        _fmt_chunk()
        + b"LIST"
        + struct.pack("<I", len(list_payload))
        + list_payload
        + b"data"
        + struct.pack("<I", DATA_SIZE)
    )
    info = parse_wav_info(_write(tmp_path, body))
    plain = parse_wav_info(_plain(tmp_path))
    assert info.data_start == plain.data_start + 8 + len(list_payload)
    assert info.data_size == DATA_SIZE


def test_total_seconds(tmp_path):
    info = parse_wav_info(_plain(tmp_path))
    assert info.total_seconds() == 3


def test_current_second_bounds_and_order(tmp_path):
    info = parse_wav_info(_plain(tmp_path))
    assert info.current_second(info.data_start) == 0
    assert info.current_second(info.data_start + info.data_size) == info.total_seconds()
    positions = range(info.data_start, info.data_start + info.data_size, 50000)
    seconds = [info.current_second(p) for p in positions]
    assert seconds == sorted(seconds)


def test_total_seconds_with_zero_bitrate_raises():
    info = WavInfo(1, 1, 2, 100, 0, 8000, 16, 44)
    with pytest.raises(ValueError):
        info.total_seconds()


def test_missing_file(tmp_path):
    with pytest.raises(WavError) as err:
        parse_wav_info(str(tmp_path / "absent.wav"))
    assert err.value.code == WavError.OPEN_FAILED


def test_short_file(tmp_path):
    body = _fmt_chunk() + b"data" + struct.pack("<I", DATA_SIZE)
    path = _write(tmp_path, body, pad=False)
    with pytest.raises(WavError) as err:
        parse_wav_info(path)
    assert err.value.code == WavError.OPEN_FAILED


def test_not_wave(tmp_path):
    body = _fmt_chunk() + b"data" + struct.pack("<I", DATA_SIZE)
    with pytest.raises(WavError) as err:
        parse_wav_info(_write(tmp_path, body, fmt=b"AVI "))
    assert err.value.code == WavError.NOT_WAV


def test_missing_data_chunk(tmp_path):
    body = _fmt_chunk() + b"junk" + struct.pack("<I", 4) + b"abcd"
    with pytest.raises(WavError) as err:
        parse_wav_info(_write(tmp_path, body))
    assert err.value.code == WavError.NO_DATA