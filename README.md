# tunebox

A small toolkit with no dependencies for the file-handling side of an audio
player. It recognises files by extension, walks and copies music folders,
parses MPEG audio frame headers, and reads ID3 and WAV headers.

## Modules

### `tunebox.filetypes`

- `file_type(name)` classifies a file name by its extension. It returns a
  type code whose high nibble is the category and whose low nibble is the
  entry, for example `T_WAV` (0x40) or `T_MP3` (0x41). Unknown names give
  `UNKNOWN_TYPE` (0xFF). The extension is compared case-insensitively.
- `is_audio_type(code)` is true for codes in the music category (0x4_).
- `count_audio_files(path)` counts the entries of a folder whose names mark
  them as music. It returns 0 if the folder cannot be read.
- `source_dir_name(path)` returns the last component of a path. Paths shorter
  than four characters count as a volume label and give `None`.
- `folder_size(path)` adds up the sizes of the files below a folder. Names
  starting with a dot are skipped. It returns 0 on error.
- `disk_usage(path)` returns `(total, free)` in KB.
- `file_copy(progress, src, dst, total_size, copied_size, overwrite)` copies
  one file in 8 KB chunks and returns the number of bytes written. It calls
  `progress(name, percent, mode)` each time the percentage changes. If the
  callback returns a true value, it raises `CopyAborted`. Without
  `overwrite`, an existing `dst` raises `FileExistsError`.
- `folder_copy(progress, src, dst, counters, overwrite)` copies a folder tree
  into `dst` and returns the created folder. Running totals are kept in a
  `CopyCounters`.

### `tunebox.frameheader`

- `unpack_frame_header(buf)` parses a 4-byte frame header, or a 6-byte one
  with CRC, into a `FrameHeader`. The header exposes `n_chans()`,
  `sample_rate()`, `bitrate()`, `n_slots()` and `samples_per_frame()`.
- `unpack_side_info(header, buf)` parses layer 3 side information into a
  `SideInfo` holding a `SideInfoSub` for each granule and channel.
- `BitReader` reads big-endian bit fields with `get_bits(n)` and
  `bits_used()`.
- Bad input raises `InvalidFrameHeader`, a `ValueError`.
- The standard tables are available as module constants, for example
  `SAMPLE_RATE_TABLE`, `BITRATE_TABLE`, `SLOT_TABLE` and `SF_BAND_TABLE`.

### `tunebox.mp3sync`

- `find_sync_word(buf)` returns the offset of the first byte-aligned sync
  word, or -1 if there is none.
- `find_free_sync(buf, first_header)` measures a free-bitrate frame. It finds
  the next header that matches the first one and returns its offset, or -1.
- `frame_info(header)` and `next_frame_info(buf)` return a `FrameInfo` with
  bitrate, channels, sample rate, bits per sample (16), output sample count,
  layer and version. `next_frame_info` accepts layer 3 only.

### `tunebox.mp3file`

- `is_mp3(fp)` is true if a binary file starts with an MP3 frame sync or an
  `ID3` tag. It leaves the file at offset 0.
- `read_id3v2_header(fp)` returns an `Id3v2Header` (version, revision, flags,
  syncsafe `tag_size`) or `None`.
- `read_id3v1_tag(fp)` returns the trailing 128-byte `Id3v1Tag` (title,
  artist, album, year, comment, genre) or `None`. The file position is kept.

### `tunebox.wavinfo`

- `parse_wav_info(path)` reads the first 512 bytes of a WAV file and returns
  a `WavInfo`. One `fact` or `LIST` chunk after `fmt ` is skipped.
- `WavInfo.total_seconds()` gives the playing time in seconds.
  `WavInfo.current_second(position)` gives the second reached at a given
  file offset.
- Failures raise `WavError`, whose `code` is `OPEN_FAILED`, `NOT_WAV` or
  `NO_DATA`.

## Example

```python
from tunebox.filetypes import file_type, is_audio_type, T_MP3
from tunebox.mp3sync import find_sync_word, next_frame_info

assert file_type("song.mp3") == T_MP3
assert is_audio_type(file_type("take.WAV"))

data = b"\x00\x00\xff\xfb\x90\x64"
offset = find_sync_word(data)          # 2
info = next_frame_info(data[offset:])
print(info.samprate, info.bitrate, info.n_chans)   # 44100 128000 2
```

## What it does not do

tunebox parses and inspects files only. It does not:

- decode MP3 audio into PCM samples;
- play audio;
- record from a microphone;
- talk to any sound device.

It has no command-line program.

## Install and test

```
pip install "tunebox[test]"
pytest
```