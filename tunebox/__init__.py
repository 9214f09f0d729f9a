"""Audio file helpers: file types, MPEG frame headers, ID3 tags and WAV headers."""

__version__ = "0.1.0"

__all__ = ["filetypes", "frameheader", "mp3sync", "mp3file", "wavinfo"]