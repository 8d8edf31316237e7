"""Opening input files with transparent decompression and creating output files."""

from __future__ import annotations

import bz2
import io
import gzip
import lzma
import os
import struct
import zlib
from pathlib import Path
from typing import BinaryIO, Union

import zstandard

PathLike = Union[str, os.PathLike]

_GZIP_MAGIC = b"\x1f\x8b"
_BZIP2_MAGIC = b"BZh"
_XZ_MAGIC = b"\xfd7zXZ\x00"
_ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"

# Largest amount of uncompressed data placed in one BGZF block.
_BGZF_BLOCK_DATA = 0xFF00
_BGZF_EOF = bytes.fromhex("1f8b08040000000000ff0600424302001b0003000000000000000000")


def open_input(path: PathLike) -> BinaryIO:
    """Open *path* for binary reading, decompressing gzip, bzip2, xz or zstd data."""
    with open(path, "rb") as probe:
        head = probe.read(6)

    if head.startswith(_GZIP_MAGIC):
        return gzip.open(path, "rb")
    if head.startswith(_BZIP2_MAGIC):
        return bz2.open(path, "rb")
    if head.startswith(_XZ_MAGIC):
        return lzma.open(path, "rb")
    if head.startswith(_ZSTD_MAGIC):
        raw = open(path, "rb")
        reader = zstandard.ZstdDecompressor().stream_reader(
            raw, read_across_frames=True, closefd=True
        )
        return io.BufferedReader(reader)
    return open(path, "rb")


def create_output(path: PathLike) -> BinaryIO:
    """Create *path* for binary writing, compressing according to its extension.

    ``.gz`` files are written in BGZF, a gzip-compatible blocked format.
    """
    suffix = Path(path).suffix
    if suffix == ".gz":
        return _BgzfWriter(open(path, "wb"))
    if suffix == ".bz2":
        return bz2.open(path, "wb")
    if suffix == ".xz":
        return lzma.open(path, "wb")
    if suffix == ".zst":
        return zstandard.ZstdCompressor().stream_writer(open(path, "wb"), closefd=True)
    return open(path, "wb")


class _BgzfWriter(io.RawIOBase):
    """Binary writer producing BGZF blocks followed by the standard EOF marker."""

    def __init__(self, raw: BinaryIO, level: int = zlib.Z_DEFAULT_COMPRESSION) -> None:
        super().__init__()
        self._raw = raw
        self._level = level
        self._pending = bytearray()

    def writable(self) -> bool:
        return True

    def write(self, data) -> int:
        if self.closed:
            raise ValueError("write to closed file")
        chunk = bytes(data)
        self._pending += chunk
        while len(self._pending) >= _BGZF_BLOCK_DATA:
            self._write_block(bytes(self._pending[:_BGZF_BLOCK_DATA]))
            del self._pending[:_BGZF_BLOCK_DATA]
        return len(chunk)

    def _write_block(self, chunk: bytes) -> None:
        compressor = zlib.compressobj(self._level, zlib.DEFLATED, -15)
        body = compressor.compress(chunk) + compressor.flush()
        block_size = len(body) + 26
        header = struct.pack(
            "<4BIBBHBBHH",
            0x1F, 0x8B, 8, 4,
            0,
            0, 0xFF,
            6,
            ord("B"), ord("C"),
            2,
            block_size - 1,
        )
        trailer = struct.pack("<II", zlib.crc32(chunk) & 0xFFFFFFFF, len(chunk))
        self._raw.write(header + body + trailer)

    def close(self) -> None:
        if self.closed:
            return
        try:
            if self._pending:
                self._write_block(bytes(self._pending))
                self._pending.clear()
            self._raw.write(_BGZF_EOF)
        finally:
            self._raw.close()
            super().close()