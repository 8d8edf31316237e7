import bz2
import gzip
import lzma

import pytest

from transanno.fileio import create_output, open_input


@pytest.mark.parametrize("name", ["out.txt", "out.gz", "out.bz2", "out.xz", "out.zst"])
def test_round_trip(tmp_path, name):
    path = tmp_path / name
    data = b"chain 10 chr1 100 + 0 10\nline two\n"
    with create_output(path) as writer:
        writer.write(data)
    with open_input(path) as reader:
        assert reader.read() == data


@pytest.mark.parametrize("name", ["big.gz", "big.zst", "big.txt"])
def test_large_round_trip(tmp_path, name):
    path = tmp_path / name
    data = bytes(range(256)) * 1000
    with create_output(path) as writer:
        writer.write(data[:100000])
        writer.write(data[100000:])
    with open_input(path) as reader:
        assert reader.read() == data


def test_gz_output_is_bgzf(tmp_path):
    path = tmp_path / "out.vcf.gz"
    data = b"#CHROM\tPOS\n" * 10000
    with create_output(path) as writer:
        writer.write(data)
    raw = path.read_bytes()
    assert raw[:4] == b"\x1f\x8b\x08\x04"
    assert raw[12:14] == b"BC"
    assert raw.endswith(bytes.fromhex("1f8b08040000000000ff0600424302001b0003000000000000000000"))
    assert gzip.decompress(raw) == data


def test_other_extensions_use_their_format(tmp_path):
    data = b"abc\n"
    for name, decompress in (("a.bz2", bz2.decompress), ("a.xz", lzma.decompress)):
        path = tmp_path / name
        with create_output(path) as writer:
            writer.write(data)
        assert decompress(path.read_bytes()) == data


def test_plain_output_is_uncompressed(tmp_path):
    path = tmp_path / "plain.bed"
    with create_output(path) as writer:
        writer.write(b"chr1\t0\t10\n")
    assert path.read_bytes() == b"chr1\t0\t10\n"


def test_input_detected_by_content(tmp_path):
    path = tmp_path / "data.txt"
    path.write_bytes(gzip.compress(b"compressed content\n"))
    with open_input(path) as reader:
        assert reader.read() == b"compressed content\n"


def test_readline_on_compressed_input(tmp_path):
    path = tmp_path / "lines.zst"
    with create_output(path) as writer:
        writer.write(b"first\nsecond\n")
    with open_input(path) as reader:
        assert list(reader) == [b"first\n", b"second\n"]


def test_empty_input(tmp_path):
    path = tmp_path / "empty"
    path.write_bytes(b"")
    with open_input(path) as reader:
        assert reader.read() == b""


def test_missing_input(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_input(tmp_path / "missing.txt")


def test_write_after_close_fails(tmp_path):
    writer = create_output(tmp_path / "closed.gz")
    writer.close()
    with pytest.raises(ValueError):
        writer.write(b"x")