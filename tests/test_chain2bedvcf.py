import io

import pytest

from transanno.chain import load_chain_file
from transanno.chain2bedvcf import chain_to_bed_vcf, write_chain_vcf_entries, write_vcf_header
from transanno.fileio import open_input
from transanno.sequence import (
    ChromosomeLengthMismatchError,
    IndexedFasta,
    LiftOverError,
    reverse_acid,
)


def _fasta(tmp_path, name, contigs):
    path = tmp_path / name
    body = []
    fai = []
    offset = 0
    for chrom, seq in contigs.items():
        header = f">{chrom}\n"
        offset += len(header)
        fai.append(f"{chrom}\t{len(seq)}\t{offset}\t{len(seq)}\t{len(seq) + 1}\n")
        body.append(header + seq + "\n")
        offset += len(seq) + 1
    path.write_text("".join(body))
    (tmp_path / f"{name}.fai").write_text("".join(fai))
    return path


def _records(data):
    text = data.decode() if isinstance(data, bytes) else data
    return [line.split("\t") for line in text.splitlines() if line and not line.startswith("#")]


def _info(record):
    return dict(item.split("=", 1) for item in record[7].split(";"))


def _run(tmp_path, original, new, chain_text, sv_len=50):
    orig_path = _fasta(tmp_path, "orig.fa", original)
    new_path = _fasta(tmp_path, "new.fa", new)
    chain = load_chain_file(chain_text.splitlines()).chain_list[0]
    orig_vcf, new_vcf = io.BytesIO(), io.BytesIO()
    with IndexedFasta(orig_path) as orig_seq, IndexedFasta(new_path) as new_seq:
        write_chain_vcf_entries(chain, orig_seq, new_seq, orig_vcf, new_vcf, sv_len)
    return _records(orig_vcf.getvalue()), _records(new_vcf.getvalue())


ORIG = "ACGTACGTAC"
SNV = "ACGTTCGTAC"
FWD_CHAIN = "chain 100 chr1 10 + 0 10 chr1 10 + 0 10 1\n10\n"


def test_vcf_header(tmp_path):
    path = _fasta(tmp_path, "g.fa", {"chr1": ORIG, "chr2": "AC"})
    out = io.BytesIO()
    with IndexedFasta(path) as seq:
        write_vcf_header(out, seq, "g.fa")
    text = out.getvalue().decode()
    assert text.startswith("##fileformat=VCFv4")
    assert "##reference=g.fa\n" in text
    assert f"##contig=<ID=chr1,length={len(ORIG)}>\n" in text
    assert text.index("ID=chr1,") < text.index("ID=chr2,")
    assert text.endswith("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")


def test_identical_sequences_produce_no_records(tmp_path):
    assert _run(tmp_path, {"chr1": ORIG}, {"chr1": ORIG}, FWD_CHAIN) == ([], [])


def test_case_difference_inside_block_is_ignored(tmp_path):
    assert _run(tmp_path, {"chr1": ORIG}, {"chr1": "acgtACGTAC"}, FWD_CHAIN) == ([], [])


def test_forward_snv(tmp_path):
    orig_recs, new_recs = _run(tmp_path, {"chr1": ORIG}, {"chr1": SNV}, FWD_CHAIN)
    assert len(orig_recs) == len(new_recs) == 1
    orig, new = orig_recs[0], new_recs[0]
    pos = int(orig[1])
    assert ORIG[pos - 1] != SNV[pos - 1]
    assert orig[3:5] == [ORIG[pos - 1], SNV[pos - 1]]
    assert new[3:5] == [SNV[pos - 1], ORIG[pos - 1]]
    assert _info(orig)["TARGET_POS"] == new[1]
    assert _info(new)["TARGET_POS"] == orig[1]
    assert _info(orig)["STRAND"] == "+"
    assert _info(orig)["CHAIN_ID"] == "1"


INS_ORIG = "AAAACCCCGG"
INS_NEW = "AAAATTCCCCGG"
INS_CHAIN = "chain 100 chr1 10 + 0 10 chr2 12 + 0 12 7\n4 0 2\n6\n"


def test_small_insertion_written_with_sequences(tmp_path):
    orig_recs, new_recs = _run(tmp_path, {"chr1": INS_ORIG}, {"chr2": INS_NEW}, INS_CHAIN)
    assert len(orig_recs) == len(new_recs) == 1
    orig, new = orig_recs[0], new_recs[0]
    pos = int(orig[1])
    ref, alt = orig[3], orig[4]
    assert len(alt) - len(ref) == 2
    assert ref == INS_ORIG[pos - 1 : pos - 1 + len(ref)]
    assert alt == INS_NEW[pos - 1 : pos - 1 + len(alt)]
    assert new[3:5] == [alt, ref]
    assert new[0] == "chr2"
    assert _info(orig)["TARGET_CHROM"] == "chr2"


def test_insertion_longer_than_svlen_written_as_sv(tmp_path):
    orig_recs, new_recs = _run(
        tmp_path, {"chr1": INS_ORIG}, {"chr2": INS_NEW}, INS_CHAIN, sv_len=1
    )
    orig, new = orig_recs[0], new_recs[0]
    assert orig[4] == "<INS>"
    assert new[4] == "<DEL>"
    assert _info(orig)["SVTYPE"] == "INS"
    assert _info(new)["SVTYPE"] == "DEL"
    assert _info(orig)["SVLEN"] == _info(new)["SVLEN"] == str(len(INS_NEW) - len(INS_ORIG) + 1)
    pos = int(orig[1])
    assert orig[3] == INS_ORIG[pos - 1]
    assert new[3] == INS_NEW[int(new[1]) - 1]


REV_ORIG = "ACGGTCAATG"
REV_NEW = "CAATGACCGT"
REV_CHAIN = "chain 100 chr1 10 + 0 10 chr3 10 - 0 10 9\n10\n"


def test_reverse_strand_snv(tmp_path):
    orig_recs, new_recs = _run(tmp_path, {"chr1": REV_ORIG}, {"chr3": REV_NEW}, REV_CHAIN)
    assert len(orig_recs) == len(new_recs) == 1
    orig, new = orig_recs[0], new_recs[0]
    pos = int(orig[1])
    new_pos = int(new[1])
    assert orig[3] == REV_ORIG[pos - 1]
    assert new[3] == REV_NEW[new_pos - 1]
    assert orig[4] == chr(reverse_acid(ord(new[3])))
    assert new[4] == chr(reverse_acid(ord(orig[3])))
    assert _info(orig)["TARGET_POS"] == new[1]
    assert _info(new)["TARGET_POS"] == orig[1]
    assert _info(new)["STRAND"] == "-"


def test_reverse_original_strand_rejected(tmp_path):
    with pytest.raises(LiftOverError):
        _run(
            tmp_path,
            {"chr1": ORIG},
            {"chr1": ORIG},
            "chain 100 chr1 10 - 0 10 chr1 10 + 0 10 1\n10\n",
        )


def _files(tmp_path, suffix=""):
    names = ["orig.vcf", "new.vcf", "orig.bed", "new.bed"]
    return [tmp_path / (n + suffix) for n in names]


def test_chain_to_bed_vcf_skips_missing_chromosome(tmp_path):
    orig_fa = _fasta(tmp_path, "orig.fa", {"chr1": ORIG})
    new_fa = _fasta(tmp_path, "new.fa", {"chr1": SNV})
    chain_path = tmp_path / "c.chain"
    chain_path.write_text(FWD_CHAIN + "\nchain 50 chr1 10 + 0 10 chrZ 10 + 0 10 2\n10\n")
    orig_vcf, new_vcf, orig_bed, new_bed = _files(tmp_path)
    chain_to_bed_vcf(chain_path, orig_fa, new_fa, orig_vcf, new_vcf, orig_bed, new_bed, 50)

    assert orig_bed.read_text() == "chr1\t0\t10\tchain_id:1;chr1:1-10\t100\t+\n"
    assert len(new_bed.read_text().splitlines()) == 1
    orig_text = orig_vcf.read_text()
    assert f"##reference={orig_fa}\n" in orig_text
    assert len(_records(orig_text)) == 1
    assert len(_records(new_vcf.read_text())) == 1


def test_chain_to_bed_vcf_reverse_bed_strand(tmp_path):
    orig_fa = _fasta(tmp_path, "orig.fa", {"chr1": REV_ORIG})
    new_fa = _fasta(tmp_path, "new.fa", {"chr3": REV_NEW})
    chain_path = tmp_path / "c.chain"
    chain_path.write_text(REV_CHAIN)
    orig_vcf, new_vcf, orig_bed, new_bed = _files(tmp_path, ".gz")
    chain_to_bed_vcf(chain_path, orig_fa, new_fa, orig_vcf, new_vcf, orig_bed, new_bed, 50)

    with open_input(new_bed) as handle:
        fields = handle.read().decode().rstrip("\n").split("\t")
    assert fields[0] == "chr3"
    assert fields[3].startswith("chain_id:9;chr1:")
    assert fields[5] == "-"
    with open_input(orig_vcf) as handle:
        assert len(_records(handle.read())) == 1


def test_chain_to_bed_vcf_length_mismatch(tmp_path):
    orig_fa = _fasta(tmp_path, "orig.fa", {"chr1": ORIG})
    new_fa = _fasta(tmp_path, "new.fa", {"chr1": SNV + "A"})
    chain_path = tmp_path / "c.chain"
    chain_path.write_text(FWD_CHAIN)
    orig_vcf, new_vcf, orig_bed, new_bed = _files(tmp_path)
    with pytest.raises(ChromosomeLengthMismatchError):
        chain_to_bed_vcf(chain_path, orig_fa, new_fa, orig_vcf, new_vcf, orig_bed, new_bed, 50)