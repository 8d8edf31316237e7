"""Write BED and VCF files that describe a chain file against two assemblies."""

from __future__ import annotations

import logging
import os
from contextlib import ExitStack
from typing import BinaryIO, Union

from .chain import Chain, Strand, convert_position, load_chain_file
from .fileio import create_output
from .sequence import (
    ChromosomeNotFoundError,
    IndexedFasta,
    LiftOverError,
    reverse_acid,
    reverse_complement,
    same_acid,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_VCF_HEADER = (
    "##fileformat=VCFv4.2\n"
    '##ALT=<ID=INS,Description="Insertion">\n'
    '##ALT=<ID=DEL,Description="Deletion">\n'
    '##ALT=<ID=INDEL,Description="Insertion and deletion">\n'
    '##INFO=<ID=END,Number=1,Type=Integer,Description="End position of the variant">\n'
    '##INFO=<ID=SVTYPE,Number=1,Type=String,Description="Type of structural variant">\n'
    '##INFO=<ID=SVLEN,Number=1,Type=Integer,Description="Length of structural variant">\n'
    '##INFO=<ID=TARGET_CHROM,Number=1,Type=String,Description="Chromosome in the other assembly">\n'
    '##INFO=<ID=TARGET_POS,Number=1,Type=Integer,Description="Position in the other assembly">\n'
    '##INFO=<ID=CHAIN_ID,Number=1,Type=String,Description="Chain ID">\n'
    '##INFO=<ID=STRAND,Number=1,Type=String,Description="Strand of the new assembly">\n'
)


def write_vcf_header(writer: BinaryIO, sequence, path: PathLike) -> None:
    """Write a VCF header listing the contigs of *sequence*."""
    lines = [_VCF_HEADER, f"##reference={os.fspath(path)}\n"]
    lines.extend(f"##contig=<ID={name},length={length}>\n" for name, length in sequence.contig_list())
    lines.append("#CHROM\tPOS\tID\tREF\tALT\tQUAL\tFILTER\tINFO\n")
    writer.write("".join(lines).encode("utf-8"))


def _record(chrom: str, pos: int, ref: bytes, alt: bytes, info: str) -> bytes:
    return (
        f"{chrom}\t{pos}\t.\t".encode("utf-8")
        + ref
        + b"\t"
        + alt
        + f"\t.\t.\t{info}\n".encode("utf-8")
    )


def write_chain_vcf_entries(
    chain: Chain,
    original_sequence,
    new_sequence,
    original_vcf: BinaryIO,
    new_vcf: BinaryIO,
    sv_len: int,
) -> None:
    """Write VCF records for every difference between the aligned sequences of *chain*."""
    if chain.original_strand is not Strand.FORWARD:
        raise LiftOverError(f"Original strand of chain {chain.chain_id} must be forward")

    original = chain.original_chromosome
    new = chain.new_chromosome
    same_strand = chain.original_strand is chain.new_strand
    reverse = chain.new_strand is Strand.REVERSE
    suffix = f"CHAIN_ID={chain.chain_id};STRAND={chain.new_strand}"

    def fetch(ref_start: int, ref_end: int, new_start: int, new_end: int) -> tuple[bytes, bytes]:
        ref_data = original_sequence.get_sequence(
            original.name, *convert_position(ref_start, ref_end, original.length, chain.original_strand)
        )
        new_data = new_sequence.get_sequence(
            new.name, *convert_position(new_start, new_end, new.length, chain.new_strand)
        )
        return ref_data, new_data if same_strand else reverse_complement(new_data)

    def oriented(data: bytes) -> bytes:
        return reverse_complement(data) if reverse else data

    ref_current = chain.original_start
    new_current = chain.new_start
    for interval in chain.chain_interval:
        ref_next = ref_current + interval.size
        new_next = new_current + interval.size
        ref_data, new_data = fetch(ref_current, ref_next, new_current, new_next)

        for offset, (ref_base, new_base) in enumerate(zip(ref_data, new_data)):
            if same_acid(ref_base, new_base):
                continue
            ref_pos = offset + ref_current + 1
            new_pos = new.length - (offset + new_current + 1) + 1 if reverse else offset + new_current + 1
            original_vcf.write(
                _record(
                    original.name, ref_pos, bytes([ref_base]), bytes([new_base]),
                    f"TARGET_CHROM={new.name};TARGET_POS={new_pos};{suffix}",
                )
            )
            if reverse:
                new_ref, new_alt = reverse_acid(new_base), reverse_acid(ref_base)
            else:
                new_ref, new_alt = new_base, ref_base
            new_vcf.write(
                _record(
                    new.name, new_pos, bytes([new_ref]), bytes([new_alt]),
                    f"TARGET_CHROM={original.name};TARGET_POS={ref_pos};{suffix}",
                )
            )

        ref_current = ref_next
        new_current = new_next

        ref_next = ref_current + (interval.difference_original or 0)
        new_next = new_current + (interval.difference_new or 0)
        if ref_next == ref_current or new_next == new_current:
            ref_current -= 1
            new_current -= 1
        ref_data, new_data = fetch(ref_current, ref_next, new_current, new_next)

        if ref_data != new_data:
            if reverse:
                new_pos = new.length - (new_current + len(new_data)) + 1
            else:
                new_pos = new_current + 1
            new_ref = oriented(new_data)

            if len(ref_data) > sv_len or len(new_data) > sv_len:
                if len(ref_data) == 1:
                    sv_type, sv_type_new, length = "INS", "DEL", len(new_data)
                elif len(new_data) == 1:
                    sv_type, sv_type_new, length = "DEL", "INS", len(ref_data)
                else:
                    sv_type, sv_type_new, length = "INDEL", "INDEL", len(ref_data)
                original_vcf.write(
                    _record(
                        original.name, ref_current + 1, ref_data[0:1], f"<{sv_type}>".encode(),
                        f"END={ref_current + len(ref_data)};TARGET_CHROM={new.name};"
                        f"TARGET_POS={new_pos};SVTYPE={sv_type};SVLEN={length};{suffix}",
                    )
                )
                new_vcf.write(
                    _record(
                        new.name, new_pos, new_ref[0:1], f"<{sv_type_new}>".encode(),
                        f"END={new_pos + len(new_ref)};TARGET_CHROM={original.name};"
                        f"TARGET_POS={new_pos};SVTYPE={sv_type_new};SVLEN={length};{suffix}",
                    )
                )
            else:
                original_vcf.write(
                    _record(
                        original.name, ref_current + 1, ref_data, new_data,
                        f"TARGET_CHROM={new.name};TARGET_POS={new_pos};{suffix}",
                    )
                )
                new_vcf.write(
                    _record(
                        new.name, new_pos, new_ref, oriented(ref_data),
                        f"TARGET_CHROM={original.name};TARGET_POS={ref_current + 1};{suffix}",
                    )
                )

        ref_current = ref_next
        new_current = new_next


def chain_to_bed_vcf(
    chain_path: PathLike,
    original_fasta_path: PathLike,
    new_fasta_path: PathLike,
    original_vcf_path: PathLike,
    new_vcf_path: PathLike,
    original_bed_path: PathLike,
    new_bed_path: PathLike,
    sv_len: int,
) -> None:
    """Write unsorted BED and VCF files for both assemblies of a chain file."""
    chain_file = load_chain_file(chain_path)
    with ExitStack() as stack:
        original_sequence = stack.enter_context(IndexedFasta(original_fasta_path))
        new_sequence = stack.enter_context(IndexedFasta(new_fasta_path))

        new_vcf = stack.enter_context(create_output(new_vcf_path))
        write_vcf_header(new_vcf, new_sequence, new_fasta_path)
        new_bed = stack.enter_context(create_output(new_bed_path))
        original_vcf = stack.enter_context(create_output(original_vcf_path))
        write_vcf_header(original_vcf, original_sequence, original_fasta_path)
        original_bed = stack.enter_context(create_output(original_bed_path))

        for chain in chain_file:
            try:
                chain.check_sequence_consistency(original_sequence, new_sequence)
            except ChromosomeNotFoundError:
                logger.warning("Skip chain ID: %s", chain.chain_id)
                continue

            ref_start, ref_end = convert_position(
                chain.original_start, chain.original_end,
                chain.original_chromosome.length, chain.original_strand,
            )
            new_start, new_end = convert_position(
                chain.new_start, chain.new_end, chain.new_chromosome.length, chain.new_strand
            )
            strand = "+" if chain.original_strand is chain.new_strand else "-"

            original_bed.write(
                f"{chain.original_chromosome.name}\t{ref_start}\t{ref_end}\t"
                f"chain_id:{chain.chain_id};{chain.new_chromosome.name}:{new_start + 1}-{new_end}\t"
                f"{chain.score}\t{strand}\n".encode("utf-8")
            )
            new_bed.write(
                f"{chain.new_chromosome.name}\t{new_start}\t{new_end}\t"
                f"chain_id:{chain.chain_id};{chain.original_chromosome.name}:{ref_start + 1}-{ref_end}\t"
                f"{chain.score}\t{strand}\n".encode("utf-8")
            )

            write_chain_vcf_entries(
                chain, original_sequence, new_sequence, original_vcf, new_vcf, sv_len
            )