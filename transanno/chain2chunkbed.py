"""Write BED12 files describing chains and their aligned chunks, plus optional VCFs."""

from __future__ import annotations

import logging
import os
from contextlib import ExitStack
from typing import BinaryIO, Optional, Union

from .chain import Chain, Chromosome, Strand, convert_position, load_chain_file
from .chain2bedvcf import write_vcf_header
from .fileio import create_output
from .sequence import IndexedFasta, reverse_complement

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

_CHAIN_COLOR = "226,4,27"
_CHUNK_COLOR = "0,123,187"


def _strand_symbol(original_strand: Strand, new_strand: Strand) -> str:
    return "+" if original_strand is new_strand else "-"


def _write_chunk_differences(
    original_sequence,
    new_sequence,
    original_vcf: Optional[BinaryIO],
    new_vcf: Optional[BinaryIO],
    original_chromosome: Chromosome,
    original_start: int,
    original_strand: Strand,
    new_chromosome: Chromosome,
    new_start: int,
    new_strand: Strand,
    length: int,
) -> None:
    """Write one VCF record per base that differs between two aligned chunks."""
    original_data = original_sequence.get_sequence(
        original_chromosome.name, original_start, original_start + length
    )
    new_data = new_sequence.get_sequence(new_chromosome.name, new_start, new_start + length)
    if original_strand is not new_strand:
        new_data = reverse_complement(new_data)
    strand = _strand_symbol(original_strand, new_strand)

    for offset, (original_base, new_base) in enumerate(zip(original_data, new_data)):
        if original_base == new_base:
            continue
        original_char = chr(original_base)
        new_char = chr(new_base)
        info = f"STRAND={strand};TARGET_CRHOM={new_chromosome.name};TARGET_POS={new_start + offset}"
        if original_vcf is not None:
            original_vcf.write(
                f"{original_chromosome.name}\t{original_start + offset + 1}\t.\t"
                f"{original_char}\t{new_char}\t.\t.\t{info}\n".encode("utf-8")
            )
        if new_vcf is not None:
            new_vcf.write(
                f"{new_chromosome.name}\t{new_start + offset + 1}\t.\t"
                f"{new_char}\t{original_char}\t.\t.\t{info}\n".encode("utf-8")
            )


def process_chain(
    chain: Chain,
    original_sequence,
    new_sequence,
    original_bed: BinaryIO,
    new_bed: BinaryIO,
    original_vcf: Optional[BinaryIO] = None,
    new_vcf: Optional[BinaryIO] = None,
    sv_len: int = 50,
) -> None:
    """Write BED12 records for *chain* and its chunks, and VCF records for base differences.

    Raises if a chromosome of the chain is missing from, or differs in length with,
    its sequence.
    """
    chain.check_sequence_consistency(original_sequence, new_sequence)
    original = chain.original_chromosome
    new = chain.new_chromosome

    ref_start, ref_end = convert_position(
        chain.original_start, chain.original_end, original.length, chain.original_strand
    )
    new_start, new_end = convert_position(
        chain.new_start, chain.new_end, new.length, chain.new_strand
    )
    logger.debug(
        "processing chain %s / original: %s:%d-%d (%s) / new: %s:%d-%d (%s)",
        chain.chain_id, original.name, ref_start, ref_end, chain.original_strand,
        new.name, new_start, new_end, chain.new_strand,
    )

    ref_chunks: list[tuple[int, int]] = []
    new_chunks: list[tuple[int, int]] = []
    ref_current = chain.original_start
    new_current = chain.new_start
    for index, interval in enumerate(chain.chain_interval):
        ref_next = ref_current + interval.size
        new_next = new_current + interval.size
        ref_chunk = convert_position(ref_current, ref_next, original.length, chain.original_strand)
        new_chunk = convert_position(new_current, new_next, new.length, chain.new_strand)
        ref_chunks.append(ref_chunk)
        new_chunks.append(new_chunk)
        logger.debug(
            "processing chain interval %d / original: %s:%d-%d / new: %s:%d-%d",
            index, original.name, ref_chunk[0], ref_chunk[1], new.name, new_chunk[0], new_chunk[1],
        )
        _write_chunk_differences(
            original_sequence, new_sequence, original_vcf, new_vcf,
            original, ref_chunk[0], chain.original_strand,
            new, new_chunk[0], chain.new_strand,
            interval.size,
        )
        ref_current = ref_next + (interval.difference_original or 0)
        new_current = new_next + (interval.difference_new or 0)

    ref_chunks.sort()
    new_chunks.sort()

    ref_block_starts = ",".join(str(start - ref_start) for start, _ in ref_chunks)
    ref_block_sizes = ",".join(str(end - start) for start, end in ref_chunks)
    new_block_starts = ",".join(str(start - new_start) for start, _ in new_chunks)
    new_block_sizes = ",".join(str(end - start) for start, end in new_chunks)
    strand = _strand_symbol(chain.original_strand, chain.new_strand)

    original_bed.write(
        f"{original.name}\t{ref_start}\t{ref_end}\t"
        f"chain-{chain.chain_id}-{new.name}:{new_start}-{new_end}\t0\t{strand}\t"
        f"{ref_start}\t{ref_end}\t{_CHAIN_COLOR}\t{len(ref_chunks)}\t"
        f"{ref_block_sizes}\t{ref_block_starts}\n".encode("utf-8")
    )
    new_bed.write(
        f"{new.name}\t{new_start}\t{new_end}\t"
        f"chain-{chain.chain_id}-{original.name}:{ref_start}-{ref_end}\t0\t{strand}\t"
        f"{new_start}\t{new_end}\t{_CHAIN_COLOR}\t{len(new_chunks)}\t"
        f"{new_block_sizes}\t{new_block_starts}\n".encode("utf-8")
    )

    for index, ((new_a, new_b), (ref_a, ref_b)) in enumerate(zip(new_chunks, ref_chunks)):
        name_suffix = f"{chain.chain_id}_{index}"
        original_bed.write(
            f"{original.name}\t{ref_a}\t{ref_b}\t"
            f"chunk-{name_suffix}-{new.name}:{new_a}-{new_b}\t0\t{strand}\t"
            f"{ref_a}\t{ref_b}\t{_CHUNK_COLOR}\t1\t{ref_b - ref_a}\t0\n".encode("utf-8")
        )
        new_bed.write(
            f"{new.name}\t{new_a}\t{new_b}\t"
            f"chunk-{name_suffix}-{original.name}:{ref_a}-{ref_b}\t0\t{strand}\t"
            f"{new_a}\t{new_b}\t{_CHUNK_COLOR}\t1\t{new_b - new_a}\t0\n".encode("utf-8")
        )


def chain_to_chunk_bed(
    chain_path: PathLike,
    original_fasta_path: PathLike,
    new_fasta_path: PathLike,
    original_bed_path: PathLike,
    new_bed_path: PathLike,
    original_vcf_path: Optional[PathLike] = None,
    new_vcf_path: Optional[PathLike] = None,
    sv_len: int = 50,
) -> None:
    """Write unsorted chain/chunk BED files and, when paths are given, VCF files."""
    logger.debug("Original sequence: %s", original_fasta_path)
    logger.debug("     New sequence: %s", new_fasta_path)
    logger.debug("     Original BED: %s", original_bed_path)
    logger.debug("          New BED: %s", new_bed_path)
    logger.debug("     Original VCF: %s", original_vcf_path)
    logger.debug("          New VCF: %s", new_vcf_path)

    with ExitStack() as stack:
        original_sequence = stack.enter_context(IndexedFasta(original_fasta_path))
        new_sequence = stack.enter_context(IndexedFasta(new_fasta_path))
        chain_file = load_chain_file(chain_path)

        new_bed = stack.enter_context(create_output(new_bed_path))
        original_bed = stack.enter_context(create_output(original_bed_path))
        new_vcf = (
            stack.enter_context(create_output(new_vcf_path)) if new_vcf_path is not None else None
        )
        original_vcf = (
            stack.enter_context(create_output(original_vcf_path))
            if original_vcf_path is not None
            else None
        )

        if new_vcf is not None:
            write_vcf_header(new_vcf, new_sequence, new_fasta_path)
        if original_vcf is not None:
            write_vcf_header(original_vcf, original_sequence, original_fasta_path)

        for chain in chain_file:
            process_chain(
                chain, original_sequence, new_sequence,
                original_bed, new_bed, original_vcf, new_vcf, sv_len,
            )