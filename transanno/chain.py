"""Chain file model and parser."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional, Union

from .fileio import open_input
from .sequence import ChromosomeLengthMismatchError, ChromosomeNotFoundError, LiftOverError


class Strand(Enum):
    FORWARD = "+"
    REVERSE = "-"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Chromosome:
    name: str
    length: int


@dataclass(frozen=True)
class ChainInterval:
    size: int
    difference_original: Optional[int] = None
    difference_new: Optional[int] = None


@dataclass
class Chain:
    score: int
    original_chromosome: Chromosome
    original_strand: Strand
    original_start: int
    original_end: int
    new_chromosome: Chromosome
    new_strand: Strand
    new_start: int
    new_end: int
    chain_id: str
    chain_interval: list[ChainInterval] = field(default_factory=list)

    def check_sequence_consistency(self, original_sequence, new_sequence) -> None:
        """Raise if a chromosome is missing from, or differs in length with, a sequence."""
        for chromosome, sequence in (
            (self.original_chromosome, original_sequence),
            (self.new_chromosome, new_sequence),
        ):
            lengths = dict(sequence.contig_list())
            if chromosome.name not in lengths:
                raise ChromosomeNotFoundError(chromosome.name)
            if lengths[chromosome.name] != chromosome.length:
                raise ChromosomeLengthMismatchError(
                    chromosome.name, chromosome.length, lengths[chromosome.name]
                )


@dataclass
class ChainFile:
    chain_list: list[Chain] = field(default_factory=list)

    def __iter__(self) -> Iterator[Chain]:
        return iter(self.chain_list)

    def __len__(self) -> int:
        return len(self.chain_list)


def convert_position(start: int, end: int, length: int, strand: Strand) -> tuple[int, int]:
    """Convert a strand-relative range to forward-strand coordinates."""
    if strand is Strand.FORWARD:
        return start, end
    return length - end, length - start


def load_chain_file(source: Union[str, os.PathLike, Iterable]) -> ChainFile:
    """Parse a chain file from a path or from an iterable of text or byte lines."""
    if isinstance(source, (str, os.PathLike)):
        with open_input(source) as handle:
            return ChainFile(list(_parse_chains(handle)))
    return ChainFile(list(_parse_chains(source)))


def _int(text: str, lineno: int) -> int:
    try:
        value = int(text)
    except ValueError as exc:
        raise LiftOverError(f"Invalid number at line {lineno}: {text}") from exc
    if value < 0:
        raise LiftOverError(f"Negative number at line {lineno}: {text}")
    return value


def _strand(text: str, lineno: int) -> Strand:
    try:
        return Strand(text)
    except ValueError as exc:
        raise LiftOverError(f"Invalid strand at line {lineno}: {text}") from exc


def _parse_header(fields: list[str], lineno: int) -> Chain:
    if len(fields) not in (12, 13):
        raise LiftOverError(f"Invalid chain header at line {lineno}")
    return Chain(
        score=_int(fields[1], lineno),
        original_chromosome=Chromosome(fields[2], _int(fields[3], lineno)),
        original_strand=_strand(fields[4], lineno),
        original_start=_int(fields[5], lineno),
        original_end=_int(fields[6], lineno),
        new_chromosome=Chromosome(fields[7], _int(fields[8], lineno)),
        new_strand=_strand(fields[9], lineno),
        new_start=_int(fields[10], lineno),
        new_end=_int(fields[11], lineno),
        chain_id=fields[12] if len(fields) == 13 else "",
    )


def _is_complete(chain: Chain) -> bool:
    if not chain.chain_interval:
        return False
    last = chain.chain_interval[-1]
    return last.difference_original is None and last.difference_new is None


def _finish(chain: Chain) -> Chain:
    if not _is_complete(chain):
        raise LiftOverError(f"Chain {chain.chain_id} does not end with a final block")
    original_span = sum(i.size + (i.difference_original or 0) for i in chain.chain_interval)
    new_span = sum(i.size + (i.difference_new or 0) for i in chain.chain_interval)
    if original_span != chain.original_end - chain.original_start:
        raise LiftOverError(f"Chain {chain.chain_id}: blocks do not fill the original range")
    if new_span != chain.new_end - chain.new_start:
        raise LiftOverError(f"Chain {chain.chain_id}: blocks do not fill the new range")
    return chain


def _parse_chains(lines: Iterable) -> Iterator[Chain]:
    current: Optional[Chain] = None
    for lineno, raw in enumerate(lines, 1):
        line = raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else raw
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if fields[0] == "chain":
            if current is not None:
                yield _finish(current)
            current = _parse_header(fields, lineno)
            continue
        if current is None or _is_complete(current):
            raise LiftOverError(f"Alignment data outside of a chain at line {lineno}")
        if len(fields) == 1:
            current.chain_interval.append(ChainInterval(_int(fields[0], lineno)))
        elif len(fields) == 3:
            current.chain_interval.append(
                ChainInterval(
                    _int(fields[0], lineno), _int(fields[1], lineno), _int(fields[2], lineno)
                )
            )
        else:
            raise LiftOverError(f"Invalid alignment data at line {lineno}")
    if current is not None:
        yield _finish(current)