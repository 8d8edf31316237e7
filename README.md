# transanno

Tools for working with chain files that align two genome assemblies: build a
chain file from minimap2 alignments, and describe a chain file as BED and VCF
files.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Compressed files

Input files are opened with `transanno.fileio.open_input`, which recognises
gzip, bzip2, xz and zstandard data by its leading bytes and decompresses it;
anything else is read as is.

Output files are created with `transanno.fileio.create_output`, which
compresses according to the file extension: `.gz` is written as BGZF (a
gzip-compatible blocked format), `.bz2`, `.xz` and `.zst` with their
respective compressors, and any other name uncompressed.

## Commands

Everything is reached through the `transanno` command.

```
transanno --help
transanno --version
```

`--version` prints the package version followed by the short git revision
of the installed source tree, with `-modified` appended when the tree has
uncommitted changes (or `-unknown` when git cannot be run).

`-v` / `--verbose` goes before the subcommand and may be repeated: once for
info messages, twice or more for debug messages. Without it the level is
taken from the `TRANSANNO_LOG` environment variable (for example `INFO` or
`DEBUG`), and defaults to warnings.

The command exits with status 1 and an `Error:` message on standard error
when an input cannot be read or parsed.

### minimap2chain

Converts a PAF file whose records carry `cg:Z:` CIGAR tags into a chain file.
Create the PAF file with:

```
minimap2 -cx asm5 --cs NEW_FASTA ORIGINAL_FASTA > alignment.paf
transanno minimap2chain alignment.paf --output alignment.chain
```

Every chain gets the score 4900 and the PAF line number as its ID. Records
on the minus strand have their target coordinates converted and their CIGAR
operations reversed.

### chain-to-bed-vcf

Writes one BED line per chain for each assembly, and VCF files that list the
differences between the two assemblies along every chain. Both FASTA files
need a `.fai` index next to them. The outputs are not sorted.

```
transanno chain-to-bed-vcf alignment.chain \
    --original original.fa --new new.fa \
    --output-original-bed original.bed --output-new-bed new.bed \
    --output-original-vcf original.vcf --output-new-vcf new.vcf \
    --svlen 50
```

| Option | Short | Aliases |
| --- | --- | --- |
| `--original` | `-r` | `--reference` |
| `--new` | `-q` | `--query` |
| `--output-original-bed` | `-b` | `--output-reference-bed` |
| `--output-new-bed` | `-d` | `--output-query-bed` |
| `--output-original-vcf` | `-v` | `--output-reference-vcf` |
| `--output-new-vcf` | `-c` | `--output-query-vcf` |
| `--svlen` | `-s` | (default 50) |

Single-base mismatches inside aligned blocks are written as SNVs (case is
ignored for A, C, G and T). Gaps are written with their nucleotides, unless
either side is longer than `--svlen`, in which case they become symbolic
`<INS>`, `<DEL>` or `<INDEL>` alleles with `END`, `SVTYPE` and `SVLEN`.
Chains whose chromosome is missing from a FASTA file are skipped with a
warning.

## Library use

```python
from transanno.chain import load_chain_file

chain_file = load_chain_file("alignment.chain")
for chain in chain_file:
    print(chain.chain_id, chain.original_chromosome.name, chain.new_chromosome.name)
```

- `transanno.chain` – `load_chain_file` (from a path or from an iterable of
  text or byte lines), the `Chain`, `ChainInterval`, `Chromosome`,
  `ChainFile` and `Strand` types, `Chain.check_sequence_consistency`, and
  `convert_position`.
- `transanno.sequence` – `IndexedFasta` for reading regions of an indexed
  FASTA file (`get_sequence`, `contig_list`, usable as a context manager),
  `reverse_complement`, `reverse_acid`, `same_acid`, and the exceptions
  `LiftOverError`, `ChromosomeNotFoundError` and
  `ChromosomeLengthMismatchError`.
- `transanno.minimap2chain` – `paf_to_chain_lines` turns PAF lines into
  chain lines without touching the file system; `minimap2_to_chain` works on
  files. Malformed input raises `PafFormatError`.
- `transanno.chain2bedvcf` – `chain_to_bed_vcf`, `write_chain_vcf_entries`
  and `write_vcf_header`, the functions behind `chain-to-bed-vcf`.
- `transanno.chain2chunkbed` – `chain_to_chunk_bed` and `process_chain`
  write BED12 files with one record per chain and one per aligned chunk, and
  optionally VCF files with the base mismatches of each chunk. This is
  available from Python only; there is no command for it.

## What this package does not do

It does not lift annotations from one assembly to another: there are no
commands for lifting VCF, GFF3/GTF or BED files, and no command for
left-aligning a chain file. It prepares and inspects chain files; the lifting
itself has to be done with other tools.