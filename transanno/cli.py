"""Command line interface: transfer annotation to other genome assemblies."""

from __future__ import annotations

import argparse
import logging
import os
import subprocess
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional, Sequence

from .chain2bedvcf import chain_to_bed_vcf
from .minimap2chain import PafFormatError, minimap2_to_chain
from .sequence import LiftOverError

_PACKAGE_DIR = Path(__file__).resolve().parent

_MINIMAP2_DESCRIPTION = """Convert minimap2 result to chain file

A paf file should be created with a command shown in below.

$ minimap2 -cx asm5 --cs NEW_FASTA ORIGINAL_FASTA > PAF_FILE.paf
"""


def _git_output(*args: str) -> Optional[bytes]:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=_PACKAGE_DIR,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            check=False,
        )
    except OSError:
        return None
    return result.stdout


def git_version() -> str:
    """Return the short git revision with a '-modified' or '-unknown' status suffix."""
    revision_output = _git_output("rev-parse", "HEAD")
    if revision_output:
        revision = revision_output.decode("utf-8").strip()
    else:
        revision = "unknown"

    status_output = _git_output("status", "--short")
    if status_output is None:
        status = "-unknown"
    elif status_output:
        status = "-modified"
    else:
        status = ""
    return f"{revision[:7]}{status}"


def _package_version() -> str:
    try:
        return version("transanno")
    except PackageNotFoundError:
        return "0.0.0"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="transanno",
        description="Transfer annotation to other genome assemblies",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_package_version()} git:{git_version()}",
    )
    parser.add_argument(
        "-v", "--verbose", action="count", default=0, help="verbose level"
    )
    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    bedvcf = subparsers.add_parser(
        "chain-to-bed-vcf",
        help="Create BED and VCF file from chain file",
        description="Create BED and VCF file from chain file",
    )
    bedvcf.add_argument("chain", help="Input Chain file")
    bedvcf.add_argument(
        "-b", "--output-original-bed", "--output-reference-bed",
        dest="reference_bed", required=True,
        help="Output original assembly BED file (Not sorted)",
    )
    bedvcf.add_argument(
        "-d", "--output-new-bed", "--output-query-bed",
        dest="query_bed", required=True,
        help="Output new assembly BED file (Not sorted)",
    )
    bedvcf.add_argument(
        "-v", "--output-original-vcf", "--output-reference-vcf",
        dest="reference_vcf", required=True,
        help="Output original assembly VCF file (Not sorted)",
    )
    bedvcf.add_argument(
        "-c", "--output-new-vcf", "--output-query-vcf",
        dest="query_vcf", required=True,
        help="Output new assembly VCF file (Not sorted)",
    )
    bedvcf.add_argument(
        "-r", "--original", "--reference",
        dest="reference_sequence", required=True,
        help="Original assembly FASTA (.fai file is required)",
    )
    bedvcf.add_argument(
        "-q", "--new", "--query",
        dest="query_sequence", required=True,
        help="New assembly FASTA (.fai file is required)",
    )
    bedvcf.add_argument(
        "-s", "--svlen", type=int, default=50,
        help="Do not write nucleotides if a length of reference or alternative "
        "sequence is longer than svlen",
    )
    bedvcf.set_defaults(handler=_run_chain_to_bed_vcf)

    minimap = subparsers.add_parser(
        "minimap2chain",
        help="Convert minimap2 result to chain file",
        description=_MINIMAP2_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    minimap.add_argument("paf", help="Input paf file")
    minimap.add_argument("-o", "--output", required=True, help="Output chain file")
    minimap.set_defaults(handler=_run_minimap2chain)

    return parser


def _run_chain_to_bed_vcf(args: argparse.Namespace) -> None:
    chain_to_bed_vcf(
        args.chain,
        args.reference_sequence,
        args.query_sequence,
        args.reference_vcf,
        args.query_vcf,
        args.reference_bed,
        args.query_bed,
        args.svlen,
    )


def _run_minimap2chain(args: argparse.Namespace) -> None:
    minimap2_to_chain(args.paf, args.output)


def _configure_logging(verbose: int) -> None:
    levels = {1: logging.INFO, 2: logging.DEBUG, 3: logging.DEBUG}
    level = levels.get(verbose)
    if level is None:
        configured = os.environ.get("TRANSANNO_LOG", "").upper()
        level = getattr(logging, configured, logging.WARNING) if configured else logging.WARNING
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s %(name)s > %(message)s")


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line interface and return the exit status."""
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        args.handler(args)
    except (LiftOverError, PafFormatError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())