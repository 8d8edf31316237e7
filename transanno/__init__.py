"""Build chain files from minimap2 alignments and describe chain files as BED and VCF."""

__version__ = "0.4.5"