"""
Parentase: parental allele-specific expression and imprinting calls.

This package splits strain-tagged RNA-seq counts (129 maternal, JF1 paternal)
into per-gene maternal/paternal pairs, calculates parental allelic expression
ratios and classifies genes as imprinted or not imprinted per sample.
"""

__version__ = "0.1.0"
__author__ = "Kylee Duczyminski"

from .ase_data_loader import load_raw_counts, deduplicate_counts, write_results
from .strain_utils import split_strain, decompose_strains
from .reshape import pair_strain_counts, build_paired_anndata, pivot_by_sample
from .allele_utils import ParentalRatioCalculator, calculate_imprinting, calculate_parental_ratios, parental_ratio, signed_status, percent_status
from .pipeline import compute_parental_ase, run_parental_ase

__all__ = ["load_raw_counts", "deduplicate_counts", "write_results", "split_strain", "decompose_strains", "pair_strain_counts", "build_paired_anndata", "pivot_by_sample", "ParentalRatioCalculator", "calculate_imprinting", "calculate_parental_ratios", "parental_ratio", "signed_status", "percent_status", "compute_parental_ase", "run_parental_ase"]
