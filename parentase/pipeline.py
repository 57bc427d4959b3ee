"""End-to-end parental allele-specific expression analysis."""

from .ase_data_loader import load_raw_counts, deduplicate_counts, write_results
from .strain_utils import decompose_strains, MATERNAL_SUFFIX, PATERNAL_SUFFIX
from .reshape import pair_strain_counts, build_paired_anndata, pivot_by_sample
from .allele_utils import calculate_imprinting


def compute_parental_ase(
    counts,
    policy="signed",
    threshold=None,
    unmatched="raise",
    maternal_suffix=MATERNAL_SUFFIX,
    paternal_suffix=PATERNAL_SUFFIX,
    verbose=True
):
    """
    Compute parental allelic expression ratios and imprinting status from a raw count table.

    Parameters
    -----------
    counts : pandas.DataFrame
        Raw count table; first column holds composite gene identifiers
        ('<gene>_129' maternal, '<gene>_JF1' paternal), remaining columns
        hold per-sample counts
    policy : str, optional
        'signed' (default) or 'percent' imprinting classification
    threshold : float, optional
        Override the policy's default threshold (0.7 signed, 85 percent)
    unmatched : str, optional
        Handling of identifiers with neither suffix: 'raise' (default),
        'drop' or 'paternal'
    maternal_suffix : str, optional
        Maternal strain suffix (default: "_129")
    paternal_suffix : str, optional
        Paternal strain suffix (default: "_JF1")
    verbose : bool, optional
        Whether to print progress information (default: True)

    Returns
    --------
    pandas.DataFrame
        One row per base gene with per-sample ratio and status columns
    """
    counts = deduplicate_counts(counts, verbose=verbose)
    decomposed = decompose_strains(
        counts,
        unmatched=unmatched,
        maternal_suffix=maternal_suffix,
        paternal_suffix=paternal_suffix,
        verbose=verbose
    )
    paired = pair_strain_counts(decomposed)
    adata = build_paired_anndata(paired, samples=list(counts.columns[1:]))
    adata = calculate_imprinting(adata, policy=policy, threshold=threshold, verbose=verbose)
    return pivot_by_sample(adata)


def run_parental_ase(
    input_file,
    output_file,
    policy="signed",
    threshold=None,
    unmatched="raise",
    maternal_suffix=MATERNAL_SUFFIX,
    paternal_suffix=PATERNAL_SUFFIX,
    sep=",",
    verbose=True
):
    """
    Read raw strain counts, compute parental ratios and write the result table.

    The output file is only written once every step has succeeded.

    Parameters
    -----------
    input_file : str or Path
        Raw counts CSV
    output_file : str or Path
        Destination CSV
    sep : str, optional
        Field delimiter for input and output (default: ",")

    Other parameters are passed to compute_parental_ase.

    Returns
    --------
    pandas.DataFrame
        The result table that was written
    """
    counts = load_raw_counts(input_file, sep=sep)
    if verbose:
        print(f"Loaded {len(counts)} rows and {counts.shape[1] - 1} samples from {input_file}")

    results = compute_parental_ase(
        counts,
        policy=policy,
        threshold=threshold,
        unmatched=unmatched,
        maternal_suffix=maternal_suffix,
        paternal_suffix=paternal_suffix,
        verbose=verbose
    )

    path = write_results(results, output_file, sep=sep)
    if verbose:
        print(f"File saved to: {path}")

    return results
