import pandas as pd
import numpy as np
from pathlib import Path

MISSING_VALUES = ["", "NA"]


def load_raw_counts(counts_file, sep=","):
    """
    Load a strain-specific raw counts table.

    The first column holds the composite gene identifiers (e.g. 'Peg3_129',
    'Peg3_JF1'); every other column holds the integer read counts of one
    sample, with the sample ID as header.

    Parameters
    -----------
    counts_file : str or Path
        Path to the delimited counts file
    sep : str, optional
        Field delimiter (default: ",")

    Returns
    --------
    pandas.DataFrame
        Raw count table with the gene identifiers as first column (str) and
        one nullable integer column per sample. Blank and "NA" cells are kept
        as <NA>.
    """
    counts = pd.read_csv(counts_file, sep=sep, header=0, dtype=str, keep_default_na=False)

    if counts.shape[1] < 2:
        raise ValueError(
            f"Counts file {counts_file} must have a gene identifier column and at least one sample column"
        )

    gene_col = counts.columns[0]
    counts[gene_col] = counts[gene_col].str.strip()
    if (counts[gene_col] == "").any():
        raise ValueError(f"Empty gene identifier found in column '{gene_col}' of {counts_file}")

    for sample in counts.columns[1:]:
        counts[sample] = _parse_count_column(counts[sample], sample)

    return counts


def _parse_count_column(values, sample):
    """Convert one column of count strings to nullable integers."""
    stripped = values.str.strip()
    # R read.csv convention: NA is a missing value
    blank = stripped.isin(MISSING_VALUES)

    numeric = pd.to_numeric(stripped.mask(blank), errors="coerce")
    bad = numeric.isna() & ~blank
    if bad.any():
        examples = stripped[bad].unique()[:5].tolist()
        raise ValueError(f"Non-numeric counts in sample '{sample}': {examples}")

    defined = numeric.dropna()
    if (defined < 0).any():
        raise ValueError(f"Negative counts in sample '{sample}'")
    if not np.all(np.mod(defined, 1) == 0):
        raise ValueError(f"Non-integer counts in sample '{sample}'")

    return numeric.astype("Int64")


def deduplicate_counts(counts, verbose=True):
    """
    Remove exact-duplicate rows from a raw count table.

    Parameters
    -----------
    counts : pandas.DataFrame
        Raw count table as returned by load_raw_counts
    verbose : bool, optional
        Whether to print the number of removed rows (default: True)

    Returns
    --------
    pandas.DataFrame
        Table with identical rows collapsed to their first occurrence
    """
    deduplicated = counts.drop_duplicates(keep="first").reset_index(drop=True)

    n_dropped = len(counts) - len(deduplicated)
    if verbose and n_dropped > 0:
        print(f"Removed {n_dropped} duplicate rows")

    return deduplicated


def write_results(results, output_file, sep=","):
    """
    Write the per-gene result table.

    Undefined ratios are written as empty cells.

    Parameters
    -----------
    results : pandas.DataFrame
        Result table as returned by pivot_by_sample
    output_file : str or Path
        Destination path; parent directories are created if needed
    sep : str, optional
        Field delimiter (default: ",")

    Returns
    --------
    Path
        Path of the written file
    """
    output_file = Path(output_file)
    output_file.parent.mkdir(parents=True, exist_ok=True)
    results.to_csv(output_file, sep=sep, index=False, na_rep="")
    return output_file
