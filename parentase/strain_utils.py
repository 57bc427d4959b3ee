"""Utilities for splitting composite gene identifiers into base gene and parental strain."""

import pandas as pd

# Maternal allele reads are tagged with the 129 strain, paternal with JF1
MATERNAL_SUFFIX = "_129"
PATERNAL_SUFFIX = "_JF1"

MATERNAL = "maternal"
PATERNAL = "paternal"

UNMATCHED_POLICIES = ("raise", "drop", "paternal")


def split_strain(gene_id, maternal_suffix=MATERNAL_SUFFIX, paternal_suffix=PATERNAL_SUFFIX):
    """
    Split a composite gene identifier into base gene name and strain.

    Parameters
    -----------
    gene_id : str
        Composite identifier such as 'Peg3_129' or 'Peg3_JF1'
    maternal_suffix : str, optional
        Trailing suffix marking maternal reads (default: "_129")
    paternal_suffix : str, optional
        Trailing suffix marking paternal reads (default: "_JF1")

    Returns
    --------
    tuple or None
        (base_gene_name, strain) with strain 'maternal' or 'paternal',
        or None if the identifier ends in neither suffix
    """
    if gene_id.endswith(maternal_suffix) and len(gene_id) > len(maternal_suffix):
        return gene_id[:-len(maternal_suffix)], MATERNAL
    if gene_id.endswith(paternal_suffix) and len(gene_id) > len(paternal_suffix):
        return gene_id[:-len(paternal_suffix)], PATERNAL
    return None


def decompose_strains(
    counts,
    unmatched="raise",
    maternal_suffix=MATERNAL_SUFFIX,
    paternal_suffix=PATERNAL_SUFFIX,
    verbose=True
):
    """
    Turn a wide raw count table into one row per (base gene, strain, sample).

    Parameters
    -----------
    counts : pandas.DataFrame
        Raw count table; first column holds composite gene identifiers,
        the remaining columns hold per-sample counts
    unmatched : str, optional
        What to do with identifiers ending in neither suffix (default: "raise")
        - 'raise': raise a ValueError listing them
        - 'drop': remove those rows
        - 'paternal': keep the identifier unchanged and tag it paternal
    maternal_suffix : str, optional
        Trailing suffix marking maternal reads (default: "_129")
    paternal_suffix : str, optional
        Trailing suffix marking paternal reads (default: "_JF1")
    verbose : bool, optional
        Whether to print the number of dropped rows (default: True)

    Returns
    --------
    pandas.DataFrame
        Long table with columns 'base_gene_name', 'strain', 'sample', 'count'.
        Rows follow the input row order, samples follow the column order.
    """
    if unmatched not in UNMATCHED_POLICIES:
        raise ValueError(f"unmatched must be one of {UNMATCHED_POLICIES}, got '{unmatched}'")

    gene_col = counts.columns[0]
    sample_cols = list(counts.columns[1:])

    base_names = []
    strains = []
    keep = []
    unmatched_ids = []

    for gene_id in counts[gene_col]:
        gene_id = str(gene_id)
        split = split_strain(gene_id, maternal_suffix, paternal_suffix)
        if split is None:
            unmatched_ids.append(gene_id)
            if unmatched == "drop":
                keep.append(False)
                continue
            # Legacy behaviour: identifier left as is
            split = (gene_id, PATERNAL)
        base_names.append(split[0])
        strains.append(split[1])
        keep.append(True)

    if unmatched_ids and unmatched == "raise":
        raise ValueError(
            f"{len(unmatched_ids)} gene identifiers end in neither '{maternal_suffix}' nor "
            f"'{paternal_suffix}': {unmatched_ids[:5]}"
        )
    if unmatched_ids and verbose:
        if unmatched == "drop":
            print(f"Dropped {len(unmatched_ids)} rows with unrecognized strain suffix")
        else:
            print(f"Tagged {len(unmatched_ids)} rows with unrecognized strain suffix as paternal")

    records = []
    sample_counts = counts.loc[keep, sample_cols].itertuples(index=False, name=None)
    for base_name, strain, row in zip(base_names, strains, sample_counts):
        for sample, count in zip(sample_cols, row):
            records.append((base_name, strain, sample, count))

    long = pd.DataFrame(records, columns=["base_gene_name", "strain", "sample", "count"])
    long["count"] = long["count"].astype("Int64")

    return long
