"""Reshaping between long strain counts, paired AnnData and the per-gene result table."""

import numpy as np
import pandas as pd
import anndata as ad

from .strain_utils import MATERNAL, PATERNAL


def pair_strain_counts(decomposed):
    """
    Pair maternal and paternal counts for every (base gene, sample).

    Parameters
    -----------
    decomposed : pandas.DataFrame
        Long table with columns 'base_gene_name', 'strain', 'sample', 'count'
        as returned by decompose_strains

    Returns
    --------
    pandas.DataFrame
        One row per (base gene, sample) with columns 'base_gene_name',
        'sample', 'maternal', 'paternal'. A strain without a row in the
        input is <NA>, not 0. Genes and samples keep their first-seen order.
    """
    pairs = {}
    gene_order = {}
    sample_order = {}

    for gene, strain, sample, count in decomposed[["base_gene_name", "strain", "sample", "count"]].itertuples(index=False, name=None):
        key = (gene, sample)
        if key not in pairs:
            pairs[key] = {}
            gene_order.setdefault(gene, None)
            sample_order.setdefault(sample, None)
        if strain in pairs[key]:
            raise ValueError(
                f"Gene '{gene}' has more than one {strain} count for sample '{sample}'; "
                "(base gene, sample, strain) must be unique after deduplication"
            )
        pairs[key][strain] = count

    records = []
    for gene in gene_order:
        for sample in sample_order:
            if (gene, sample) not in pairs:
                continue
            strain_counts = pairs[(gene, sample)]
            records.append((
                gene,
                sample,
                strain_counts.get(MATERNAL, pd.NA),
                strain_counts.get(PATERNAL, pd.NA),
            ))

    paired = pd.DataFrame(records, columns=["base_gene_name", "sample", MATERNAL, PATERNAL])
    paired[MATERNAL] = paired[MATERNAL].astype("Int64")
    paired[PATERNAL] = paired[PATERNAL].astype("Int64")
    return paired


def build_paired_anndata(paired, samples=None):
    """
    Store paired strain counts in an AnnData object.

    Parameters
    -----------
    paired : pandas.DataFrame
        Table as returned by pair_strain_counts
    samples : list of str, optional
        Sample IDs to keep as obs, in order, even if they have no paired
        counts (e.g. the sample columns of the raw table). Samples seen only
        in paired are appended. If None, samples come from paired alone.

    Returns
    --------
    anndata.AnnData
        AnnData with samples as obs and base genes as var, and layers
        'maternal_counts' and 'paternal_counts'. Cells without a count are NaN.
    """
    genes = list(pd.unique(paired["base_gene_name"]))
    samples = list(samples) if samples is not None else []
    for sample in pd.unique(paired["sample"]):
        if sample not in samples:
            samples.append(sample)
    gene_idx = {gene: i for i, gene in enumerate(genes)}
    sample_idx = {sample: i for i, sample in enumerate(samples)}

    maternal = np.full((len(samples), len(genes)), np.nan)
    paternal = np.full((len(samples), len(genes)), np.nan)

    for gene, sample, m_count, p_count in paired[["base_gene_name", "sample", MATERNAL, PATERNAL]].itertuples(index=False, name=None):
        i, j = sample_idx[sample], gene_idx[gene]
        if not pd.isna(m_count):
            maternal[i, j] = m_count
        if not pd.isna(p_count):
            paternal[i, j] = p_count

    adata = ad.AnnData(
        X=np.nan_to_num(maternal) + np.nan_to_num(paternal),
        obs=pd.DataFrame(index=pd.Index(samples, dtype=str)),
        var=pd.DataFrame({"base_gene_name": genes}, index=pd.Index(genes, dtype=str)),
    )
    adata.layers["maternal_counts"] = maternal
    adata.layers["paternal_counts"] = paternal

    return adata


def pivot_by_sample(adata, ratio_layer="allelic_expression_ratio", percent_layer="allelic_expression_ratio_percent", status_key="imprinting_status"):
    """
    Pivot scored AnnData into one row per gene with per-sample columns.

    Columns are 'base_gene_name', then '{sample}_allelic_expression_ratio'
    for every sample, then '{sample}_allelic_expression_ratio_percent' if the
    percent layer exists, then '{sample}_imprinting_status'. Samples are in
    obs order (first seen in the input).

    Parameters
    -----------
    adata : AnnData
        AnnData scored by ParentalRatioCalculator
    ratio_layer : str, optional
        Layer holding the signed ratios
    percent_layer : str, optional
        Layer holding the percent magnitudes, used only if present
    status_key : str, optional
        Key in adata.uns holding the samples x genes status DataFrame

    Returns
    --------
    pandas.DataFrame
        Result table; undefined ratios are NaN
    """
    if ratio_layer not in adata.layers:
        raise ValueError(f"Layer '{ratio_layer}' not found. Calculate ratios first.")
    if status_key not in adata.uns:
        raise ValueError(f"'{status_key}' not found in uns. Calculate ratios first.")

    samples = list(adata.obs_names)
    genes = list(adata.var_names)

    value_layers = [("allelic_expression_ratio", adata.layers[ratio_layer])]
    if percent_layer in adata.layers:
        value_layers.append(("allelic_expression_ratio_percent", adata.layers[percent_layer]))

    status = adata.uns[status_key]

    columns = {"base_gene_name": genes}
    for value_name, matrix in value_layers:
        for i, sample in enumerate(samples):
            columns[f"{sample}_{value_name}"] = [matrix[i, j] for j in range(len(genes))]
    for sample in samples:
        columns[f"{sample}_imprinting_status"] = [status.loc[sample, gene] for gene in genes]

    return pd.DataFrame(columns)
