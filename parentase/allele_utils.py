"""Utilities for calculating parental allelic expression ratios and imprinting status."""

import numpy as np
import pandas as pd
from scipy import sparse

# |ratio| >= 0.7 means at least 85% of reads come from one parent
SIGNED_THRESHOLD = 0.7
PERCENT_THRESHOLD = 85

NOT_DETERMINED = "Not Determined"
NOT_IMPRINTED = "Not Imprinted"
IMPRINTED = "Imprinted"
PATERNALLY_IMPRINTED = "Paternally Imprinted"
MATERNALLY_IMPRINTED = "Maternally Imprinted"

POLICIES = ("signed", "percent")


def parental_ratio(maternal, paternal):
    """
    Calculate the parental allelic expression ratio for a single count pair.

    ratio = (maternal - paternal) / (maternal + paternal)

    Parameters
    -----------
    maternal : int or None
        Maternal read count, None/NaN if undefined
    paternal : int or None
        Paternal read count, None/NaN if undefined

    Returns
    --------
    float
        Ratio in [-1, 1], or NaN if either count is undefined or both are 0
    """
    if maternal is None or paternal is None or pd.isna(maternal) or pd.isna(paternal):
        return np.nan
    total = maternal + paternal
    if total == 0:
        return np.nan
    return float(maternal - paternal) / float(total)


def calculate_parental_ratios(maternal, paternal):
    """
    Vectorized parental_ratio over count arrays of the same shape.

    Parameters
    -----------
    maternal : array-like
        Maternal counts, NaN where undefined
    paternal : array-like
        Paternal counts, NaN where undefined

    Returns
    --------
    numpy.ndarray
        Float array of ratios, NaN where undefined or zero total
    """
    maternal = np.asarray(maternal, dtype=float)
    paternal = np.asarray(paternal, dtype=float)

    total = maternal + paternal
    ratios = np.full(total.shape, np.nan)

    # NaN totals compare False, so undefined pairs are skipped too
    valid = total > 0
    ratios[valid] = (maternal[valid] - paternal[valid]) / total[valid]
    return ratios


def signed_status(ratio, threshold=SIGNED_THRESHOLD):
    """
    Classify a ratio with the signed threshold policy.

    A ratio >= threshold means the maternal allele dominates, so the paternal
    allele is imprinted; a ratio <= -threshold means the reverse.
    """
    if pd.isna(ratio):
        return NOT_DETERMINED
    if ratio >= threshold:
        return PATERNALLY_IMPRINTED
    if ratio <= -threshold:
        return MATERNALLY_IMPRINTED
    return NOT_IMPRINTED


def percent_status(percent, threshold=PERCENT_THRESHOLD):
    """Classify an absolute bias percentage; only values strictly above threshold count as imprinted."""
    if pd.isna(percent):
        return NOT_DETERMINED
    if percent > threshold:
        return IMPRINTED
    return NOT_IMPRINTED


def _dense(matrix):
    if sparse.issparse(matrix):
        return matrix.toarray()
    return np.asarray(matrix)


class ParentalRatioCalculator:
    """
    Class for calculating parental allelic ratios and imprinting status in AnnData objects.
    """

    def __init__(self, adata=None):
        """
        Initialize the calculator with an optional AnnData object.

        Parameters:
        -----------
        adata : AnnData, optional
            AnnData object with samples as obs, genes as var and
            maternal/paternal count layers
        """
        self.adata = adata

    def set_data(self, adata):
        """
        Set or update the AnnData object.

        Parameters:
        -----------
        adata : AnnData
            AnnData object with maternal/paternal count layers
        """
        self.adata = adata

    def calculate_ratios(
        self,
        policy="signed",
        threshold=None,
        maternal_layer='maternal_counts',
        paternal_layer='paternal_counts',
        verbose=True
    ):
        """
        Calculate parental allelic ratios and classify imprinting status.

        Parameters:
        -----------
        policy : str, optional (default: 'signed')
            'signed': ratio >= threshold is 'Paternally Imprinted', ratio <= -threshold
            is 'Maternally Imprinted' (default threshold 0.7).
            'percent': |ratio| * 100 > threshold is 'Imprinted' (default threshold 85)
        threshold : float, optional
            Override the policy's default threshold
        maternal_layer : str, optional (default: 'maternal_counts')
            Layer containing maternal counts
        paternal_layer : str, optional (default: 'paternal_counts')
            Layer containing paternal counts
        verbose : bool, optional (default: True)
            Whether to print a summary of the classification

        Returns:
        --------
        adata : AnnData
            Updated AnnData object with layer 'allelic_expression_ratio'
            (plus 'allelic_expression_ratio_percent' for the percent policy),
            uns['imprinting_status'] (samples x genes DataFrame) and
            uns['imprinting_policy']
        """
        if self.adata is None:
            raise ValueError("No AnnData object has been set")

        if policy not in POLICIES:
            raise ValueError(f"policy must be one of {POLICIES}, got '{policy}'")

        for layer in (maternal_layer, paternal_layer):
            if layer not in self.adata.layers:
                raise ValueError(f"Layer '{layer}' not found")

        maternal = _dense(self.adata.layers[maternal_layer])
        paternal = _dense(self.adata.layers[paternal_layer])

        ratios = calculate_parental_ratios(maternal, paternal)
        self.adata.layers['allelic_expression_ratio'] = ratios

        if policy == "signed":
            threshold = SIGNED_THRESHOLD if threshold is None else threshold
            if 'allelic_expression_ratio_percent' in self.adata.layers:
                del self.adata.layers['allelic_expression_ratio_percent']
            statuses = [[signed_status(r, threshold) for r in row] for row in ratios]
        else:
            threshold = PERCENT_THRESHOLD if threshold is None else threshold
            percents = np.abs(ratios) * 100
            self.adata.layers['allelic_expression_ratio_percent'] = percents
            statuses = [[percent_status(p, threshold) for p in row] for row in percents]

        self.adata.uns['imprinting_status'] = pd.DataFrame(
            statuses,
            index=self.adata.obs_names.copy(),
            columns=self.adata.var_names.copy(),
        )
        self.adata.uns['imprinting_policy'] = {'policy': policy, 'threshold': threshold}

        if verbose:
            counts = pd.Series([s for row in statuses for s in row], dtype=object).value_counts()
            print(f"Scored {self.adata.n_vars} genes across {self.adata.n_obs} samples")
            for status, n in counts.items():
                print(f"  {status}: {n}")

        return self.adata

    def get_ratios_for_gene(self, gene, ratio_layer='allelic_expression_ratio'):
        """
        Get parental allelic ratios of one gene across samples.

        Parameters:
        -----------
        gene : str
            Base gene name
        ratio_layer : str, optional
            Name of the layer containing the ratio data

        Returns:
        --------
        ratios : pandas.Series
            Ratios indexed by sample
        """
        if ratio_layer not in self.adata.layers:
            raise ValueError(f"Ratio layer '{ratio_layer}' not found. Calculate ratios first.")
        if gene not in self.adata.var_names:
            raise ValueError(f"Gene '{gene}' not found")

        j = self.adata.var_names.get_loc(gene)
        return pd.Series(self.adata.layers[ratio_layer][:, j], index=self.adata.obs_names, name=gene)

    def get_status_for_gene(self, gene):
        """Get the imprinting status of one gene across samples."""
        if 'imprinting_status' not in self.adata.uns:
            raise ValueError("Imprinting status not found. Calculate ratios first.")
        if gene not in self.adata.var_names:
            raise ValueError(f"Gene '{gene}' not found")

        return self.adata.uns['imprinting_status'][gene]


def calculate_imprinting(adata, policy="signed", threshold=None, verbose=True):
    """
    Calculate parental allelic ratios and imprinting status.

    Parameters:
    -----------
    adata : AnnData
        AnnData object with 'maternal_counts' and 'paternal_counts' layers
    policy : str, optional (default: 'signed')
        'signed' or 'percent' classification policy
    threshold : float, optional
        Override the policy's default threshold (0.7 signed, 85 percent)
    verbose : bool, optional (default: True)
        Whether to print a summary of the classification

    Returns:
    --------
    adata : AnnData
        Updated AnnData object with ratio layer(s) and uns['imprinting_status']
    """
    calculator = ParentalRatioCalculator(adata)
    return calculator.calculate_ratios(policy=policy, threshold=threshold, verbose=verbose)
