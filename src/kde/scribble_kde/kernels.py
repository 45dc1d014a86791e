from __future__ import annotations

import numpy as np
from scribble_core.consts import DEFAULT_BANDWIDTH, BandwidthRule
from scribble_core.logger import logger


def gaussian_kernel(t, xi, h: float, *, verbose: bool = False):
    """Unnormalized gaussian kernel exp(-0.5 * ((t - xi) / h) ** 2)

    The 1 / sqrt(2 * pi) factor is left out, so kernel(t, t, h) == 1 for every h and the
    densities built from it do not integrate to 1. Works element-wise on numpy arrays.

    Parameters
    ----------
    t : float or np.ndarray
        Target value(s)
    xi : float or np.ndarray
        Sample value(s)
    h : float
        Bandwidth
    verbose : bool, optional
        Log the intermediate values, default False

    Returns
    -------
    float or np.ndarray
    """
    x = np.subtract(t, xi) / h
    if verbose:
        logger.info("xi : %s, t : %s, h : %s => x = %s => x*x = %s", xi, t, h, x, x * x)
    return np.exp(-0.5 * x * x)


def estimate_bandwidth(
    ndata: int,
    ndims: int = 1,
    rule: BandwidthRule = BandwidthRule.FIXED,
    bandwidth: float = DEFAULT_BANDWIDTH,
) -> float:
    """Kernel bandwidth for ndata samples in ndims dimensions

    Parameters
    ----------
    ndata : int
        Number of samples
    ndims : int, optional
        Number of dimensions, default 1
    rule : BandwidthRule, optional
        FIXED returns `bandwidth` whatever the inputs, SCOTT returns ndata ** (-1 / (ndims + 4)),
        default FIXED
    bandwidth : float, optional
        Value returned by the FIXED rule, default DEFAULT_BANDWIDTH

    Returns
    -------
    float
        Bandwidth in the exp(-0.5 * x**2) convention
    """
    if rule == BandwidthRule.SCOTT:
        if ndata <= 0:
            raise ValueError(f"Scott's rule needs at least one sample, got {ndata}")
        return float(ndata ** (-1.0 / (ndims + 4)))
    return bandwidth
