from __future__ import annotations

import numpy as np
from scribble_core.consts import DEFAULT_BANDWIDTH, DEFAULT_EPSILON, BandwidthRule
from scribble_core.logger import logger

from scribble_kde.gauss_transform import gauss_transform
from scribble_kde.kernels import estimate_bandwidth, gaussian_kernel


def _check_weights(xis: np.ndarray, weights: np.ndarray):
    if xis.shape != weights.shape:
        raise ValueError(f"Samples and weights must have the same length: {xis.shape[0]} != {weights.shape[0]}")


def univariate_kde(
    xis: np.ndarray | list,
    weights: np.ndarray | list,
    targets: np.ndarray | list,
    rule: BandwidthRule = BandwidthRule.FIXED,
    bandwidth: float = DEFAULT_BANDWIDTH,
) -> np.ndarray:
    """Exact weighted kernel density estimate

    density[t] = sum_i weights[i] * gaussian_kernel(targets[t], xis[i], h), evaluated directly in
    O(len(xis) * len(targets)). Reference for fast_univariate_kde.

    Parameters
    ----------
    xis : np.ndarray | list
        Sample values
    weights : np.ndarray | list
        Per-sample weights, same length as xis
    targets : np.ndarray | list
        Values at which the density is evaluated
    rule : BandwidthRule, optional
        Bandwidth rule, default FIXED
    bandwidth : float, optional
        Bandwidth of the FIXED rule, default DEFAULT_BANDWIDTH

    Returns
    -------
    np.ndarray
        One density value per target

    Raises
    ------
    ValueError
        If xis and weights differ in length
    """
    xis = np.asarray(xis, dtype=np.float64).ravel()
    weights = np.asarray(weights, dtype=np.float64).ravel()
    targets = np.asarray(targets, dtype=np.float64).ravel()
    _check_weights(xis, weights)
    h = estimate_bandwidth(xis.shape[0], 1, rule=rule, bandwidth=bandwidth)
    kernel_values = gaussian_kernel(targets[:, np.newaxis], xis[np.newaxis, :], h)
    return kernel_values @ weights


def fast_univariate_kde(
    xis: np.ndarray | list,
    weights: np.ndarray | list,
    targets: np.ndarray | list,
    epsilon: float = DEFAULT_EPSILON,
    rule: BandwidthRule = BandwidthRule.FIXED,
    bandwidth: float = DEFAULT_BANDWIDTH,
) -> np.ndarray:
    """Approximate weighted kernel density estimate through the gauss transform

    Same estimate as univariate_kde within relative error epsilon. With no samples, returns the
    uniform distribution 1 / len(targets) on every target.

    Parameters
    ----------
    xis : np.ndarray | list
        Sample values
    weights : np.ndarray | list
        Non-negative per-sample weights, same length as xis
    targets : np.ndarray | list
        Values at which the density is evaluated
    epsilon : float, optional
        Relative accuracy, default DEFAULT_EPSILON
    rule : BandwidthRule, optional
        Bandwidth rule, default FIXED
    bandwidth : float, optional
        Bandwidth of the FIXED rule, default DEFAULT_BANDWIDTH

    Returns
    -------
    np.ndarray
        One density value per target

    Raises
    ------
    ValueError
        If xis and weights differ in length
    """
    xis = np.asarray(xis, dtype=np.float64).ravel()
    weights = np.asarray(weights, dtype=np.float64).ravel()
    targets = np.asarray(targets, dtype=np.float64).ravel()
    _check_weights(xis, weights)
    n_targets = targets.shape[0]
    if n_targets == 0:
        return np.zeros(0)
    if xis.shape[0] == 0:
        logger.warning("No samples, falling back to a uniform density over %d targets", n_targets)
        return np.full(n_targets, 1.0 / n_targets)

    # exp(-r^2 / (2 * h^2)) == exp(-r^2 / h_gt^2) with h_gt = sqrt(2) * h
    h = np.sqrt(2) * estimate_bandwidth(xis.shape[0], 1, rule=rule, bandwidth=bandwidth)
    return gauss_transform(
        d=1,
        n_sources=xis.shape[0],
        n_targets=n_targets,
        n_weights=1,
        sources=xis,
        bandwidth=h,
        weights=weights,
        targets=targets,
        epsilon=epsilon,
    )
