"""Approximate weighted sums of gaussians

gauss_transform computes, for every target y_j and weight channel w,

    G_w(y_j) = sum_i q_w,i * exp(-||y_j - x_i||^2 / h^2)

to a relative accuracy epsilon. Note that h here is NOT the standard deviation of the
gaussian: exp(-r^2 / h^2) == exp(-r^2 / (2 * sigma^2)) for h = sqrt(2) * sigma.

The sums are evaluated with the dual-tree kernel density estimator of scikit-learn, which
bounds the relative error of each output by rtol.
"""

from __future__ import annotations

import numpy as np
from sklearn.neighbors import KernelDensity


def gauss_transform(
    d: int,
    n_sources: int,
    n_targets: int,
    n_weights: int,
    sources: np.ndarray,
    bandwidth: float,
    weights: np.ndarray,
    targets: np.ndarray,
    epsilon: float,
) -> np.ndarray:
    """Weighted sum of gaussians centered at sources, evaluated at targets

    Parameters
    ----------
    d : int
        Dimensionality of sources and targets
    n_sources : int
        Number of sources N, must be positive
    n_targets : int
        Number of targets M
    n_weights : int
        Number of weight channels W
    sources : np.ndarray
        N*d source coordinates, flat or shaped (N, d)
    bandwidth : float
        Bandwidth h of exp(-||x - y||^2 / h^2)
    weights : np.ndarray
        W*N non-negative weights, flat or shaped (W, N)
    targets : np.ndarray
        M*d target coordinates, flat or shaped (M, d)
    epsilon : float
        Relative accuracy of each output value

    Returns
    -------
    np.ndarray
        Flat array of W*M values, the M sums of weight channel w at positions [w*M, (w+1)*M)

    Raises
    ------
    ValueError
        On zero sources, non-positive bandwidth or epsilon, or arrays that do not match the given sizes
    """
    if n_sources <= 0:
        raise ValueError("Gauss transform needs at least one source")
    if bandwidth <= 0:
        raise ValueError(f"Bandwidth must be positive, got {bandwidth}")
    if epsilon <= 0:
        raise ValueError(f"Epsilon must be positive, got {epsilon}")
    sources = np.asarray(sources, dtype=np.float64)
    targets = np.asarray(targets, dtype=np.float64)
    weights = np.asarray(weights, dtype=np.float64)
    if sources.size != n_sources * d:
        raise ValueError(f"Expected {n_sources * d} source coordinates, got {sources.size}")
    if targets.size != n_targets * d:
        raise ValueError(f"Expected {n_targets * d} target coordinates, got {targets.size}")
    if weights.size != n_weights * n_sources:
        raise ValueError(f"Expected {n_weights * n_sources} weights, got {weights.size}")
    sources = sources.reshape(n_sources, d)
    targets = targets.reshape(n_targets, d)
    weights = weights.reshape(n_weights, n_sources)

    sigma = bandwidth / np.sqrt(2)
    # KernelDensity returns log(sum_i q_i * K(y, x_i) / sum_i q_i), K normalized to integrate to 1
    log_norm = 0.5 * d * np.log(2 * np.pi) + d * np.log(sigma)

    result = np.zeros((n_weights, n_targets), dtype=np.float64)
    if n_targets == 0:
        return result.ravel()
    for w in range(n_weights):
        total_weight = weights[w].sum()
        if total_weight == 0:
            continue
        kde = KernelDensity(kernel="gaussian", bandwidth=sigma, algorithm="kd_tree", rtol=epsilon, atol=0)
        kde.fit(sources, sample_weight=weights[w])
        result[w] = np.exp(kde.score_samples(targets) + np.log(total_weight) + log_norm)
    return result.ravel()
