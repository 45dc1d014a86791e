from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scribble_core.array_utils import median_filter
from scribble_core.consts import (
    CHANNEL_NAMES,
    DEFAULT_BANDWIDTH,
    DEFAULT_EPSILON,
    INTENSITY,
    INTENSITY_CENTER,
    INTENSITY_SCALE,
    MEDIAN_FILTER_HALF_WINDOW,
    TARGET_GRID_SIZE,
    BandwidthRule,
    ScribbleLabel,
)
from scribble_core.logger import logger

from scribble_kde.scribbles import Scribble, samples_from_mask, samples_from_scribbles
from scribble_kde.univariate_kde import fast_univariate_kde


@dataclass
class KdeParams:
    epsilon: float = DEFAULT_EPSILON  # relative accuracy of the gauss transform
    bandwidth: float = DEFAULT_BANDWIDTH  # in normalized intensity units
    bandwidth_rule: BandwidthRule = BandwidthRule.FIXED
    median_filter: bool = False
    median_half_window: int = MEDIAN_FILTER_HALF_WINDOW
    centered_median: bool = False
    grid_size: int = TARGET_GRID_SIZE


def normalize_intensities(values: np.ndarray | list) -> np.ndarray:
    """Map intensities [0, 255] to about [-1, 1] with (value - 128) / 128

    The unnormalized gaussian kernel under/overflows on raw intensity differences.
    """
    return (np.asarray(values, dtype=np.float64) - INTENSITY_CENTER) / INTENSITY_SCALE


def target_grid(grid_size: int = TARGET_GRID_SIZE) -> np.ndarray:
    """Normalized intensity levels 0..grid_size-1"""
    return normalize_intensities(np.arange(grid_size))


def color_channel_kde(xis: np.ndarray | list, params: KdeParams | None = None) -> np.ndarray:
    """Density of a color channel over the intensity levels, estimated from sampled intensities

    Parameters
    ----------
    xis : np.ndarray | list
        Raw intensities of the evidence pixels, may be empty
    params : KdeParams, optional
        Estimation parameters, defaults to KdeParams()

    Returns
    -------
    np.ndarray
        params.grid_size values, index i is the likelihood of intensity i. The values are not
        normalized to sum to 1; with no samples they are uniform 1 / grid_size.
    """
    params = params or KdeParams()
    xis = np.asarray(xis, dtype=np.float64).ravel()
    n_samples = xis.shape[0]
    weights = np.full(n_samples, 1.0 / n_samples) if n_samples else np.zeros(0)
    logger.debug("Estimating channel density from %d samples", n_samples)

    # TODO: normalize the output to a proper distribution once the classifier thresholds are re-tuned
    target_prob = fast_univariate_kde(
        normalize_intensities(xis),
        weights,
        target_grid(params.grid_size),
        epsilon=params.epsilon,
        rule=params.bandwidth_rule,
        bandwidth=params.bandwidth,
    )
    if params.median_filter:
        target_prob = median_filter(target_prob, params.median_half_window, centered=params.centered_median)
    return target_prob


def channel_kde_from_mask(data: np.ndarray, mask: np.ndarray, params: KdeParams | None = None) -> np.ndarray:
    """color_channel_kde of the data intensities selected by mask"""
    return color_channel_kde(samples_from_mask(data, mask), params)


def channel_kde_from_scribbles(
    data: np.ndarray,
    scribbles: list[Scribble],
    label: ScribbleLabel,
    width: int,
    height: int,
    params: KdeParams | None = None,
) -> np.ndarray:
    """color_channel_kde of the data intensities under the scribbles carrying label"""
    return color_channel_kde(samples_from_scribbles(data, scribbles, label, width, height), params)


def _image_channels(image: np.ndarray) -> list[tuple[str, np.ndarray]]:
    image = np.asarray(image)
    if image.ndim == 2:
        return [("gray", image)]
    if image.ndim != 3:
        raise ValueError(f"Image must be HxW or HxWxC, got shape {image.shape}")
    n_channels = image.shape[2]
    names = CHANNEL_NAMES if n_channels == len(CHANNEL_NAMES) else [f"c{c}" for c in range(n_channels)]
    return [(names[c], image[:, :, c]) for c in range(n_channels)]


def estimate_image_densities(
    image: np.ndarray,
    scribbles: list[Scribble] | None = None,
    mask: np.ndarray | None = None,
    params: KdeParams | None = None,
    threads: int = 1,
) -> pd.DataFrame:
    """Per channel densities of an image, from scribbles or from a mask

    With scribbles, each channel gets a foreground and a background density. With a mask, each
    channel gets one density of the masked pixels. Channels are estimated independently, in
    parallel when threads > 1.

    Parameters
    ----------
    image : np.ndarray
        HxW or HxWxC intensities in [0, 255]
    scribbles : list[Scribble], optional
        Annotated scribbles
    mask : np.ndarray, optional
        HxW mask of the evidence pixels
    params : KdeParams, optional
        Estimation parameters, defaults to KdeParams()
    threads : int, optional
        Number of worker threads, default 1

    Returns
    -------
    pd.DataFrame
        Indexed by intensity, one column per "<channel>_<label>" (or "<channel>" with a mask)

    Raises
    ------
    ValueError
        If both or neither of scribbles and mask are given
    """
    if (scribbles is None) == (mask is None):
        raise ValueError("Exactly one of scribbles or mask must be given")
    params = params or KdeParams()
    channels = _image_channels(image)
    height, width = channels[0][1].shape

    jobs = []
    for name, channel in channels:
        if mask is not None:
            jobs.append((name, samples_from_mask(channel, mask)))
        else:
            for label in ScribbleLabel:
                jobs.append(
                    (f"{name}_{label.value}", samples_from_scribbles(channel, scribbles, label, width, height))
                )
    for name, xis in jobs:
        logger.info("%s: %d samples", name, xis.shape[0])

    with ThreadPoolExecutor(max_workers=threads) as executor:
        densities = list(executor.map(lambda job: color_channel_kde(job[1], params), jobs))

    df_densities = pd.DataFrame({name: density for (name, _), density in zip(jobs, densities)})
    df_densities.index.name = INTENSITY
    return df_densities
