import numpy as np


def lower_median(values: np.ndarray) -> float:
    """Median of values, taken as the element at position len(values) // 2 of the sorted values

    For an even number of elements this picks one of the two middle elements instead of
    averaging them.

    Parameters
    ----------
    values: np.ndarray
        1D array, not modified

    Returns
    -------
    float
        The selected middle element

    Raises
    ------
    ValueError
        If values is empty
    """
    values = np.asarray(values)
    if values.size == 0:
        raise ValueError("Median of an empty window is undefined")
    mid = values.size // 2
    return np.partition(values, mid)[mid]


def median_filter(values: np.ndarray | list, hwsize: int, *, centered: bool = False) -> np.ndarray:
    """Sliding window median filter

    By default the window of element i is values[max(0, i - hwsize):min(len(values) - 1, i + hwsize)]
    (half-open, so one element short on the right side and two short at the last element) and the
    median is `lower_median`. This is the legacy behavior that density consumers were tuned on.

    Parameters
    ----------
    values: np.ndarray | list
        Input sequence
    hwsize: int
        Half window size
    centered: bool, optional
        Use the inclusive window values[i - hwsize:i + hwsize + 1] clipped to the sequence, and
        a true median (mean of the two middle elements for even windows), default False

    Returns
    -------
    np.ndarray
        Filtered sequence, same length as values

    Raises
    ------
    ValueError
        If hwsize is negative or a window is empty
    """
    if hwsize < 0:
        raise ValueError(f"Half window size must be non-negative, got {hwsize}")
    values = np.asarray(values, dtype=np.float64)
    n = values.shape[0]
    result = np.empty(n, dtype=np.float64)
    for i in range(n):
        wstart = max(0, i - hwsize)
        if centered:
            result[i] = np.median(values[wstart : min(n, i + hwsize + 1)])
        else:
            result[i] = lower_median(values[wstart : min(n - 1, i + hwsize)])
    return result
