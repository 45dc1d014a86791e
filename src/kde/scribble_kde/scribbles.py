from __future__ import annotations

import json
from dataclasses import dataclass, field

import numpy as np
from scribble_core.consts import ScribbleLabel


@dataclass
class Scribble:
    background: bool
    pixels: list[tuple[int, int]] = field(default_factory=list)  # (x, y) pixel coordinates

    @property
    def label(self) -> ScribbleLabel:
        return ScribbleLabel.BACKGROUND if self.background else ScribbleLabel.FOREGROUND


def load_scribbles(scribbles_json: str) -> list[Scribble]:
    """Read scribbles from a JSON file

    Parameters
    ----------
    scribbles_json : str
        Path to a JSON list of {"background": bool, "pixels": [[x, y], ...]} objects

    Returns
    -------
    list[Scribble]
    """
    with open(scribbles_json, encoding="utf-8") as f:
        records = json.load(f)
    return [
        Scribble(background=bool(record["background"]), pixels=[(int(x), int(y)) for x, y in record["pixels"]])
        for record in records
    ]


def samples_from_mask(data: np.ndarray, mask: np.ndarray) -> np.ndarray:
    """Intensities of data where mask is set

    Parameters
    ----------
    data : np.ndarray
        Channel intensities
    mask : np.ndarray
        Mask with the same number of elements as data, non-zero marks a sample

    Returns
    -------
    np.ndarray
        Selected intensities in flat (row-major) order, as float64
    """
    data = np.asarray(data).ravel()
    mask = np.asarray(mask).ravel()
    if data.shape != mask.shape:
        raise ValueError(f"Mask size {mask.shape[0]} does not match data size {data.shape[0]}")
    return data[mask.astype(bool)].astype(np.float64)


def samples_from_scribbles(
    data: np.ndarray,
    scribbles: list[Scribble],
    label: ScribbleLabel,
    width: int,
    height: int,
) -> np.ndarray:
    """Intensities of data under the scribbles carrying label

    Parameters
    ----------
    data : np.ndarray
        Channel intensities, width*height values in row-major order
    scribbles : list[Scribble]
        Annotated scribbles
    label : ScribbleLabel
        Only pixels of scribbles with this label are sampled
    width : int
        Image width
    height : int
        Image height

    Returns
    -------
    np.ndarray
        One float64 intensity per scribble pixel, in scribble order

    Raises
    ------
    ValueError
        If data does not hold width*height values or a pixel lies outside the image
    """
    data = np.asarray(data).ravel()
    if data.shape[0] != width * height:
        raise ValueError(f"Data has {data.shape[0]} values, expected {width}x{height}")
    xis = []
    for scribble in scribbles:
        if scribble.background != label.is_background:
            continue
        for x, y in scribble.pixels:
            if not (0 <= x < width and 0 <= y < height):
                raise ValueError(f"Scribble pixel ({x}, {y}) outside of {width}x{height} image")
            xis.append(data[width * y + x])
    return np.array(xis, dtype=np.float64)
