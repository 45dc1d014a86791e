from enum import Enum


class FileExtension(Enum):
    """File Extension enum"""

    CSV = ".csv"
    TSV = ".tsv"
    NPY = ".npy"
    JSON = ".json"
    PNG = ".png"


class ScribbleLabel(Enum):
    FOREGROUND = "foreground"
    BACKGROUND = "background"

    @property
    def is_background(self) -> bool:
        return self is ScribbleLabel.BACKGROUND


class BandwidthRule(Enum):
    """How the kernel bandwidth is derived from the sample count"""

    FIXED = "fixed"  # constant DEFAULT_BANDWIDTH, works better on scribbles than SCOTT
    SCOTT = "scott"  # n ** (-1 / (d + 4)), as in scipy.stats.gaussian_kde


# intensity domain
TARGET_GRID_SIZE = 256
INTENSITY_CENTER = 128
INTENSITY_SCALE = 128.0

# kde
DEFAULT_BANDWIDTH = 0.1
DEFAULT_EPSILON = 1e-4
MEDIAN_FILTER_HALF_WINDOW = 5

# output
INTENSITY = "intensity"
CHANNEL_NAMES = ("R", "G", "B")
