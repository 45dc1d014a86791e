from pathlib import Path

import pandas as pd
from matplotlib import pyplot as plt
from scribble_core.logger import logger


def plot_channel_densities(df_densities: pd.DataFrame, output_file: str | Path, title: str = None) -> Path:
    """
    Plot the density curves of all channels against intensity.

    Parameters
    ----------
    df_densities : pd.DataFrame
        Densities indexed by intensity, one column per channel (as returned by estimate_image_densities).
    output_file : str | Path
        Path of the output image.
    title : str, optional
        Plot title.

    Returns
    -------
    Path
        Path to the plot.
    """
    logger.info("Plotting channel densities")
    plt.figure()
    ax = plt.gca()
    for column in df_densities.columns:
        linestyle = "--" if column.endswith("background") else "-"
        ax.plot(df_densities.index, df_densities[column], linestyle=linestyle, label=column)
    ax.set(xlabel="Intensity", ylabel="Density", xlim=(0, len(df_densities) - 1))
    if title:
        ax.set_title(title)
    ax.legend()

    output_file = Path(output_file)
    plt.savefig(output_file)
    plt.close()
    return output_file
