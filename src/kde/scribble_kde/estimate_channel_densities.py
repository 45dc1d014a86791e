from __future__ import annotations

import argparse
import sys

import numpy as np
from scribble_core.consts import DEFAULT_BANDWIDTH, DEFAULT_EPSILON, MEDIAN_FILTER_HALF_WINDOW, FileExtension
from scribble_core.logger import logger

from scribble_kde.channel_kde import KdeParams, estimate_image_densities
from scribble_kde.plot_densities import plot_channel_densities
from scribble_kde.scribbles import load_scribbles


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="estimate_channel_densities", description=run.__doc__)
    parser.add_argument(
        "-i",
        "--image",
        type=str,
        required=True,
        help="input image as a .npy array, HxW or HxWxC with intensities in [0, 255]",
    )
    evidence = parser.add_mutually_exclusive_group(required=True)
    evidence.add_argument(
        "-s",
        "--scribbles",
        type=str,
        help='JSON list of {"background": bool, "pixels": [[x, y], ...]} scribbles',
    )
    evidence.add_argument(
        "-m",
        "--mask",
        type=str,
        help="HxW .npy mask of the evidence pixels",
    )
    parser.add_argument(
        "-o",
        "--output-file",
        type=str,
        required=True,
        help="Path of output densities table (.csv or .tsv)",
    )
    parser.add_argument("--plot-file", type=str, default=None, help="Optional path of a .png plot of the densities")
    parser.add_argument(
        "--epsilon", type=float, default=DEFAULT_EPSILON, help="relative accuracy of the fast estimator"
    )
    parser.add_argument(
        "--bandwidth", type=float, default=DEFAULT_BANDWIDTH, help="kernel bandwidth in normalized intensity units"
    )
    parser.add_argument("--median-filter", action="store_true", help="median filter the densities")
    parser.add_argument(
        "--median-half-window",
        type=int,
        default=MEDIAN_FILTER_HALF_WINDOW,
        help="half window size of the median filter",
    )
    parser.add_argument(
        "--centered-median",
        action="store_true",
        help="use a symmetric window and a true median in the median filter",
    )
    parser.add_argument("--threads", type=int, default=1, help="number of channels estimated in parallel")
    return parser.parse_args(argv[1:])


def run(argv):
    """Estimate per channel intensity densities of an image from scribbles or a mask"""
    args = parse_args(argv)
    params = KdeParams(
        epsilon=args.epsilon,
        bandwidth=args.bandwidth,
        median_filter=args.median_filter,
        median_half_window=args.median_half_window,
        centered_median=args.centered_median,
    )

    logger.info(f"Loading image {args.image}")
    image = np.load(args.image)
    if args.scribbles:
        df_densities = estimate_image_densities(
            image, scribbles=load_scribbles(args.scribbles), params=params, threads=args.threads
        )
    else:
        df_densities = estimate_image_densities(image, mask=np.load(args.mask), params=params, threads=args.threads)

    logger.info(f"Writing densities to {args.output_file}")
    sep = "\t" if args.output_file.endswith(FileExtension.TSV.value) else ","
    df_densities.to_csv(args.output_file, sep=sep)
    if args.plot_file:
        plot_channel_densities(df_densities, args.plot_file)


def main():
    run(sys.argv)


if __name__ == "__main__":
    main()
