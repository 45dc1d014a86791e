import numpy as np
import pandas as pd
import pytest
from scribble_core.array_utils import median_filter
from scribble_core.consts import ScribbleLabel
from scribble_kde.channel_kde import (
    KdeParams,
    channel_kde_from_mask,
    channel_kde_from_scribbles,
    color_channel_kde,
    estimate_image_densities,
    normalize_intensities,
    target_grid,
)
from scribble_kde.scribbles import Scribble


@pytest.fixture
def image():
    return np.random.default_rng(3).integers(0, 256, size=(4, 4, 3), dtype=np.uint8)


@pytest.fixture
def scribbles():
    return [
        Scribble(background=False, pixels=[(1, 1), (2, 1)]),
        Scribble(background=True, pixels=[(0, 3), (3, 3)]),
    ]


class TestNormalization:
    def test_target_grid(self):
        grid = target_grid()
        assert grid.shape == (256,)
        assert grid[128] == 0.0
        assert grid[0] == -1.0
        assert grid[255] == 0.9921875

    def test_normalize_intensities(self):
        assert np.array_equal(normalize_intensities([0, 64, 128, 192]), [-1.0, -0.5, 0.0, 0.5])

    def test_grid_size(self):
        assert target_grid(16).shape == (16,)


class TestColorChannelKDE:
    def test_peak_at_sample_intensity(self):
        density = color_channel_kde([40])
        assert density.shape == (256,)
        assert np.argmax(density) == 40
        assert density[40] == pytest.approx(1.0, rel=1e-3)

    def test_equal_weights(self):
        density = color_channel_kde([40, 40, 200, 200])
        assert density[40] == pytest.approx(0.5, rel=1e-3)
        assert density[200] == pytest.approx(0.5, rel=1e-3)

    def test_not_normalized(self):
        assert color_channel_kde([100, 110, 120]).sum() > 1.0

    def test_no_samples(self):
        density = color_channel_kde([])
        np.testing.assert_allclose(density, 1 / 256)

    def test_deterministic(self):
        xis = np.random.default_rng(0).integers(0, 256, size=500)
        assert np.array_equal(color_channel_kde(xis), color_channel_kde(xis))

    def test_median_filter(self):
        xis = [10, 50, 51, 52, 180]
        raw = color_channel_kde(xis)
        filtered = color_channel_kde(xis, KdeParams(median_filter=True))
        assert np.array_equal(filtered, median_filter(raw, 5))
        assert not np.array_equal(filtered, raw)

    def test_centered_median_filter(self):
        xis = [10, 50, 51, 52, 180]
        raw = color_channel_kde(xis)
        filtered = color_channel_kde(xis, KdeParams(median_filter=True, centered_median=True, median_half_window=2))
        assert np.array_equal(filtered, median_filter(raw, 2, centered=True))


class TestSampleSources:
    def test_from_scribbles(self):
        data = np.array([10, 20, 30, 40], dtype=np.uint8)
        scribbles = [Scribble(background=False, pixels=[(1, 1)])]
        foreground = channel_kde_from_scribbles(data, scribbles, ScribbleLabel.FOREGROUND, 2, 2)
        background = channel_kde_from_scribbles(data, scribbles, ScribbleLabel.BACKGROUND, 2, 2)
        assert np.argmax(foreground) == 40
        np.testing.assert_allclose(background, 1 / 256)

    def test_from_mask(self):
        data = np.array([[10, 20], [30, 40]], dtype=np.uint8)
        mask = np.array([[0, 1], [0, 0]], dtype=bool)
        assert np.array_equal(channel_kde_from_mask(data, mask), color_channel_kde([20]))

    def test_scribbles_and_mask_agree(self):
        data = np.array([[10, 20], [30, 40]], dtype=np.uint8)
        scribbles = [Scribble(background=True, pixels=[(0, 1), (1, 0)])]
        mask = np.array([[0, 1], [1, 0]], dtype=bool)
        np.testing.assert_allclose(
            channel_kde_from_scribbles(data, scribbles, ScribbleLabel.BACKGROUND, 2, 2),
            channel_kde_from_mask(data, mask),
        )


class TestEstimateImageDensities:
    def test_scribbles(self, image, scribbles):
        df_densities = estimate_image_densities(image, scribbles=scribbles)
        assert list(df_densities.columns) == [
            "R_foreground",
            "R_background",
            "G_foreground",
            "G_background",
            "B_foreground",
            "B_background",
        ]
        assert df_densities.shape == (256, 6)
        assert df_densities.index.name == "intensity"
        expected = color_channel_kde([image[1, 1, 1], image[1, 2, 1]])
        assert np.array_equal(df_densities["G_foreground"].to_numpy(), expected)

    def test_threads(self, image, scribbles):
        params = KdeParams(median_filter=True)
        pd.testing.assert_frame_equal(
            estimate_image_densities(image, scribbles=scribbles, params=params, threads=1),
            estimate_image_densities(image, scribbles=scribbles, params=params, threads=4),
        )

    def test_mask(self, image):
        mask = np.zeros((4, 4), dtype=bool)
        mask[0, :] = True
        df_densities = estimate_image_densities(image, mask=mask)
        assert list(df_densities.columns) == ["R", "G", "B"]
        assert np.array_equal(df_densities["B"].to_numpy(), color_channel_kde(image[0, :, 2]))

    def test_gray_image(self, image, scribbles):
        df_densities = estimate_image_densities(image[:, :, 0], scribbles=scribbles)
        assert list(df_densities.columns) == ["gray_foreground", "gray_background"]

    def test_missing_background_scribbles(self, image):
        df_densities = estimate_image_densities(image, scribbles=[Scribble(background=False, pixels=[(0, 0)])])
        np.testing.assert_allclose(df_densities["R_background"], 1 / 256)

    @pytest.mark.parametrize("use_scribbles,use_mask", [(True, True), (False, False)])
    def test_exactly_one_source(self, image, scribbles, use_scribbles, use_mask):
        with pytest.raises(ValueError):
            estimate_image_densities(
                image,
                scribbles=scribbles if use_scribbles else None,
                mask=np.ones((4, 4), dtype=bool) if use_mask else None,
            )

    def test_bad_image_shape(self, scribbles):
        with pytest.raises(ValueError):
            estimate_image_densities(np.zeros(16), scribbles=scribbles)
