"""
Tests for the per-row pixel pipeline and in-memory split/merge.
"""

import logging

import numpy as np
import pytest

from color_channels.color.conversions import D50, rgb_identity
from color_channels.color.codec import UNIT
from color_channels.color.models import ColorModel, get_model
from color_channels.config import ConversionConfig
from color_channels.core.data_types import ChannelBuffer, ImageBuffer
from color_channels.core.errors import ConfigurationError, GeometryError
from color_channels.pipeline.orchestrator import merge_channels, split_image
from color_channels.pipeline.pixels import color_row, for_each_row, merge_pixels, split_pixels

EXACT_MODELS = ["rgb", "srgb", "linrgb", "hcl", "hsl", "hsluv", "lab", "luv", "xyy", "xyz"]
LOSSY_MODELS = ["ycbcr", "cmyk"]


def solid_image(rgba, height=2, width=2, bit_depth=8):
    data = np.empty((height, width, 4), dtype=np.uint16)
    data[...] = rgba
    return ImageBuffer(data, bit_depth=bit_depth)


@pytest.fixture
def mild_image():
    """Opaque 8-bit image of moderate colors that stay inside every model's ranges."""
    rng = np.random.default_rng(7)
    data = rng.integers(96, 161, size=(12, 10, 4)).astype(np.uint8)
    data[..., 3] = 255
    return ImageBuffer(data, bit_depth=8)


class TestScenarios:
    """Concrete split/merge examples."""

    def test_red_split_rgb(self):
        """A fully red image splits into saturated R and empty G, B."""
        image = solid_image((255, 0, 0, 255))

        channels = split_image(image, ConversionConfig(color_space="rgb", bit_depth=8))

        assert [c.name for c in channels] == ["R", "G", "B"]
        for channel in channels:
            assert channel.bounds == (2, 2)
            assert channel.data.dtype == np.uint8
        assert np.all(channels[0].data == 255)
        assert np.all(channels[1].data == 0)
        assert np.all(channels[2].data == 0)

    def test_transparent_black_hcla(self):
        """Transparent black has no hue, chroma, luminance or opacity."""
        image = solid_image((0, 0, 0, 0), height=1, width=1)

        channels = split_image(image, ConversionConfig(color_space="hcla"))

        assert [c.name for c in channels] == ["H", "C", "L", "alpha"]
        assert [c.get(0, 0) for c in channels] == [0, 0, 0, 0]

    def test_transparent_color_reads_as_black(self):
        """Color under zero opacity is ignored."""
        image = solid_image((200, 50, 10, 0), height=1, width=1)

        channels = split_image(image, ConversionConfig(color_space="rgba", bit_depth=8))

        assert [c.get(0, 0) for c in channels] == [0, 0, 0, 0]

    def test_mid_gray_xyy_merge_clamps(self):
        """x = y = Y = 0.5 lies outside the chromaticity triangle but still merges."""
        mid = [ChannelBuffer(np.full((2, 2), 32768, dtype=np.uint16), bit_depth=16) for _ in range(3)]

        image = merge_channels(mid, ConversionConfig(color_space="xyy"))

        assert image.bit_depth == 16
        assert np.all(image.alpha == 65535)
        assert np.all(image.data[..., 2] == 0)
        assert image.data[..., :3].max() <= 65535

    def test_out_of_range_channels_saturate(self):
        """Lightness at the top and hue at the top of their samples stay in gamut."""
        h = np.full((1, 3), 65535, dtype=np.uint16)
        c = np.array([[0, 32768, 65535]], dtype=np.uint16)
        l = np.full((1, 3), 65535, dtype=np.uint16)
        channels = [ChannelBuffer(x, bit_depth=16) for x in (h, c, l)]

        image = merge_channels(channels, ConversionConfig(color_space="hcl"))

        assert image.data.dtype == np.uint16
        assert image.data.max() <= 65535
        # L = 1 with no chroma is white, to within one 8-bit level
        assert image.get(0, 0)[:3] == pytest.approx((65535, 65535, 65535), abs=257)


class TestInverseProperty:
    """merge(split(image)) reproduces the image."""

    @pytest.mark.parametrize("space", EXACT_MODELS)
    def test_exact_models(self, mild_image, space):
        config = ConversionConfig(color_space=space)

        restored = merge_channels(split_image(mild_image, config), config)

        np.testing.assert_allclose(
            restored.to_bit_depth(8).data.astype(int),
            mild_image.data.astype(int),
            atol=1,
            err_msg=f"{space} failed split/merge",
        )

    @pytest.mark.parametrize("space", LOSSY_MODELS)
    def test_lossy_models(self, mild_image, space):
        """ycbcr and cmyk only hold 8-bit precision."""
        config = ConversionConfig(color_space=space)

        restored = merge_channels(split_image(mild_image, config), config)

        np.testing.assert_allclose(
            restored.to_bit_depth(8).data.astype(int),
            mild_image.data.astype(int),
            atol=4,
        )

    @pytest.mark.parametrize("space", ["lab", "luv", "hcl"])
    def test_custom_white_point(self, mild_image, space):
        config = ConversionConfig(color_space=space, white_point=D50)

        restored = merge_channels(split_image(mild_image, config), config)

        np.testing.assert_allclose(
            restored.to_bit_depth(8).data.astype(int), mild_image.data.astype(int), atol=1
        )

    def test_eight_bit_channels(self, mild_image):
        config = ConversionConfig(color_space="rgb", bit_depth=8)

        channels = split_image(mild_image, config)
        restored = merge_channels(channels, config)

        assert all(c.bit_depth == 8 for c in channels)
        np.testing.assert_array_equal(restored.data, mild_image.data)


class TestFullRange:
    """Arbitrary opaque colors, including fully saturated ones."""

    @pytest.fixture
    def random_image(self):
        rng = np.random.default_rng(11)
        data = rng.integers(0, 256, size=(32, 32, 4)).astype(np.uint8)
        data[..., 3] = 255
        data[0, :8, :3] = [
            (0, 0, 0), (255, 255, 255), (255, 0, 0), (0, 255, 0),
            (0, 0, 255), (255, 255, 0), (0, 255, 255), (255, 0, 255),
        ]
        return ImageBuffer(data, bit_depth=8)

    @pytest.mark.parametrize("space", ["rgb", "srgb", "linrgb", "hsl", "hsluv", "xyy"])
    def test_unbounded_models_round_trip(self, random_image, space):
        """Models whose ranges hold the whole RGB gamut invert every color."""
        config = ConversionConfig(color_space=space)

        restored = merge_channels(split_image(random_image, config), config)

        np.testing.assert_allclose(
            restored.to_bit_depth(8).data.astype(int),
            random_image.data.astype(int),
            atol=1,
            err_msg=f"{space} failed full-range split/merge",
        )

    def test_xyz_white_clips_z(self):
        """White has Z = 1.089, above the [0, 1] range, and loses some blue."""
        config = ConversionConfig(color_space="xyz")

        channels = split_image(solid_image((255, 255, 255, 255), 1, 1), config)
        restored = merge_channels(channels, config).to_bit_depth(8)

        assert channels[2].get(0, 0) == 65535
        r, g, b, a = restored.get(0, 0)
        assert (r, g, a) == (255, 255, 255)
        assert b == pytest.approx(244, abs=1)

    def test_hcl_saturated_red_clips_chroma(self):
        """Pure red has chroma 1.05, which saturates the C channel."""
        config = ConversionConfig(color_space="hcl")

        channels = split_image(solid_image((255, 0, 0, 255), 1, 1), config)
        restored = merge_channels(channels, config).to_bit_depth(8)

        assert channels[1].get(0, 0) == 65535
        # Merge still yields a valid reddish color
        r, g, b, _ = restored.get(0, 0)
        assert r > g and r > b

    @pytest.mark.parametrize("space", ["lab", "luv"])
    def test_opponent_axes_clip(self, space):
        """Blue reaches past -1 on the b / v axis and saturates to sample 0."""
        config = ConversionConfig(color_space=space)

        channels = split_image(solid_image((0, 0, 255, 255), 1, 1), config)

        assert channels[2].get(0, 0) == 0


class TestAlphaRoundTrip:
    """Opacity survives split and merge exactly."""

    @pytest.mark.parametrize("bit_depth", [8, 16])
    def test_alpha_restored(self, bit_depth):
        rng = np.random.default_rng(3)
        data = rng.integers(0, 256, size=(5, 6, 4)).astype(np.uint8)
        image = ImageBuffer(data, bit_depth=8)
        config = ConversionConfig(color_space="hcla", bit_depth=bit_depth)

        channels = split_image(image, config)
        restored = merge_channels(channels, config)

        assert channels[-1].name == "alpha"
        np.testing.assert_array_equal(restored.to_bit_depth(8).alpha, data[..., 3])

    def test_no_alpha_merges_opaque(self):
        image = solid_image((10, 20, 30, 100))
        config = ConversionConfig(color_space="rgb")

        restored = merge_channels(split_image(image, config), config)

        assert np.all(restored.alpha == 65535)


class TestValidation:
    """Errors raised before any pixel work."""

    def test_bounds_mismatch(self):
        calls = []

        def to_rgb(channels):
            calls.append(channels)
            return channels

        model = ColorModel(
            name="probe",
            channel_names=("R", "G", "B"),
            ranges=(UNIT, UNIT, UNIT),
            to_channels=rgb_identity,
            to_rgb=to_rgb,
        )
        channels = [
            ChannelBuffer.allocate("R", 2, 2, 8),
            ChannelBuffer.allocate("G", 2, 2, 8),
            ChannelBuffer.allocate("B", 2, 3, 8),
        ]

        with pytest.raises(GeometryError, match="same dimensions"):
            merge_pixels(channels, model)
        assert calls == []

    def test_merge_channels_bounds_mismatch(self):
        channels = [ChannelBuffer.allocate(n, 4, 4, 16) for n in "Lab"]
        channels.append(ChannelBuffer.allocate("alpha", 4, 5, 16))

        with pytest.raises(GeometryError):
            merge_channels(channels, ConversionConfig(color_space="laba"))

    def test_wrong_channel_count(self):
        channels = [ChannelBuffer.allocate(n, 2, 2, 16) for n in "HCL"]

        with pytest.raises(ConfigurationError, match="Expected 4 input files"):
            merge_channels(channels, ConversionConfig(color_space="hcla"))

    def test_merge_pixels_count(self):
        channels = [ChannelBuffer.allocate(n, 2, 2, 16) for n in "CMY"]

        with pytest.raises(ConfigurationError):
            merge_pixels(channels, get_model("cmyk"))

    def test_unknown_space(self):
        with pytest.raises(ConfigurationError):
            split_image(solid_image((0, 0, 0, 255)), ConversionConfig(color_space="hsv"))


class TestPipelineMechanics:
    """Row scheduling, bit depths and premultiplied input."""

    def test_worker_count_does_not_change_result(self, mild_image):
        model = get_model("lab")

        single = split_pixels(mild_image, model, workers=1)
        many = split_pixels(mild_image, model, workers=8)

        for a, b in zip(single, many):
            np.testing.assert_array_equal(a.data, b.data)

    def test_every_row_visited(self):
        seen = []
        for_each_row(17, seen.append, workers=4)
        assert sorted(seen) == list(range(17))

    def test_zero_rows(self):
        for_each_row(0, lambda y: None)

    def test_row_errors_propagate(self):
        def process_row(y):
            if y == 3:
                raise RuntimeError("row 3 failed")

        with pytest.raises(RuntimeError, match="row 3"):
            for_each_row(8, process_row, workers=2)

    def test_color_row(self):
        data = np.array([[[255, 0, 51, 255], [255, 255, 255, 0]]], dtype=np.uint8)
        row = color_row(ImageBuffer(data, bit_depth=8), 0)

        assert row.shape == (3, 2)
        np.testing.assert_allclose(row[:, 0], [1.0, 0.0, 0.2])
        np.testing.assert_array_equal(row[:, 1], [0.0, 0.0, 0.0])

    def test_mixed_input_depths(self):
        """Each channel is decoded at its own bit depth."""
        r = ChannelBuffer(np.full((1, 1), 255, dtype=np.uint8), bit_depth=8)
        g = ChannelBuffer(np.full((1, 1), 65535, dtype=np.uint16), bit_depth=16)
        b = ChannelBuffer(np.zeros((1, 1), dtype=np.uint16), bit_depth=16)

        image = merge_pixels([r, g, b], get_model("rgb"), bit_depth=8)

        assert image.get(0, 0) == (255, 255, 0, 255)

    def test_premultiplied_source(self):
        straight = ImageBuffer(np.array([[[128, 64, 0, 128]]], dtype=np.uint8), bit_depth=8)
        premultiplied = ImageBuffer(
            np.array([[[64, 32, 0, 128]]], dtype=np.uint8), bit_depth=8, premultiplied=True
        )
        model = get_model("rgb")

        for a, b in zip(split_pixels(straight, model), split_pixels(premultiplied, model)):
            np.testing.assert_array_equal(a.data, b.data)

    @pytest.mark.parametrize("bit_depth,expected", [(8, 124), (16, 124 * 257)])
    def test_ycbcr_luma_scales_like_any_channel(self, bit_depth, expected):
        """8-bit Y'CbCr results widen by 257, the same as other channels."""
        image = solid_image((124, 124, 124, 255), 1, 1)

        channels = split_pixels(image, get_model("ycbcr"), bit_depth=bit_depth)

        assert channels[0].get(0, 0) == expected
        assert channels[0].to_bit_depth(8).get(0, 0) == 124

    def test_sixteen_bit_source(self):
        image = solid_image((65535, 0, 32768, 65535), bit_depth=16)

        channels = split_pixels(image, get_model("rgb"), bit_depth=16)

        assert [c.get(1, 1) for c in channels] == [65535, 0, 32768]


class TestLogging:

    def test_unused_white_point_warns(self, caplog):
        config = ConversionConfig(color_space="xyz", white_point=D50)

        with caplog.at_level(logging.WARNING):
            split_image(solid_image((1, 2, 3, 255)), config)

        assert "does not use a white point" in caplog.text

    def test_default_white_point_is_silent(self, caplog):
        with caplog.at_level(logging.WARNING):
            split_image(solid_image((1, 2, 3, 255)), ConversionConfig(color_space="xyz"))

        assert caplog.text == ""
