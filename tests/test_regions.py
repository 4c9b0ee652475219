# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""Tests for region samplers (disc, cup silhouette, full frame)."""

import numpy as np
import pytest

from matchacup.detect.config import DetectorConfig
from matchacup.detect.regions import (
    cup_silhouette_mask,
    disc_mask,
    full_frame_mask,
    sample_region,
)
from matchacup.schema import SamplerKind


class TestFullFrame:

    def test_every_pixel(self):
        mask = full_frame_mask(4, 3)
        assert mask.shape == (3, 4)
        assert mask.all()


class TestDisc:

    def test_shape_is_height_by_width(self):
        assert disc_mask(80, 60).shape == (60, 80)

    def test_center_in_corners_out(self):
        mask = disc_mask(100, 100, fraction=0.25)
        assert mask[50, 50]
        assert not mask[0, 0]
        assert not mask[99, 99]

    def test_area_matches_circle(self):
        mask = disc_mask(100, 100, fraction=0.25)
        assert int(mask.sum()) == pytest.approx(np.pi * 25 ** 2, rel=0.03)

    def test_radius_uses_shorter_side(self):
        mask = disc_mask(200, 100, fraction=0.25)  # radius 25
        assert mask[50, 100 + 24]
        assert not mask[50, 100 + 30]


class TestCupSilhouette:

    def test_center_in_corners_out(self):
        mask = cup_silhouette_mask(100, 100)
        assert mask[50, 50]
        assert not mask[0, 0]
        assert not mask[0, 99]
        assert not mask[99, 50]

    def test_area_on_100x100(self):
        """Large enough for the default 1000-pixel minimum."""
        count = int(cup_silhouette_mask(100, 100).sum())
        assert 3500 < count < 4400

    def test_wider_at_rim_than_base(self):
        mask = cup_silhouette_mask(200, 200)
        rim_row = 100 - 40   # rel_y = -0.5
        base_row = 100 + 40  # rel_y = +0.5
        assert mask[rim_row].sum() > mask[base_row].sum()

    def test_vertical_cutoff(self):
        mask = cup_silhouette_mask(200, 200)
        # rel_y = -0.8 sits at row 36
        assert not mask[30].any()
        assert mask[40].any()
        assert not mask[170].any()

    def test_symmetric_left_right(self):
        mask = cup_silhouette_mask(200, 200)
        # Column x mirrors column 200 - x around the center column 100
        np.testing.assert_array_equal(mask[:, 1:100], mask[:, 101:200][:, ::-1])

    def test_no_taper_is_symmetric_top_bottom(self):
        mask = cup_silhouette_mask(200, 200, taper=0.0)
        np.testing.assert_array_equal(mask[1:100], mask[101:200][::-1])


class TestSampleRegion:

    def test_dispatches_full_frame(self):
        cfg = DetectorConfig.for_sampler(SamplerKind.FULL_FRAME)
        assert sample_region(30, 20, cfg).all()

    def test_dispatches_disc_with_fraction(self):
        cfg = DetectorConfig.for_sampler(SamplerKind.DISC, disc_fraction=0.2)
        np.testing.assert_array_equal(sample_region(100, 80, cfg), disc_mask(100, 80, 0.2))

    def test_default_is_cup_silhouette(self):
        np.testing.assert_array_equal(
            sample_region(100, 100, DetectorConfig()),
            cup_silhouette_mask(100, 100),
        )

    def test_deterministic(self):
        cfg = DetectorConfig()
        np.testing.assert_array_equal(sample_region(64, 48, cfg), sample_region(64, 48, cfg))

    @pytest.mark.parametrize("fn", [disc_mask, cup_silhouette_mask, full_frame_mask])
    def test_zero_size_rejected(self, fn):
        with pytest.raises(ValueError, match="positive"):
            fn(0, 10)
