# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""Tests for DetectorConfig and JSON config loading."""

import json
import logging

import pytest

from matchacup import DetectorConfig, SamplerKind, ScoringMethod, load_config
from matchacup.detect.classify import MatchaPixelRule
from matchacup.schema import IDEAL_MATCHA_COLORS


class TestDefaults:

    def test_default_contract(self):
        cfg = DetectorConfig()
        assert cfg.sampler is SamplerKind.CUP_SILHOUETTE
        assert cfg.scoring is ScoringMethod.RATIO_BLEND
        assert (cfg.min_pixels, cfg.min_green_ratio) == (1000, 0.10)
        assert cfg.alpha_cutoff == 200
        assert cfg.reference_radius == 50.0
        assert cfg.reference_colors == IDEAL_MATCHA_COLORS

    @pytest.mark.parametrize("sampler, expected", [
        (SamplerKind.CUP_SILHOUETTE, (1000, 0.10)),
        (SamplerKind.DISC, (100, 0.15)),
        (SamplerKind.FULL_FRAME, (50, 0.04)),
    ])
    def test_sampler_presets(self, sampler, expected):
        cfg = DetectorConfig.for_sampler(sampler)
        assert cfg.sampler is sampler
        assert (cfg.min_pixels, cfg.min_green_ratio) == expected

    def test_preset_overrides(self):
        cfg = DetectorConfig.for_sampler(SamplerKind.DISC, min_pixels=10)
        assert cfg.min_pixels == 10
        assert cfg.min_green_ratio == 0.15

    @pytest.mark.parametrize("sampler, expected", [
        (SamplerKind.DISC, (100, 0.15)),
        (SamplerKind.FULL_FRAME, (50, 0.04)),
    ])
    def test_constructor_applies_sampler_preset(self, sampler, expected):
        cfg = DetectorConfig(sampler=sampler)
        assert (cfg.min_pixels, cfg.min_green_ratio) == expected
        assert cfg == DetectorConfig.for_sampler(sampler)

    def test_explicit_thresholds_beat_preset(self):
        cfg = DetectorConfig(sampler=SamplerKind.FULL_FRAME, min_green_ratio=0.3)
        assert (cfg.min_pixels, cfg.min_green_ratio) == (50, 0.3)

    def test_switching_sampler_resets_thresholds(self):
        cfg = DetectorConfig().with_overrides(sampler=SamplerKind.FULL_FRAME)
        assert (cfg.min_pixels, cfg.min_green_ratio) == (50, 0.04)
        kept = DetectorConfig().with_overrides(sampler=SamplerKind.DISC, min_pixels=7)
        assert (kept.min_pixels, kept.min_green_ratio) == (7, 0.15)

    def test_with_overrides_keeps_other_fields(self):
        cfg = DetectorConfig.for_sampler(SamplerKind.DISC).with_overrides(alpha_cutoff=128)
        assert cfg.alpha_cutoff == 128
        assert cfg.sampler is SamplerKind.DISC


class TestValidation:

    @pytest.mark.parametrize("overrides, match", [
        ({"alpha_cutoff": 256}, "alpha_cutoff"),
        ({"min_pixels": 0}, "min_pixels"),
        ({"min_green_ratio": 1.5}, "min_green_ratio"),
        ({"reference_colors": ()}, "reference_colors"),
        ({"reference_radius": -1.0}, "reference_radius"),
        ({"disc_fraction": 0.0}, "disc_fraction"),
        ({"cup_vertical_limit": 0.0}, "cup_vertical_limit"),
        ({"cup_taper": 2.0}, "cup_taper"),
    ])
    def test_out_of_range(self, overrides, match):
        with pytest.raises(ValueError, match=match):
            DetectorConfig(**overrides)


class TestSerialization:

    def test_dict_roundtrip(self):
        cfg = DetectorConfig.for_sampler(
            SamplerKind.FULL_FRAME,
            scoring=ScoringMethod.PERCEPTUAL,
            rule=MatchaPixelRule(green_min=90),
        )
        assert DetectorConfig.from_dict(cfg.to_dict()) == cfg

    def test_missing_keys_use_sampler_preset(self):
        cfg = DetectorConfig.from_dict({"sampler": "disc"})
        assert (cfg.min_pixels, cfg.min_green_ratio) == (100, 0.15)

    def test_reference_colors_as_hex_strings(self):
        cfg = DetectorConfig.from_dict({"reference_colors": ["#7BAF5C", "76a646"]})
        assert [ref.hex for ref in cfg.reference_colors] == ["#7baf5c", "#76a646"]

    def test_unknown_keys_warn(self, caplog):
        with caplog.at_level(logging.WARNING, logger="matchacup.detect.config"):
            cfg = DetectorConfig.from_dict({"min_pixels": 5, "blur": 3})
        assert cfg.min_pixels == 5
        assert "Ignoring unknown config keys: blur" in caplog.text

    def test_unknown_keys_strict(self):
        with pytest.raises(ValueError, match="Unknown config keys: blur"):
            DetectorConfig.from_dict({"blur": 3}, strict_unknown=True)

    def test_bad_enum_value(self):
        with pytest.raises(ValueError):
            DetectorConfig.from_dict({"scoring": "vibes"})


class TestLoadConfig:

    def test_load_json(self, tmp_path):
        path = tmp_path / "detector.json"
        path.write_text(json.dumps({
            "sampler": "full_frame",
            "scoring": "perceptual",
            "min_green_ratio": 0.2,
        }))
        cfg = load_config(path)
        assert cfg.sampler is SamplerKind.FULL_FRAME
        assert cfg.scoring is ScoringMethod.PERCEPTUAL
        assert cfg.min_green_ratio == 0.2
        assert cfg.min_pixels == 50

    def test_non_object_rejected(self, tmp_path):
        path = tmp_path / "detector.json"
        path.write_text("[1, 2, 3]")
        with pytest.raises(ValueError, match="JSON object"):
            load_config(path)

    def test_strict_unknown_passed_through(self, tmp_path):
        path = tmp_path / "detector.json"
        path.write_text('{"typo_ratio": 0.3}')
        with pytest.raises(ValueError, match="typo_ratio"):
            load_config(str(path), strict_unknown=True)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.json")
