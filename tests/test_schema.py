# Copyright (c) 2026 Matchacup
# SPDX-License-Identifier: MIT

"""Tests for schema types and serialization."""

import json
from datetime import datetime, timezone

import pytest

from matchacup.schema import (
    IDEAL_MATCHA_COLORS,
    NEUTRAL_GRAY,
    ColorStatistics,
    DetectionResult,
    RatingRecord,
    ReferenceColor,
    SamplerKind,
    ScoringMethod,
)


class TestReferenceColor:

    def test_normalizes_hex(self):
        ref = ReferenceColor("Bright", "7BAF5C")
        assert ref.hex == "#7baf5c"
        assert ref.rgb == (123, 175, 92)

    def test_rejects_bad_hex(self):
        with pytest.raises(ValueError, match="#rrggbb"):
            ReferenceColor("Bad", "#12345")

    def test_default_palette(self):
        assert [ref.hex for ref in IDEAL_MATCHA_COLORS] == [
            "#7baf5c", "#a3c585", "#8fb26b", "#76a646",
        ]

    def test_dict_without_name_uses_hex(self):
        assert ReferenceColor.from_dict({"hex": "#76a646"}).name == "#76a646"


class TestColorStatistics:

    def test_ratios(self):
        stats = ColorStatistics(200, (1.0, 2.0, 3.0), matcha_count=50, reference_count=10)
        assert stats.matcha_ratio == 0.25
        assert stats.reference_ratio == 0.05
        assert not stats.is_empty

    def test_matcha_count_bounded_by_pixels(self):
        with pytest.raises(ValueError, match="matcha_count"):
            ColorStatistics(10, (0.0, 0.0, 0.0), matcha_count=11, reference_count=0)

    def test_reference_count_bounded_by_matcha(self):
        with pytest.raises(ValueError, match="reference_count"):
            ColorStatistics(10, (0.0, 0.0, 0.0), matcha_count=2, reference_count=3)

    def test_to_dict(self):
        d = ColorStatistics(4, (1.0, 2.0, 3.0), 2, 1).to_dict()
        assert d["mean_rgb"] == [1.0, 2.0, 3.0]
        assert d["matcha_ratio"] == 0.5


class TestDetectionResult:

    def test_failure(self):
        result = DetectionResult.failure()
        assert result.cup_found is False
        assert result.color_score == 0.0
        assert result.avg_color == NEUTRAL_GRAY == "#888888"
        assert result.max_score == 10.0

    def test_failure_on_five_point_scale(self):
        assert DetectionResult.failure(max_score=5.0).max_score == 5.0

    def test_score_above_max_rejected(self):
        with pytest.raises(ValueError, match="color_score"):
            DetectionResult(True, 10.5, "#7baf5c")

    def test_negative_score_rejected(self):
        with pytest.raises(ValueError, match="color_score"):
            DetectionResult(True, -1.0, "#7baf5c")

    def test_not_found_must_score_zero(self):
        with pytest.raises(ValueError, match="no cup"):
            DetectionResult(False, 3.0, "#7baf5c")

    @pytest.mark.parametrize("bad", ["#7BAF5C", "7baf5c", "#7baf5", "#7baf5cc", "#gggggg"])
    def test_avg_color_format(self, bad):
        with pytest.raises(ValueError, match="avg_color"):
            DetectionResult(False, 0.0, bad)

    def test_non_positive_max_rejected(self):
        with pytest.raises(ValueError, match="max_score"):
            DetectionResult(False, 0.0, "#888888", max_score=0.0)

    def test_wire_shape(self):
        result = DetectionResult(True, 9.0, "#7baf5c")
        assert json.loads(result.to_json()) == {
            "cupFound": True,
            "colorScore": 9.0,
            "avgColor": "#7baf5c",
            "maxScore": 10.0,
        }

    def test_from_json(self):
        payload = '{"cupFound": true, "colorScore": 4.5, "avgColor": "#8fb26b", "maxScore": 5}'
        assert DetectionResult.from_json(payload) == DetectionResult(True, 4.5, "#8fb26b", 5.0)

    def test_from_dict_defaults_to_ten_point_scale(self):
        result = DetectionResult.from_dict({"cupFound": False, "colorScore": 0, "avgColor": "#888888"})
        assert result.max_score == 10.0

    @pytest.mark.parametrize("value", ["false", "true", 0, 1, None])
    def test_from_dict_rejects_non_bool_found(self, value):
        with pytest.raises(TypeError, match="cupFound"):
            DetectionResult.from_dict({"cupFound": value, "colorScore": 0, "avgColor": "#888888"})

    def test_label(self):
        assert DetectionResult(True, 9.0, "#7baf5c").label == "Top grade: Vibrant Ceremonial!"
        assert DetectionResult(True, 2.0, "#7baf5c").label == "Poor: Not matcha-signature color"
        assert DetectionResult.failure().label is None

    def test_frozen(self):
        result = DetectionResult.failure()
        with pytest.raises(AttributeError):
            result.color_score = 5.0


class TestStrategyTags:

    def test_values(self):
        assert SamplerKind("cup_silhouette") is SamplerKind.CUP_SILHOUETTE
        assert ScoringMethod("perceptual") is ScoringMethod.PERCEPTUAL


class TestRatingRecord:

    def _record(self, **kwargs):
        params = {"image_url": "https://cdn.example/cup.jpg", "ai_score": 8.0, "user_score": 7.5}
        params.update(kwargs)
        return RatingRecord(**params)

    def test_empty_url_rejected(self):
        with pytest.raises(ValueError, match="image_url"):
            self._record(image_url="")

    def test_negative_scores_rejected(self):
        with pytest.raises(ValueError, match="user_score"):
            self._record(user_score=-0.5)
        with pytest.raises(ValueError, match="ai_score"):
            self._record(ai_score=-1.0)

    def test_row_columns(self):
        ts = datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)
        row = self._record(comment="Smooth", created_at=ts).to_row()
        assert set(row) == {
            "image_url", "ai_score", "user_score", "comment",
            "location", "user_id", "created_at",
        }
        assert row["created_at"] == "2026-03-01T12:30:00+00:00"

    def test_from_row_parses_timestamp(self):
        row = self._record(created_at=datetime(2026, 3, 1, tzinfo=timezone.utc)).to_row()
        record = RatingRecord.from_row(row)
        assert record.created_at == datetime(2026, 3, 1, tzinfo=timezone.utc)
        assert record.user_score == 7.5

    @pytest.mark.parametrize("text, expected", [
        ("2026-03-01T12:30:00.12345Z",
         datetime(2026, 3, 1, 12, 30, 0, 123450, tzinfo=timezone.utc)),
        ("2026-03-01 12:30:00+00",
         datetime(2026, 3, 1, 12, 30, tzinfo=timezone.utc)),
        ("2026-03-01T12:30:00.1+00:00",
         datetime(2026, 3, 1, 12, 30, 0, 100000, tzinfo=timezone.utc)),
        ("2026-03-01T12:30:00", datetime(2026, 3, 1, 12, 30)),
    ])
    def test_from_row_database_timestamps(self, text, expected):
        row = {"image_url": "https://cdn.example/cup.jpg", "ai_score": 8, "user_score": 7.5,
               "created_at": text}
        assert RatingRecord.from_row(row).created_at == expected

    def test_with_created_at(self):
        record = self._record()
        ts = datetime(2026, 1, 1, tzinfo=timezone.utc)
        stamped = record.with_created_at(ts)
        assert stamped.created_at == ts
        assert record.created_at is None
