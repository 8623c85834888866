"""Tests for confidence aggregation and settings."""

import pytest
from pydantic import ValidationError

from docmodel.config import Settings, settings
from docmodel.models import AggregationMethod, aggregate


class TestAggregate:
    """Tests for the aggregate reduction."""

    SCORES = [91.5, 87.25, 99.0, 95.125]

    def test_mean_default(self):
        """Mean is used when no method is given."""
        assert aggregate(self.SCORES) == sum(self.SCORES) / len(self.SCORES)

    @pytest.mark.parametrize(
        "method,expected",
        [
            (AggregationMethod.MIN, 87.25),
            (AggregationMethod.MAX, 99.0),
            ("min", 87.25),
            ("max", 99.0),
        ],
    )
    def test_min_max(self, method, expected):
        """Min and max select the extreme element."""
        assert aggregate(self.SCORES, method) == expected

    def test_accepts_generators(self):
        """Any iterable of scores is accepted."""
        assert aggregate((s for s in self.SCORES), "max") == 99.0

    def test_single_score(self):
        """A single score aggregates to itself under every method."""
        for method in AggregationMethod:
            assert aggregate([42.0], method) == 42.0

    def test_empty_sequence(self):
        """Empty input is rejected."""
        with pytest.raises(ValueError, match="empty"):
            aggregate([])

    def test_unknown_method(self):
        """Unknown methods are rejected."""
        with pytest.raises(ValueError):
            aggregate(self.SCORES, "median")

    def test_configured_default(self, monkeypatch):
        """The default method follows settings."""
        monkeypatch.setattr(settings, "aggregation_method", "max")
        assert aggregate(self.SCORES) == 99.0


class TestSettings:
    """Tests for settings loading."""

    def test_defaults(self):
        """Defaults match the documented values."""
        fresh = Settings()
        assert fresh.log_level == "INFO"
        assert fresh.aggregation_method == "mean"
        assert fresh.field_search_threshold == 80.0
        assert fresh.cell_separator == " | "

    def test_environment_override(self, monkeypatch):
        """Settings read DOCMODEL_-prefixed environment variables."""
        monkeypatch.setenv("DOCMODEL_AGGREGATION_METHOD", "min")
        monkeypatch.setenv("DOCMODEL_FIELD_SEARCH_THRESHOLD", "90")
        fresh = Settings()
        assert fresh.aggregation_method == "min"
        assert fresh.field_search_threshold == 90.0

    def test_invalid_aggregation_method(self, monkeypatch):
        """Unknown aggregation methods are rejected when settings load."""
        monkeypatch.setenv("DOCMODEL_AGGREGATION_METHOD", "median")
        with pytest.raises(ValidationError):
            Settings()
