"""
Unit tests for model.py

Tests ImportanceModel validation and JSON persistence.
"""

import json

import numpy as np
import pytest

from record_insights.core.exceptions import ConfigValidationError, ParseError, SchemaMismatch
from record_insights.insights.model import ImportanceModel
from record_insights.insights.normalizer import Normalizer


@pytest.fixture
def model():
    return ImportanceModel(
        top_k=2,
        feature_size=3,
        prediction_size=2,
        correlations=[[0.9, -0.1, np.nan], [0.0, 0.5, -0.25]],
        normalizer=Normalizer(origin=[0.0, 1.0, 2.0], spread=[1.0, 0.0, 4.0], offset=1.0, name="minMaxCentered")
    )


class TestImportanceModelValidation:
    """Test construction checks."""

    def test_block_shape_must_match_sizes(self, model):
        with pytest.raises(SchemaMismatch) as exc_info:
            ImportanceModel(2, 3, 1, model.correlations, model.normalizer)

        assert exc_info.value.what == "correlation block"

    def test_normalizer_size_must_match(self, model):
        with pytest.raises(SchemaMismatch):
            ImportanceModel(2, 3, 2, model.correlations, Normalizer([0.0], [1.0], 0.0, "minMax"))

    @pytest.mark.parametrize("top_k", [0, -3, True])
    def test_top_k_must_be_positive(self, model, top_k):
        with pytest.raises(ConfigValidationError):
            ImportanceModel(top_k, 3, 2, model.correlations, model.normalizer)

    def test_equality_treats_nan_as_equal(self, model):
        copy = ImportanceModel(2, 3, 2, np.array(model.correlations), model.normalizer)

        assert copy == model


class TestImportanceModelPersistence:
    """Test dict and file round trips."""

    def test_dict_round_trip(self, model):
        assert ImportanceModel.from_dict(model.to_dict()) == model

    def test_file_round_trip_keeps_nan(self, model, tmp_path):
        path = tmp_path / "models" / "model.json"
        model.save(path)

        loaded = ImportanceModel.load(path)

        assert loaded == model
        assert np.isnan(loaded.correlations[0, 2])

    def test_saved_file_is_strict_json(self, model, tmp_path):
        path = tmp_path / "model.json"
        model.save(path)

        text = path.read_text()
        assert "NaN" not in text
        assert json.loads(text)['correlations'][0][2] is None

    def test_missing_field(self, model):
        data = model.to_dict()
        del data['normalizer']

        with pytest.raises(ParseError, match="normalizer"):
            ImportanceModel.from_dict(data)

    def test_non_numeric_correlation(self, model):
        data = model.to_dict()
        data['correlations'] = [["high", 0.1, 0.2], [0.0, 0.5, 0.1]]

        with pytest.raises(ParseError):
            ImportanceModel.from_dict(data)

    def test_unsupported_version(self, model):
        data = model.to_dict()
        data['format_version'] = 99

        with pytest.raises(ParseError, match="version"):
            ImportanceModel.from_dict(data)

    def test_invalid_json_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(ParseError):
            ImportanceModel.load(path)
