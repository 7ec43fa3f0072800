"""
Unit tests for fitter.py

Tests fitting importance models from (prediction, feature) records,
including sparse inputs, correlation slicing and schema enforcement.
"""

import numpy as np
import pytest
import scipy.sparse as sp

from record_insights.core.config import InsightsConfig
from record_insights.core.exceptions import AggregationError, SchemaMismatch
from record_insights.core.types import CorrelationType, NormType
from record_insights.insights.fitter import CorrelationFitter
from record_insights.stats.aggregator import PandasStatisticsAggregator


@pytest.fixture
def linear_records():
    """Prediction 2x + 1 with features x, -x and a constant column."""
    x = np.linspace(0.0, 1.0, 11)
    return [([2 * v + 1], [v, -v, 3.0]) for v in x]


class SpyAggregator(PandasStatisticsAggregator):
    """Records the correlation kind it was asked for."""

    def __init__(self):
        super().__init__()
        self.kinds = []
        self.widths = []

    def correlation(self, vectors, kind):
        self.kinds.append(kind)
        self.widths.append(len(vectors))
        return super().correlation(vectors, kind)


class WrongShapeAggregator(PandasStatisticsAggregator):
    """Returns a correlation matrix that is one column short."""

    def correlation(self, vectors, kind):
        return super().correlation(vectors, kind)[:, :-1]


class TestCorrelationFitter:
    """Test the fitted model contents."""

    def test_sizes_and_top_k(self, linear_records):
        model = CorrelationFitter().fit(linear_records, InsightsConfig(top_k=2))

        assert model.feature_size == 3
        assert model.prediction_size == 1
        assert model.top_k == 2
        assert model.correlations.shape == (1, 3)

    def test_correlation_block(self, linear_records):
        model = CorrelationFitter().fit(linear_records)

        np.testing.assert_allclose(model.correlations[0, :2], [1.0, -1.0])
        assert np.isnan(model.correlations[0, 2])

    def test_multiple_prediction_components(self):
        x = np.linspace(-1.0, 1.0, 9)
        records = [([v, -v], [v, v * v]) for v in x]

        model = CorrelationFitter().fit(records)

        assert model.correlations.shape == (2, 2)
        assert model.correlations[0, 0] == pytest.approx(1.0)
        assert model.correlations[1, 0] == pytest.approx(-1.0)
        assert model.correlations[0, 1] == pytest.approx(0.0, abs=1e-12)

    def test_normalizer_uses_feature_columns_only(self, linear_records):
        model = CorrelationFitter().fit(linear_records, InsightsConfig(norm_type=NormType.MIN_MAX))

        assert model.normalizer.size == 3
        np.testing.assert_allclose(model.normalizer.origin, [0.0, -1.0, 3.0])
        np.testing.assert_allclose(model.normalizer.spread, [1.0, 1.0, 0.0])

    @pytest.mark.parametrize("norm_type", list(NormType))
    def test_constant_feature_normalizes_to_zero(self, linear_records, norm_type):
        model = CorrelationFitter().fit(linear_records, InsightsConfig(norm_type=norm_type))

        for features in ([0.2, -0.2, 3.0], [5.0, 5.0, -40.0]):
            assert model.normalizer.apply(features)[2] == 0.0

    def test_spearman_passed_through(self):
        x = np.linspace(0.1, 2.0, 15)
        records = [([v ** 3], [v]) for v in x]
        spy = SpyAggregator()

        model = CorrelationFitter(spy).fit(records, InsightsConfig(correlation_type="spearman"))

        assert spy.kinds == [CorrelationType.SPEARMAN]
        assert model.correlations[0, 0] == pytest.approx(1.0)

    def test_sparse_features_match_dense(self, linear_records):
        sparse_records = [
            (prediction, sp.csr_matrix(np.array([features])))
            for prediction, features in linear_records
        ]

        dense_model = CorrelationFitter().fit(linear_records)
        sparse_model = CorrelationFitter().fit(sparse_records)

        assert sparse_model == dense_model

    def test_model_is_read_only(self, linear_records):
        model = CorrelationFitter().fit(linear_records)

        with pytest.raises(ValueError):
            model.correlations[0, 0] = 0.0
        with pytest.raises(AttributeError):
            model.top_k = 3


class TestCorrelationFitterSchema:
    """Test schema enforcement during fit."""

    def test_empty_dataset(self):
        with pytest.raises(SchemaMismatch) as exc_info:
            CorrelationFitter().fit([])

        assert exc_info.value.what == "dataset"

    def test_feature_length_disagreement(self, linear_records):
        records = linear_records + [([1.0], [0.1, 0.2])]

        with pytest.raises(SchemaMismatch) as exc_info:
            CorrelationFitter().fit(records)

        assert exc_info.value.what == "feature vector"
        assert exc_info.value.expected == 3
        assert exc_info.value.actual == 2
        assert exc_info.value.record_index == len(linear_records)

    def test_prediction_length_disagreement(self, linear_records):
        records = [([0.1, 0.2], [0.1, 0.2, 0.3])] + linear_records

        with pytest.raises(SchemaMismatch) as exc_info:
            CorrelationFitter().fit(records)

        assert exc_info.value.what == "prediction vector"
        assert exc_info.value.record_index == 1

    def test_zero_length_features(self):
        with pytest.raises(SchemaMismatch):
            CorrelationFitter().fit([([1.0], [])])

    def test_identifier_count_disagreement(self, linear_records):
        with pytest.raises(SchemaMismatch) as exc_info:
            CorrelationFitter().fit(linear_records, column_identifiers=["a", "b"])

        assert exc_info.value.what == "column identifiers"

    def test_wrongly_shaped_aggregation(self, linear_records):
        with pytest.raises(AggregationError) as exc_info:
            CorrelationFitter(WrongShapeAggregator()).fit(linear_records)

        assert exc_info.value.operation == "correlation"
