"""
Fit phase: build an ImportanceModel from (prediction, feature) records.

Each record's feature and prediction vectors are concatenated (features
first), the statistics aggregator correlates every column pair over the
whole population, and the prediction rows x feature columns block of that
matrix becomes the model's correlation block. Column statistics of the
feature columns build the normalizer.
"""

import logging
from typing import Hashable, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from record_insights.core.config import InsightsConfig
from record_insights.core.exceptions import AggregationError, SchemaMismatch
from record_insights.insights.model import ImportanceModel
from record_insights.insights.normalizer import make_normalizer
from record_insights.stats.aggregator import PandasStatisticsAggregator, StatisticsAggregator
from record_insights.utils.vectors import Vector, as_vector, concatenate, vector_size

logger = logging.getLogger(__name__)


class CorrelationFitter:
    """
    Fits correlation-based importance models.

    Attributes:
        aggregator: Statistics collaborator computing the correlation matrix
            and column statistics

    Example:
        >>> fitter = CorrelationFitter()
        >>> model = fitter.fit(zip(predictions, features), InsightsConfig(top_k=5))
        >>> model.correlations.shape
        (1, 3)
    """

    def __init__(self, aggregator: Optional[StatisticsAggregator] = None):
        self.aggregator = aggregator or PandasStatisticsAggregator()

    def fit(
        self,
        records: Iterable[Tuple[object, object]],
        config: Optional[InsightsConfig] = None,
        column_identifiers: Optional[Sequence[Hashable]] = None
    ) -> ImportanceModel:
        """
        Fit an importance model.

        Args:
            records: (prediction vector, feature vector) pairs
            config: Normalization, correlation and top_k settings
            column_identifiers: Optional identifiers of the feature slots;
                checked against the feature vector length

        Returns:
            Immutable ImportanceModel

        Raises:
            SchemaMismatch: On empty input, zero-length vectors, vector lengths
                that differ from the first record, or an identifier list whose
                length is not the feature size
            AggregationError: If the aggregator returns wrongly shaped results
        """
        config = config or InsightsConfig()
        combined, prediction_size, feature_size = self._concatenate_records(records)

        if column_identifiers is not None and len(column_identifiers) != feature_size:
            raise SchemaMismatch("column identifiers", expected=feature_size, actual=len(column_identifiers))

        width = feature_size + prediction_size
        logger.info(
            f"Fitting importance model on {len(combined)} records "
            f"(features={feature_size}, predictions={prediction_size}, "
            f"correlation={config.correlation_type.value}, norm={config.norm_type.value})"
        )

        matrix = np.asarray(self.aggregator.correlation(combined, config.correlation_type), dtype=np.float64)
        if matrix.shape != (width, width):
            raise AggregationError(
                f"Correlation matrix has shape {matrix.shape}, expected {(width, width)}",
                operation="correlation"
            )
        correlations = matrix[feature_size:width, :feature_size]

        stats = self.aggregator.column_stats(combined)
        if stats.size != width:
            raise AggregationError(
                f"Column statistics cover {stats.size} columns, expected {width}",
                operation="column_stats"
            )
        normalizer = make_normalizer(stats, config.norm_type, size=feature_size)

        undefined = int(np.count_nonzero(np.isnan(correlations)))
        if undefined:
            logger.debug(f"{undefined} prediction/feature correlations are undefined and will score 0")

        return ImportanceModel(
            top_k=config.top_k,
            feature_size=feature_size,
            prediction_size=prediction_size,
            correlations=correlations,
            normalizer=normalizer
        )

    @staticmethod
    def _concatenate_records(records: Iterable[Tuple[object, object]]) -> Tuple[List[Vector], int, int]:
        combined: List[Vector] = []
        prediction_size = feature_size = None

        for index, (prediction, features) in enumerate(records):
            prediction = as_vector(prediction, what="prediction vector")
            features = as_vector(features, what="feature vector")

            if prediction_size is None:
                prediction_size, feature_size = vector_size(prediction), vector_size(features)
                if prediction_size < 1:
                    raise SchemaMismatch("prediction vector", expected=">= 1", actual=prediction_size, record_index=0)
                if feature_size < 1:
                    raise SchemaMismatch("feature vector", expected=">= 1", actual=feature_size, record_index=0)
            else:
                if vector_size(prediction) != prediction_size:
                    raise SchemaMismatch(
                        "prediction vector", expected=prediction_size,
                        actual=vector_size(prediction), record_index=index
                    )
                if vector_size(features) != feature_size:
                    raise SchemaMismatch(
                        "feature vector", expected=feature_size,
                        actual=vector_size(features), record_index=index
                    )

            combined.append(concatenate(features, prediction))

        if not combined:
            raise SchemaMismatch("dataset", expected="at least one record", actual=0)

        return combined, prediction_size, feature_size
