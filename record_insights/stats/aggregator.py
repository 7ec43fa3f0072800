"""
Statistics aggregation for the fit phase.

The fitter never computes statistics itself. It hands the concatenated
vectors to a ``StatisticsAggregator`` and consumes two results:

- a full pairwise correlation matrix over every column
- per-column summary statistics (min, max, mean, variance)

``PandasStatisticsAggregator`` is the in-process implementation backed by
numpy and pandas. Distributed backends only need to honor the same two
methods and return arrays indexed like the concatenated vector.
"""

import logging
from dataclasses import dataclass
from typing import Protocol, Sequence

import numpy as np
import pandas as pd

from record_insights.core.constants import VARIANCE_DDOF
from record_insights.core.exceptions import AggregationError
from record_insights.core.types import CorrelationType
from record_insights.utils.vectors import Vector, stack_rows

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ColumnStatistics:
    """
    Per-column summary statistics over a vector population.

    All arrays are indexed identically to the columns of the aggregated
    vectors.

    Attributes:
        min: Column minimums
        max: Column maximums
        mean: Column means
        variance: Column sample variances
        count: Number of vectors aggregated
    """
    min: np.ndarray
    max: np.ndarray
    mean: np.ndarray
    variance: np.ndarray
    count: int = 0

    @property
    def std(self) -> np.ndarray:
        """Column standard deviations."""
        return np.sqrt(self.variance)

    @property
    def size(self) -> int:
        return int(self.min.shape[0])

    def head(self, size: int) -> "ColumnStatistics":
        """Statistics restricted to the first ``size`` columns."""
        return ColumnStatistics(
            min=self.min[:size],
            max=self.max[:size],
            mean=self.mean[:size],
            variance=self.variance[:size],
            count=self.count
        )


class StatisticsAggregator(Protocol):
    """Interface of the statistics collaborator used by the fitter."""

    def correlation(self, vectors: Sequence[Vector], kind: CorrelationType) -> np.ndarray:
        """Square correlation matrix between every pair of columns."""
        ...

    def column_stats(self, vectors: Sequence[Vector]) -> ColumnStatistics:
        """Summary statistics for every column."""
        ...


class PandasStatisticsAggregator:
    """
    In-process aggregator using pandas for correlation and column statistics.

    The correlation matrix returned by ``DataFrame.corr`` is symmetric, so
    slicing rows or columns for the prediction/feature block gives the same
    values. Zero-variance columns produce NaN correlations.

    Example:
        >>> aggregator = PandasStatisticsAggregator()
        >>> corr = aggregator.correlation(vectors, CorrelationType.PEARSON)
        >>> stats = aggregator.column_stats(vectors)
    """

    def __init__(self, min_periods: int = 1):
        """
        Args:
            min_periods: Minimum number of observations per column pair
                required to produce a correlation value
        """
        self.min_periods = min_periods

    def correlation(self, vectors: Sequence[Vector], kind: CorrelationType) -> np.ndarray:
        frame = self._to_frame(vectors)
        logger.info(
            f"Computing {kind.value} correlation over {frame.shape[0]} rows x {frame.shape[1]} columns"
        )
        # Constant columns warn about division by zero and come back as NaN
        with np.errstate(divide="ignore", invalid="ignore"):
            matrix = frame.corr(method=kind.value, min_periods=self.min_periods)
        return matrix.to_numpy(dtype=np.float64)

    def column_stats(self, vectors: Sequence[Vector]) -> ColumnStatistics:
        frame = self._to_frame(vectors)
        return ColumnStatistics(
            min=frame.min(axis=0).to_numpy(dtype=np.float64),
            max=frame.max(axis=0).to_numpy(dtype=np.float64),
            mean=frame.mean(axis=0).to_numpy(dtype=np.float64),
            variance=frame.var(axis=0, ddof=VARIANCE_DDOF).to_numpy(dtype=np.float64),
            count=int(frame.shape[0])
        )

    def _to_frame(self, vectors: Sequence[Vector]) -> pd.DataFrame:
        try:
            data = stack_rows(vectors)
        except ValueError as e:
            raise AggregationError(
                f"Vectors could not be stacked: {e}",
                operation="stack",
                original_exception=e
            )
        return pd.DataFrame(data)
