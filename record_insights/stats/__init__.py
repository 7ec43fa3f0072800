"""Statistics aggregation consumed by the fit phase."""

from .aggregator import (
    ColumnStatistics,
    CorrelationType,
    PandasStatisticsAggregator,
    StatisticsAggregator,
)

__all__ = [
    'ColumnStatistics',
    'CorrelationType',
    'PandasStatisticsAggregator',
    'StatisticsAggregator',
]
