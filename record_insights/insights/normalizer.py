"""
Feature normalization applied before computing importance.

A ``Normalizer`` is pure data plus a pure function:

    normalized[i] = 0                                    if spread[i] == 0
                    (x[i] - origin[i]) / spread[i] - offset   otherwise

The set of normalization kinds is closed, so ``make_normalizer`` dispatches
through a table keyed by ``NormType`` rather than through subclasses.
Constant columns (spread 0) always normalize to exactly 0.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

from record_insights.core.exceptions import ParseError, SchemaMismatch
from record_insights.core.types import NormType
from record_insights.stats.aggregator import ColumnStatistics
from record_insights.utils.vectors import Vector, as_vector, to_dense, vector_size

logger = logging.getLogger(__name__)


def _readonly(values) -> np.ndarray:
    array = np.array(values, dtype=np.float64)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Normalizer:
    """
    Per-feature rescaling derived once from population statistics.

    Attributes:
        origin: Value subtracted from each feature
        spread: Divisor for each feature; 0 marks a constant column
        offset: Scalar subtracted after scaling
        name: Name of the normalization kind that produced it
    """
    origin: np.ndarray
    spread: np.ndarray
    offset: float
    name: str

    def __post_init__(self):
        origin = _readonly(self.origin)
        spread = _readonly(self.spread)
        if origin.shape != spread.shape or origin.ndim != 1:
            raise SchemaMismatch(
                "normalizer spread",
                expected=origin.shape,
                actual=spread.shape
            )
        object.__setattr__(self, "origin", origin)
        object.__setattr__(self, "spread", spread)
        object.__setattr__(self, "offset", float(self.offset))

    @property
    def size(self) -> int:
        return int(self.origin.shape[0])

    def apply(self, features: Vector) -> np.ndarray:
        """
        Normalize a feature vector.

        Args:
            features: Feature vector of length ``size`` (dense or sparse)

        Returns:
            Dense normalized values

        Raises:
            SchemaMismatch: If the vector length differs from ``size``
        """
        features = as_vector(features, what="feature vector")
        if vector_size(features) != self.size:
            raise SchemaMismatch("feature vector", expected=self.size, actual=vector_size(features))

        values = to_dense(features)
        constant = self.spread == 0.0
        safe_spread = np.where(constant, 1.0, self.spread)
        normalized = (values - self.origin) / safe_spread - self.offset
        return np.where(constant, 0.0, normalized)

    __call__ = apply

    def __eq__(self, other) -> bool:
        if not isinstance(other, Normalizer):
            return NotImplemented
        return (
            self.name == other.name
            and self.offset == other.offset
            and np.array_equal(self.origin, other.origin)
            and np.array_equal(self.spread, other.spread)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'origin': self.origin.tolist(),
            'spread': self.spread.tolist(),
            'offset': self.offset,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Normalizer":
        try:
            return cls(
                origin=data['origin'],
                spread=data['spread'],
                offset=data['offset'],
                name=data['name']
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ParseError(f"Invalid normalizer definition: {e}", original_exception=e)


def _min_max(stats: ColumnStatistics) -> Tuple[np.ndarray, np.ndarray, float]:
    return stats.min, stats.max - stats.min, 0.0


def _z_norm(stats: ColumnStatistics) -> Tuple[np.ndarray, np.ndarray, float]:
    return stats.mean, stats.std, 0.0


def _min_max_centered(stats: ColumnStatistics) -> Tuple[np.ndarray, np.ndarray, float]:
    return stats.min, (stats.max - stats.min) / 2.0, 1.0


NORMALIZER_BUILDERS: Dict[NormType, Callable[[ColumnStatistics], Tuple[np.ndarray, np.ndarray, float]]] = {
    NormType.MIN_MAX: _min_max,
    NormType.Z_NORM: _z_norm,
    NormType.MIN_MAX_CENTERED: _min_max_centered,
}


def make_normalizer(
    stats: ColumnStatistics,
    norm_type: NormType = NormType.MIN_MAX,
    size: Optional[int] = None
) -> Normalizer:
    """
    Build a normalizer from summary statistics.

    Args:
        stats: Column statistics
        norm_type: Normalization kind
        size: Use only the first ``size`` columns (the feature columns of a
            concatenated vector); all columns when None

    Returns:
        Normalizer over ``size`` columns
    """
    norm_type = NormType.from_name(norm_type)
    if size is not None:
        stats = stats.head(size)

    origin, spread, offset = NORMALIZER_BUILDERS[norm_type](stats)

    # A single-record population has undefined variance; treat it as constant
    spread = np.where(np.isfinite(spread), spread, 0.0)

    constant = int(np.count_nonzero(spread == 0.0))
    if constant:
        logger.debug(f"{constant} of {spread.shape[0]} feature columns are constant and will normalize to 0")

    return Normalizer(origin=origin, spread=spread, offset=offset, name=norm_type.value)
