"""
Fitted importance model.

An ``ImportanceModel`` holds everything inference needs: the prediction x
feature correlation block, the feature normalizer and top_k. It is immutable
once fit (frozen dataclass, read-only arrays) and can be shared by any
number of concurrent scorers.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Union

import numpy as np

from record_insights.core.constants import MODEL_FORMAT_VERSION
from record_insights.core.exceptions import ConfigValidationError, ParseError, SchemaMismatch
from record_insights.insights.normalizer import Normalizer
from record_insights.utils.json_utils import float_array_from_json, safe_json_dump

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class ImportanceModel:
    """
    Result of the fit phase.

    Attributes:
        top_k: Insights kept per prediction component
        feature_size: Feature vector length F
        prediction_size: Prediction vector length P
        correlations: P x F block, entry [p][f] correlates prediction p with feature f;
            may hold NaN for degenerate columns
        normalizer: Feature normalizer over F columns
    """
    top_k: int
    feature_size: int
    prediction_size: int
    correlations: np.ndarray
    normalizer: Normalizer

    def __post_init__(self):
        if isinstance(self.top_k, bool) or not isinstance(self.top_k, (int, np.integer)) or self.top_k < 1:
            raise ConfigValidationError(
                "top_k must be a positive integer",
                field="top_k",
                expected=">= 1",
                actual=str(self.top_k)
            )

        correlations = np.array(self.correlations, dtype=np.float64)
        expected_shape = (self.prediction_size, self.feature_size)
        if correlations.shape != expected_shape:
            raise SchemaMismatch("correlation block", expected=expected_shape, actual=correlations.shape)
        if self.normalizer.size != self.feature_size:
            raise SchemaMismatch("normalizer", expected=self.feature_size, actual=self.normalizer.size)

        correlations.setflags(write=False)
        object.__setattr__(self, "correlations", correlations)
        object.__setattr__(self, "top_k", int(self.top_k))
        object.__setattr__(self, "feature_size", int(self.feature_size))
        object.__setattr__(self, "prediction_size", int(self.prediction_size))

    def __eq__(self, other) -> bool:
        if not isinstance(other, ImportanceModel):
            return NotImplemented
        return (
            self.top_k == other.top_k
            and self.feature_size == other.feature_size
            and self.prediction_size == other.prediction_size
            and np.array_equal(self.correlations, other.correlations, equal_nan=True)
            and self.normalizer == other.normalizer
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'format_version': MODEL_FORMAT_VERSION,
            'top_k': self.top_k,
            'feature_size': self.feature_size,
            'prediction_size': self.prediction_size,
            'correlations': self.correlations,
            'normalizer': self.normalizer.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImportanceModel":
        """
        Rebuild a model from ``to_dict`` output.

        Raises:
            ParseError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ParseError(f"Model definition must be an object, got {type(data).__name__}")

        version = data.get('format_version', MODEL_FORMAT_VERSION)
        if version != MODEL_FORMAT_VERSION:
            raise ParseError(f"Unsupported model format version: {version}", key='format_version')

        try:
            prediction_size = int(data['prediction_size'])
            correlations = float_array_from_json(data['correlations'], ndim=2)
            normalizer_data = dict(data['normalizer'])
            normalizer_data['origin'] = float_array_from_json(normalizer_data['origin'], ndim=1)
            normalizer_data['spread'] = float_array_from_json(normalizer_data['spread'], ndim=1)
            return cls(
                top_k=data['top_k'],
                feature_size=int(data['feature_size']),
                prediction_size=prediction_size,
                correlations=correlations,
                normalizer=Normalizer.from_dict(normalizer_data)
            )
        except KeyError as e:
            raise ParseError(f"Model definition missing field {e}", key=str(e), original_exception=e)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Malformed model definition: {e}", original_exception=e)

    def save(self, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            safe_json_dump(self.to_dict(), f)
        logger.info(f"Saved importance model ({self.prediction_size}x{self.feature_size}) to {path}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ImportanceModel":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise ParseError(f"Model file {path} is not valid JSON: {e}", original_exception=e)
        return cls.from_dict(data)
