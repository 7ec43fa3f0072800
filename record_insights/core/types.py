"""
Enumerations shared by configuration, fitting and the statistics layer.

- NormType: normalization applied to feature values before scoring
- CorrelationType: correlation coefficient requested from the aggregator
"""

from enum import Enum

from record_insights.core.exceptions import ConfigValidationError


class NormType(Enum):
    """
    Kind of scaling applied to feature values before computing importance.

    MIN_MAX: (x - min) / (max - min), range [0, 1]
    Z_NORM: (x - mean) / std
    MIN_MAX_CENTERED: (x - min) / ((max - min) / 2) - 1, range [-1, 1]
    """
    MIN_MAX = "minMax"
    Z_NORM = "zNorm"
    MIN_MAX_CENTERED = "minMaxCentered"

    @classmethod
    def from_name(cls, name) -> "NormType":
        """Resolve a member from its value or member name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower().replace("_", "")
        for member in cls:
            if key in (member.value.lower(), member.name.lower().replace("_", "")):
                return member
        raise ConfigValidationError(
            f"Unknown normalization type: {name}",
            field="norm_type",
            expected=", ".join(m.value for m in cls),
            actual=str(name)
        )


class CorrelationType(Enum):
    """
    Correlation coefficient requested from the aggregator.

    The value is passed through to the aggregator unchanged.
    """
    PEARSON = "pearson"
    SPEARMAN = "spearman"

    @classmethod
    def from_name(cls, name) -> "CorrelationType":
        """Resolve a member from its value or member name (case-insensitive)."""
        if isinstance(name, cls):
            return name
        key = str(name).strip().lower()
        for member in cls:
            if key in (member.value, member.name.lower()):
                return member
        raise ConfigValidationError(
            f"Unknown correlation type: {name}",
            field="correlation_type",
            expected=", ".join(m.value for m in cls),
            actual=str(name)
        )
