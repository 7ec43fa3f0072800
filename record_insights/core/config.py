"""Configuration parsing and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from record_insights.core.constants import (
    CONFIG_SECTION,
    DEFAULT_CORRELATION_TYPE,
    DEFAULT_NORM_TYPE,
    DEFAULT_TOP_K,
    MAX_YAML_FILE_SIZE,
    MAX_YAML_KEY_COUNT,
    MAX_YAML_NESTING_DEPTH,
)
from record_insights.core.exceptions import ConfigError, ConfigValidationError, YAMLSizeError
from record_insights.core.types import CorrelationType, NormType


@dataclass(frozen=True)
class InputConfig:
    """
    Column layout of a tabular input file.

    Attributes:
        prediction_columns: Columns forming the prediction vector, in order
        feature_columns: Columns forming the feature vector, in order
        delimiter: CSV delimiter; sniffed from the file when None
    """
    prediction_columns: Tuple[str, ...] = ()
    feature_columns: Tuple[str, ...] = ()
    delimiter: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "InputConfig":
        if not data:
            return cls()
        if not isinstance(data, dict):
            raise ConfigValidationError("'input' section must be a mapping", field="input")

        def columns(key: str) -> Tuple[str, ...]:
            value = data.get(key, [])
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                raise ConfigValidationError(f"'{key}' must be a list of column names", field=f"input.{key}")
            return tuple(str(v) for v in value)

        return cls(
            prediction_columns=columns('prediction_columns'),
            feature_columns=columns('feature_columns'),
            delimiter=data.get('delimiter')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'prediction_columns': list(self.prediction_columns),
            'feature_columns': list(self.feature_columns),
            'delimiter': self.delimiter,
        }


@dataclass(frozen=True)
class InsightsConfig:
    """
    Settings for fitting an importance model.

    Set before fit and passed explicitly to the fitter; never mutated.

    Attributes:
        norm_type: Normalization applied to features before computing importance
        correlation_type: Correlation coefficient requested from the aggregator
        top_k: Insights kept per prediction component (>= 1)
        input: Optional tabular input layout used by the CLI

    Example:
        >>> config = InsightsConfig.from_dict({'top_k': 5, 'norm_type': 'zNorm'})
        >>> config.norm_type
        <NormType.Z_NORM: 'zNorm'>
    """
    norm_type: NormType = NormType(DEFAULT_NORM_TYPE)
    correlation_type: CorrelationType = CorrelationType(DEFAULT_CORRELATION_TYPE)
    top_k: int = DEFAULT_TOP_K
    input: InputConfig = field(default_factory=InputConfig)

    def __post_init__(self):
        object.__setattr__(self, 'norm_type', NormType.from_name(self.norm_type))
        object.__setattr__(self, 'correlation_type', CorrelationType.from_name(self.correlation_type))

        if isinstance(self.top_k, bool) or not isinstance(self.top_k, int) or self.top_k < 1:
            raise ConfigValidationError(
                f"top_k must be a positive integer, got {self.top_k!r}",
                field="top_k",
                expected=">= 1",
                actual=repr(self.top_k)
            )

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> "InsightsConfig":
        """
        Build from a configuration dictionary.

        Accepts either the settings directly or a dictionary with a
        ``record_insights`` section. Missing keys take their defaults.
        """
        config_dict = config_dict or {}
        if not isinstance(config_dict, dict):
            raise ConfigError("Configuration must be a mapping")

        settings = config_dict.get(CONFIG_SECTION, config_dict)
        if not isinstance(settings, dict):
            raise ConfigError(f"'{CONFIG_SECTION}' section must be a mapping", field=CONFIG_SECTION)

        known = {'norm_type', 'correlation_type', 'top_k', 'input'}
        unknown = sorted(set(settings) - known)
        if unknown:
            raise ConfigValidationError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                field=unknown[0],
                expected=", ".join(sorted(known)),
                actual=", ".join(unknown)
            )

        return cls(
            norm_type=settings.get('norm_type', DEFAULT_NORM_TYPE),
            correlation_type=settings.get('correlation_type', DEFAULT_CORRELATION_TYPE),
            top_k=settings.get('top_k', DEFAULT_TOP_K),
            input=InputConfig.from_dict(settings.get('input'))
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "InsightsConfig":
        """
        Load configuration from a YAML file with size and structure limits.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            InsightsConfig instance

        Raises:
            ConfigError: If file not found or invalid
            YAMLSizeError: If file exceeds size limit
            ConfigValidationError: If the structure is too complex or values are invalid
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")

        file_size = os.path.getsize(config_file)
        if file_size > MAX_YAML_FILE_SIZE:
            raise YAMLSizeError(
                f"Configuration file too large: {file_size:,} bytes. "
                f"Maximum allowed: {MAX_YAML_FILE_SIZE:,} bytes",
                file_size=file_size,
                max_size=MAX_YAML_FILE_SIZE
            )

        try:
            with open(config_file, "r", encoding="utf-8") as f:
                config_dict = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse YAML file: {str(e)}")
        except UnicodeDecodeError as e:
            raise ConfigError(f"Invalid file encoding (expected UTF-8): {str(e)}")

        if config_dict is not None:
            validate_yaml_structure(config_dict)

        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'norm_type': self.norm_type.value,
            'correlation_type': self.correlation_type.value,
            'top_k': self.top_k,
            'input': self.input.to_dict(),
        }


def validate_yaml_structure(obj: Any, current_depth: int = 0, total_keys: Optional[List[int]] = None) -> None:
    """
    Reject YAML documents that are too deep or too large.

    Args:
        obj: Object to validate (dict, list, or primitive)
        current_depth: Current nesting depth
        total_keys: Mutable list with single element tracking total key count

    Raises:
        ConfigValidationError: If structure is too complex
    """
    if total_keys is None:
        total_keys = [0]

    if current_depth > MAX_YAML_NESTING_DEPTH:
        raise ConfigValidationError(
            f"YAML nesting depth exceeds maximum of {MAX_YAML_NESTING_DEPTH} levels"
        )

    if isinstance(obj, (dict, list)):
        total_keys[0] += len(obj)
        if total_keys[0] > MAX_YAML_KEY_COUNT:
            raise ConfigValidationError(
                f"YAML structure contains more than {MAX_YAML_KEY_COUNT:,} keys/items"
            )

        children = obj.values() if isinstance(obj, dict) else obj
        for item in children:
            validate_yaml_structure(item, current_depth + 1, total_keys)
