"""
Unit tests for configuration parsing.
"""

import pytest
import yaml

from record_insights.core.config import InsightsConfig, InputConfig, validate_yaml_structure
from record_insights.core.constants import DEFAULT_TOP_K, MAX_YAML_NESTING_DEPTH
from record_insights.core.exceptions import ConfigError, ConfigValidationError
from record_insights.core.types import CorrelationType, NormType


class TestInsightsConfigDefaults:
    """Test default settings."""

    def test_defaults(self):
        config = InsightsConfig()

        assert config.norm_type == NormType.MIN_MAX
        assert config.correlation_type == CorrelationType.PEARSON
        assert config.top_k == DEFAULT_TOP_K == 20

    def test_is_immutable(self):
        config = InsightsConfig()

        with pytest.raises(AttributeError):
            config.top_k = 5

    def test_names_resolved_to_enums(self):
        config = InsightsConfig(norm_type="zNorm", correlation_type="SPEARMAN", top_k=3)

        assert config.norm_type == NormType.Z_NORM
        assert config.correlation_type == CorrelationType.SPEARMAN


class TestInsightsConfigValidation:
    """Test rejection of invalid settings."""

    @pytest.mark.parametrize("top_k", [0, -1, "5", 2.5, True])
    def test_invalid_top_k(self, top_k):
        with pytest.raises(ConfigValidationError) as exc_info:
            InsightsConfig(top_k=top_k)

        assert exc_info.value.field == "top_k"

    def test_unknown_norm_type(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            InsightsConfig(norm_type="robust")

        assert "minMax" in exc_info.value.details['expected']

    def test_unknown_correlation_type(self):
        with pytest.raises(ConfigValidationError):
            InsightsConfig(correlation_type="distance")

    def test_unknown_keys_rejected(self):
        with pytest.raises(ConfigValidationError) as exc_info:
            InsightsConfig.from_dict({'top_k': 3, 'topk': 4})

        assert exc_info.value.field == "topk"


class TestInsightsConfigFromDict:
    """Test dictionary parsing."""

    def test_flat_dict(self):
        config = InsightsConfig.from_dict({'norm_type': 'minMaxCentered', 'top_k': 7})

        assert config.norm_type == NormType.MIN_MAX_CENTERED
        assert config.top_k == 7
        assert config.correlation_type == CorrelationType.PEARSON

    def test_section_dict(self):
        config = InsightsConfig.from_dict({'record_insights': {'top_k': 2}})

        assert config.top_k == 2

    def test_empty_dict_gives_defaults(self):
        assert InsightsConfig.from_dict({}) == InsightsConfig()
        assert InsightsConfig.from_dict(None) == InsightsConfig()

    def test_input_section(self):
        config = InsightsConfig.from_dict({
            'input': {
                'prediction_columns': 'score',
                'feature_columns': ['age', 'income'],
                'delimiter': ';'
            }
        })

        assert config.input.prediction_columns == ('score',)
        assert config.input.feature_columns == ('age', 'income')
        assert config.input.delimiter == ';'

    def test_round_trip_through_to_dict(self):
        config = InsightsConfig(norm_type=NormType.Z_NORM, top_k=4,
                                input=InputConfig(('p',), ('a', 'b')))

        assert InsightsConfig.from_dict(config.to_dict()) == config


class TestInsightsConfigFromYaml:
    """Test YAML loading."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(yaml.safe_dump({
            'record_insights': {'norm_type': 'zNorm', 'correlation_type': 'spearman', 'top_k': 5}
        }))

        config = InsightsConfig.from_yaml(str(path))

        assert config.norm_type == NormType.Z_NORM
        assert config.correlation_type == CorrelationType.SPEARMAN
        assert config.top_k == 5

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            InsightsConfig.from_yaml(str(tmp_path / "missing.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("record_insights: [unclosed")

        with pytest.raises(ConfigError, match="Failed to parse YAML"):
            InsightsConfig.from_yaml(str(path))

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert InsightsConfig.from_yaml(str(path)) == InsightsConfig()


class TestYamlStructureLimits:
    """Test YAML structure limits."""

    def test_excessive_nesting(self):
        doc = current = {}
        for _ in range(MAX_YAML_NESTING_DEPTH + 2):
            current['a'] = {}
            current = current['a']

        with pytest.raises(ConfigValidationError, match="nesting depth"):
            validate_yaml_structure(doc)

    def test_reasonable_structure_passes(self):
        validate_yaml_structure({'record_insights': {'input': {'feature_columns': ['a'] * 100}}})
