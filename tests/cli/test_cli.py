"""
Integration tests for the record-insights CLI.
"""

import json

import numpy as np
import pandas as pd
import pytest
import yaml
from click.testing import CliRunner

from record_insights.cli import cli
from record_insights.insights.estimator import RecordInsightsModel
from record_insights.metadata.column_history import ColumnHistory


@pytest.fixture
def workspace(tmp_path):
    """Data file and configuration for a one-output model."""
    rng = np.random.default_rng(3)
    age = rng.uniform(20, 70, 50)
    income = rng.uniform(1000, 5000, 50)
    frame = pd.DataFrame({
        'score': 0.02 * age + 0.001 * income,
        'age': age,
        'income': income,
        'flag': 1.0,
    })
    data_path = tmp_path / "scored.csv"
    frame.to_csv(data_path, index=False)

    config_path = tmp_path / "config.yaml"
    config_path.write_text(yaml.safe_dump({
        'record_insights': {
            'norm_type': 'zNorm',
            'top_k': 2,
            'input': {
                'prediction_columns': ['score'],
                'feature_columns': ['age', 'income', 'flag'],
                'delimiter': ',',
            }
        }
    }))
    return tmp_path, data_path, config_path


class TestFitCommand:
    """Tests for `record-insights fit`."""

    def test_fit_writes_model(self, workspace):
        tmp_path, data_path, config_path = workspace
        model_path = tmp_path / "model.json"

        result = CliRunner().invoke(cli, ['fit', str(config_path), str(data_path), '-o', str(model_path)])

        assert result.exit_code == 0, result.output
        loaded = RecordInsightsModel.load(model_path)
        assert loaded.model.feature_size == 3
        assert loaded.model.top_k == 2
        assert loaded.model.normalizer.name == "zNorm"
        assert [c.column_name for c in loaded.metadata.columns] == ['age', 'income', 'flag']

    def test_fit_with_metadata_file(self, workspace):
        tmp_path, data_path, config_path = workspace
        metadata_path = tmp_path / "metadata.yaml"
        metadata_path.write_text(yaml.safe_dump({
            'name': 'features',
            'columns': [
                {'column_name': 'age', 'parent_feature_name': ['age'], 'descriptor_value': 'years'},
                'income',
                {'column_name': 'flag', 'indicator_value': 'Y'},
            ]
        }))
        model_path = tmp_path / "model.json"

        result = CliRunner().invoke(cli, [
            'fit', str(config_path), str(data_path), '-o', str(model_path), '-m', str(metadata_path)
        ])

        assert result.exit_code == 0, result.output
        loaded = RecordInsightsModel.load(model_path)
        assert loaded.metadata.columns[0].descriptor_value == 'years'

    def test_fit_reports_config_errors(self, workspace):
        tmp_path, data_path, _ = workspace
        bad_config = tmp_path / "bad.yaml"
        bad_config.write_text(yaml.safe_dump({'record_insights': {'top_k': 0}}))

        result = CliRunner().invoke(cli, ['fit', str(bad_config), str(data_path), '-o', str(tmp_path / "m.json")])

        assert result.exit_code == 1
        assert "top_k" in result.output

    @pytest.mark.parametrize("metadata_text", [
        "columns: [age, income\n",
        "columns:\n  - 5\n  - income\n  - flag\n",
    ])
    def test_fit_reports_metadata_errors(self, workspace, metadata_text):
        tmp_path, data_path, config_path = workspace
        metadata_path = tmp_path / "metadata.yaml"
        metadata_path.write_text(metadata_text)

        result = CliRunner().invoke(cli, [
            'fit', str(config_path), str(data_path), '-o', str(tmp_path / "m.json"), '-m', str(metadata_path)
        ])

        assert result.exit_code == 1
        assert "Error:" in result.output
        assert not isinstance(result.exception, (TypeError, yaml.YAMLError))


class TestExplainCommand:
    """Tests for `record-insights explain`."""

    def test_explain_writes_one_line_per_row(self, workspace):
        tmp_path, data_path, config_path = workspace
        model_path = tmp_path / "model.json"
        output_path = tmp_path / "insights.jsonl"
        runner = CliRunner()

        runner.invoke(cli, ['fit', str(config_path), str(data_path), '-o', str(model_path)])
        result = runner.invoke(cli, [
            'explain', str(model_path), str(data_path), '-c', str(config_path), '-o', str(output_path)
        ])

        assert result.exit_code == 0, result.output
        lines = output_path.read_text().splitlines()
        assert len(lines) == 50

        for line in lines:
            text_map = json.loads(line)
            assert len(text_map) == 2
            names = {ColumnHistory.from_json(key).column_name for key in text_map}
            assert 'flag' not in names
