"""
Command-line interface for record insights.

Provides commands for:
- Fitting an insights model from a table of predictions and features
- Explaining every row of a table with a fitted model
"""

import json
import sys

import click
import yaml

from record_insights.core.config import InsightsConfig
from record_insights.core.exceptions import ParseError, RecordInsightsException
from record_insights.core.logging_config import setup_logging, get_logger
from record_insights.insights.estimator import RecordInsightsCorr, RecordInsightsModel
from record_insights.loaders.frame_loader import load_frame, split_vectors
from record_insights.metadata.column_history import VectorMetadata

logger = get_logger(__name__)

LOG_LEVELS = click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False)


def _load_metadata(metadata_file, feature_columns) -> VectorMetadata:
    if not metadata_file:
        return VectorMetadata.from_column_names("features", feature_columns)

    try:
        with open(metadata_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid metadata file {metadata_file}: {e}", original_exception=e)
    return VectorMetadata.from_dict(data)


@click.group()
@click.version_option(version="0.1.0")
def cli():
    """
    Record Insights - record-level feature importance for model predictions.

    Fits a correlation-based importance model over predictions and the
    feature vectors that produced them, then explains individual records
    by their most influential features.
    """
    pass


@cli.command()
@click.argument('config_file', type=click.Path(exists=True))
@click.argument('data_file', type=click.Path(exists=True))
@click.option('--output', '-o', 'model_output', required=True, type=click.Path(), help='Path for the fitted model (JSON)')
@click.option('--metadata', '-m', 'metadata_file', type=click.Path(exists=True),
              help='YAML/JSON feature vector metadata (defaults to the feature column names)')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def fit(config_file, data_file, model_output, metadata_file, log_level, log_file):
    """
    Fit an insights model.

    CONFIG_FILE: YAML file with a record_insights section (norm_type,
    correlation_type, top_k, input columns)

    DATA_FILE: CSV or Parquet file holding prediction and feature columns

    \b
    Example:
    record-insights fit config.yaml scored.csv -o model.json
    """
    setup_logging(level=log_level, log_file=log_file)
    logger.info(f"Fitting from {data_file} with configuration {config_file}")

    try:
        config = InsightsConfig.from_yaml(config_file)
        frame = load_frame(data_file, delimiter=config.input.delimiter)
        predictions, features = split_vectors(frame, config.input.prediction_columns, config.input.feature_columns)
        metadata = _load_metadata(metadata_file, config.input.feature_columns)

        model = RecordInsightsCorr(config).fit(predictions, features, metadata)
        model.save(model_output)
    except RecordInsightsException as e:
        logger.error(f"Fit failed: {e.message}")
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    click.echo(f"Fitted model over {len(features):,} records written to {model_output}")


@cli.command()
@click.argument('model_file', type=click.Path(exists=True))
@click.argument('data_file', type=click.Path(exists=True))
@click.option('--config', '-c', 'config_file', type=click.Path(exists=True), required=True,
              help='YAML file naming the prediction and feature columns')
@click.option('--output', '-o', 'output_file', required=True, type=click.Path(), help='Path for JSON Lines output')
@click.option('--log-level', type=LOG_LEVELS, default='WARNING', help='Logging level')
@click.option('--log-file', type=click.Path(), help='Optional log file path')
def explain(model_file, data_file, config_file, output_file, log_level, log_file):
    """
    Explain each row of DATA_FILE with a fitted model.

    Writes one JSON object per row mapping column identifier text to the
    encoded [component, importance] pairs.

    \b
    Example:
    record-insights explain model.json scored.csv -c config.yaml -o insights.jsonl
    """
    setup_logging(level=log_level, log_file=log_file)

    try:
        config = InsightsConfig.from_yaml(config_file)
        model = RecordInsightsModel.load(model_file)
        frame = load_frame(data_file, delimiter=config.input.delimiter)
        predictions, features = split_vectors(frame, config.input.prediction_columns, config.input.feature_columns)

        count = 0
        with open(output_file, "w", encoding="utf-8") as out:
            for text_map in model.transform_many(zip(predictions, features)):
                out.write(json.dumps(text_map) + "\n")
                count += 1
    except RecordInsightsException as e:
        logger.error(f"Explain failed: {e.message}")
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(1)

    logger.info(f"Wrote {count} insights to {output_file}")
    click.echo(f"Explained {count:,} records, written to {output_file}")


def main():
    cli()


if __name__ == '__main__':
    main()
