"""Tabular loader turning CSV/Parquet rows into prediction and feature vectors."""

import csv
import logging
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from record_insights.core.constants import FILE_EXTENSION_MAP, SUPPORTED_FILE_FORMATS
from record_insights.core.exceptions import ConfigError, ConfigValidationError

logger = logging.getLogger(__name__)


def detect_delimiter(file_path: str, sample_size: int = 8192) -> str:
    """
    Auto-detect the delimiter used in a CSV file.

    Args:
        file_path: Path to the CSV file
        sample_size: Number of bytes to sample for detection

    Returns:
        Detected delimiter character, defaults to ',' if detection fails
    """
    encodings = ['utf-8', 'utf-8-sig', 'cp1252', 'latin-1']

    for encoding in encodings:
        try:
            with open(file_path, 'r', newline='', encoding=encoding) as f:
                sample = f.read(sample_size)

            sniffer = csv.Sniffer()
            dialect = sniffer.sniff(sample, delimiters=',\t|;:')
            return dialect.delimiter
        except (UnicodeDecodeError, csv.Error):
            continue

    return ','


def infer_format(file_path: str) -> str:
    """Infer file format from extension, defaulting to csv."""
    return FILE_EXTENSION_MAP.get(Path(file_path).suffix.lower(), "csv")


def load_frame(file_path: str, delimiter: Optional[str] = None) -> pd.DataFrame:
    """
    Load a CSV or Parquet file into a DataFrame.

    Args:
        file_path: Path to the data file
        delimiter: CSV delimiter; sniffed when None

    Raises:
        ConfigError: If the file does not exist or its format is unsupported
    """
    path = Path(file_path)
    if not path.exists():
        raise ConfigError(f"Data file not found: {file_path}")

    file_format = infer_format(file_path)
    if file_format not in SUPPORTED_FILE_FORMATS:
        raise ConfigError(f"Unsupported file format '{file_format}'. Supported: {', '.join(SUPPORTED_FILE_FORMATS)}")

    if file_format == "parquet":
        frame = pd.read_parquet(path)
    else:
        delimiter = delimiter or detect_delimiter(str(path))
        frame = pd.read_csv(path, sep=delimiter)

    logger.info(f"Loaded {len(frame):,} rows x {len(frame.columns)} columns from {path.name}")
    return frame


def split_vectors(
    frame: pd.DataFrame,
    prediction_columns: Sequence[str],
    feature_columns: Sequence[str]
) -> Tuple[List[np.ndarray], List[np.ndarray]]:
    """
    Split rows into dense prediction and feature vectors.

    Args:
        frame: Input rows
        prediction_columns: Columns forming the prediction vector, in order
        feature_columns: Columns forming the feature vector, in order

    Returns:
        (prediction vectors, feature vectors), one of each per row

    Raises:
        ConfigValidationError: If no columns are given or columns are missing
    """
    for field, columns in (("prediction_columns", prediction_columns), ("feature_columns", feature_columns)):
        if not columns:
            raise ConfigValidationError(f"No {field} configured", field=f"input.{field}")
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise ConfigValidationError(
                f"Columns not found in data: {', '.join(missing)}",
                field=f"input.{field}",
                expected=", ".join(map(str, frame.columns)),
                actual=", ".join(missing)
            )

    predictions = frame.loc[:, list(prediction_columns)].to_numpy(dtype=np.float64)
    features = frame.loc[:, list(feature_columns)].to_numpy(dtype=np.float64)
    return list(predictions), list(features)
