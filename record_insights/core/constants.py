"""
Record Insights Constants.

This module defines configuration defaults and limits used throughout the
record insights engine. Centralizing these values keeps the fit and
inference paths consistent with the configuration layer.
"""

# ============================================================================
# Importance Model Defaults
# ============================================================================

# Number of insights kept per prediction component for each record
DEFAULT_TOP_K: int = 20

# Normalization applied to feature values before computing importance
DEFAULT_NORM_TYPE: str = "minMax"

# Correlation coefficient requested from the statistics aggregator
DEFAULT_CORRELATION_TYPE: str = "pearson"

# Degrees of freedom for column variance (sample variance)
VARIANCE_DDOF: int = 1


# ============================================================================
# Configuration Security Limits
# ============================================================================

# Maximum YAML configuration file size (10MB)
MAX_YAML_FILE_SIZE: int = 10 * 1024 * 1024

# Maximum YAML nesting depth
MAX_YAML_NESTING_DEPTH: int = 20

# Maximum number of keys/items in a YAML document
# Column lists for wide feature vectors can be long
MAX_YAML_KEY_COUNT: int = 100_000

# Top-level YAML section holding engine settings
CONFIG_SECTION: str = "record_insights"


# ============================================================================
# Serialization Constants
# ============================================================================

# Compact separators for encoded insight values: [[0,0.42],[2,-0.13]]
INSIGHT_JSON_SEPARATORS: tuple = (",", ":")

# Format version written into persisted model files
MODEL_FORMAT_VERSION: int = 1


# ============================================================================
# Logging Constants
# ============================================================================

# Default log message format
LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Log date format
LOG_DATE_FORMAT: str = "%Y-%m-%d %H:%M:%S"

# Root logger name for the package
ROOT_LOGGER_NAME: str = "record_insights"


# ============================================================================
# File Format Constants
# ============================================================================

# Supported tabular input formats
SUPPORTED_FILE_FORMATS: list = ["csv", "parquet"]

# File extension to format mapping
FILE_EXTENSION_MAP: dict = {
    ".csv": "csv",
    ".tsv": "csv",
    ".txt": "csv",
    ".parquet": "parquet",
    ".pq": "parquet"
}
