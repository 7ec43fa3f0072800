"""Column identifiers and feature-vector metadata."""

from .column_history import (
    ColumnHistory,
    ColumnHistoryCodec,
    IdentifierCodec,
    PlainTextCodec,
    VectorMetadata,
)

__all__ = [
    'ColumnHistory',
    'ColumnHistoryCodec',
    'IdentifierCodec',
    'PlainTextCodec',
    'VectorMetadata',
]
