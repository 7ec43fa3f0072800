"""
Column identifiers for feature-vector slots.

A ``ColumnHistory`` names one slot of a feature vector by its lineage: the
raw features it came from, the stages that transformed them, and the
grouping/indicator value for pivoted columns. The engine only uses it as a
hashable key and converts it to and from text through an ``IdentifierCodec``.

``VectorMetadata`` is the registry that returns the ordered identifier list
for a feature vector.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, List, Optional, Protocol, Sequence, Tuple

from record_insights.core.exceptions import ParseError

LINEAGE_FIELDS = ('parent_feature_name', 'parent_feature_origins',
                  'parent_feature_stages', 'parent_feature_type')
VALUE_FIELDS = ('grouping', 'indicator_value', 'descriptor_value')


def _lineage_from_data(data: Dict[str, Any], name: str) -> Tuple[str, ...]:
    value = data.get(name)
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, (list, tuple)) or not all(isinstance(item, str) for item in value):
        raise ParseError(f"Column history '{name}' must be a list of strings, got {value!r}", value=str(data))
    return tuple(value)


def _value_from_data(data: Dict[str, Any], name: str) -> Optional[str]:
    value = data.get(name)
    if value is not None and not isinstance(value, str):
        raise ParseError(f"Column history '{name}' must be a string or null, got {value!r}", value=str(data))
    return value


@dataclass(frozen=True)
class ColumnHistory:
    """
    Provenance of one feature-vector slot.

    Attributes:
        column_name: Name of the vector column
        index: Position of the column in the feature vector
        parent_feature_name: Raw features the column was derived from
        parent_feature_origins: Origin stages of the parent features
        parent_feature_stages: Transformation stages applied
        parent_feature_type: Types of the parent features
        grouping: Group name for pivoted/hashed columns
        indicator_value: Category value for one-hot columns
        descriptor_value: Descriptor for derived numeric columns
    """
    column_name: str
    index: int
    parent_feature_name: Tuple[str, ...] = field(default_factory=tuple)
    parent_feature_origins: Tuple[str, ...] = field(default_factory=tuple)
    parent_feature_stages: Tuple[str, ...] = field(default_factory=tuple)
    parent_feature_type: Tuple[str, ...] = field(default_factory=tuple)
    grouping: Optional[str] = None
    indicator_value: Optional[str] = None
    descriptor_value: Optional[str] = None

    def __post_init__(self):
        # Lists from JSON/YAML must become tuples to stay hashable
        for name in LINEAGE_FIELDS:
            value = getattr(self, name)
            if value is None:
                value = ()
            elif isinstance(value, str):
                value = (value,)
            object.__setattr__(self, name, tuple(value))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'column_name': self.column_name,
            'index': self.index,
            'parent_feature_name': list(self.parent_feature_name),
            'parent_feature_origins': list(self.parent_feature_origins),
            'parent_feature_stages': list(self.parent_feature_stages),
            'parent_feature_type': list(self.parent_feature_type),
            'grouping': self.grouping,
            'indicator_value': self.indicator_value,
            'descriptor_value': self.descriptor_value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ColumnHistory":
        if not isinstance(data, dict):
            raise ParseError(f"Column history must be an object, got {type(data).__name__}")
        if 'column_name' not in data or 'index' not in data:
            raise ParseError("Column history requires 'column_name' and 'index'", value=str(data))

        index = data['index']
        if isinstance(index, bool) or not isinstance(index, int):
            raise ParseError(f"Column history index must be an integer, got {index!r}", value=str(data))

        # Every field must stay hashable; identifiers are used as dict keys
        return cls(
            column_name=str(data['column_name']),
            index=index,
            **{name: _lineage_from_data(data, name) for name in LINEAGE_FIELDS},
            **{name: _value_from_data(data, name) for name in VALUE_FIELDS},
        )

    def to_json(self) -> str:
        """Canonical text form: compact JSON with sorted keys."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))

    @classmethod
    def from_json(cls, text: str) -> "ColumnHistory":
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise ParseError(f"Column history is not valid JSON: {e}", key=text, original_exception=e)
        return cls.from_dict(data)


class IdentifierCodec(Protocol):
    """Converts column identifiers to and from their canonical text."""

    def to_text(self, identifier: Hashable) -> str:
        ...

    def from_text(self, text: str) -> Hashable:
        ...


class ColumnHistoryCodec:
    """Codec for ``ColumnHistory`` identifiers using their JSON form."""

    def to_text(self, identifier: ColumnHistory) -> str:
        return identifier.to_json()

    def from_text(self, text: str) -> ColumnHistory:
        return ColumnHistory.from_json(text)


class PlainTextCodec:
    """Codec for identifiers that already are plain strings."""

    def to_text(self, identifier: str) -> str:
        if not isinstance(identifier, str):
            raise TypeError(f"PlainTextCodec only encodes strings, got {type(identifier).__name__}")
        return identifier

    def from_text(self, text: str) -> str:
        if not isinstance(text, str):
            raise ParseError(f"Identifier key must be a string, got {type(text).__name__}")
        return text


class VectorMetadata:
    """
    Column metadata for a feature vector.

    Example:
        >>> metadata = VectorMetadata.from_column_names("features", ["age", "income"])
        >>> metadata.size
        2
        >>> [c.column_name for c in metadata.column_history()]
        ['age', 'income']
    """

    def __init__(self, name: str, columns: Sequence[ColumnHistory]):
        self.name = name
        self.columns: List[ColumnHistory] = list(columns)

        for position, column in enumerate(self.columns):
            if column.index != position:
                raise ParseError(
                    f"Column '{column.column_name}' has index {column.index} but is at position {position}",
                    key=column.column_name
                )

    @property
    def size(self) -> int:
        return len(self.columns)

    def column_history(self) -> List[ColumnHistory]:
        """Ordered identifiers, one per feature-vector slot."""
        return list(self.columns)

    @classmethod
    def from_column_names(cls, name: str, column_names: Sequence[str]) -> "VectorMetadata":
        """Metadata for raw columns where each slot is its own parent feature."""
        return cls(name, [
            ColumnHistory(column_name=column, index=i, parent_feature_name=(column,))
            for i, column in enumerate(column_names)
        ])

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VectorMetadata":
        if not isinstance(data, dict) or not isinstance(data.get('columns'), list):
            raise ParseError("Vector metadata requires a 'columns' list")

        columns = []
        for i, column in enumerate(data['columns']):
            if isinstance(column, str):
                columns.append(ColumnHistory(column_name=column, index=i, parent_feature_name=(column,)))
            elif not isinstance(column, dict):
                raise ParseError(
                    f"Metadata column {i} must be a name or a mapping, got {type(column).__name__}",
                    value=str(column)
                )
            else:
                column = dict(column)
                column.setdefault('index', i)
                columns.append(ColumnHistory.from_dict(column))

        return cls(data.get('name', 'features'), columns)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'columns': [column.to_dict() for column in self.columns],
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, VectorMetadata):
            return NotImplemented
        return self.name == other.name and self.columns == other.columns

    def __repr__(self) -> str:
        return f"VectorMetadata(name={self.name!r}, size={self.size})"
