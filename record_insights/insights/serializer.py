"""
Text encoding of insights.

An insight is written as a flat ``Dict[str, str]``: each key is the column
identifier's canonical text, each value a compact JSON array of
``[component, importance]`` pairs, e.g. ``[[0,0.42],[2,-0.13]]``.
``decode`` is the exact inverse of ``encode``.
"""

import json
from typing import Dict, Hashable, Mapping, Optional, Tuple

from record_insights.core.constants import INSIGHT_JSON_SEPARATORS
from record_insights.core.exceptions import ParseError
from record_insights.insights.scorer import Insight, Insights
from record_insights.metadata.column_history import ColumnHistoryCodec, IdentifierCodec


def insights_to_text(insights: Insights) -> str:
    """
    Encode one (component, importance) sequence as a JSON array.

    Raises:
        ParseError: If an importance is NaN or infinite
    """
    pairs = [[int(index), float(value)] for index, value in insights]
    try:
        return json.dumps(pairs, separators=INSIGHT_JSON_SEPARATORS, allow_nan=False)
    except ValueError as e:
        raise ParseError(f"Importance values must be finite: {e}", value=str(pairs), original_exception=e)


def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} is not allowed")


def text_to_insights(text: str, key: Optional[str] = None) -> Insights:
    """
    Decode a JSON array of ``[component, importance]`` pairs.

    Raises:
        ParseError: If the text is not a well-formed array of numeric pairs
    """
    if not isinstance(text, str):
        raise ParseError(f"Insight value must be a string, got {type(text).__name__}", key=key)

    try:
        pairs = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        raise ParseError(f"Insight value is not valid JSON: {e}", key=key, value=text, original_exception=e)

    if not isinstance(pairs, list):
        raise ParseError("Insight value is not a JSON array", key=key, value=text)

    insights: Insights = []
    for pair in pairs:
        if not isinstance(pair, list) or len(pair) != 2:
            raise ParseError(f"Insight entry {pair!r} is not a [component, importance] pair", key=key, value=text)

        index, value = pair
        if isinstance(index, bool) or not isinstance(index, int):
            raise ParseError(f"Prediction component index {index!r} is not an integer", key=key, value=text)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"Importance {value!r} is not a number", key=key, value=text)

        insights.append((index, float(value)))

    return insights


class InsightSerializer:
    """
    Encodes and decodes insights with a pluggable identifier codec.

    Example:
        >>> serializer = InsightSerializer(PlainTextCodec())
        >>> serializer.encode({"age": [(0, 0.45)]})
        {'age': '[[0,0.45]]'}
    """

    def __init__(self, codec: Optional[IdentifierCodec] = None):
        self.codec = codec or ColumnHistoryCodec()

    def encode(self, insight: Insight) -> Dict[str, str]:
        """
        Encode an insight as a text map.

        Raises:
            ParseError: If two identifiers encode to the same text
        """
        encoded: Dict[str, str] = {}
        for identifier, insights in insight.items():
            key = self.codec.to_text(identifier)
            if key in encoded:
                raise ParseError("Two column identifiers encode to the same key", key=key)
            encoded[key] = insights_to_text(insights)
        return encoded

    def decode(self, text_map: Mapping[str, str]) -> Insight:
        """
        Decode a text map produced by ``encode``.

        Raises:
            ParseError: If a key cannot be decoded by the codec or a value is
                not a well-formed array of numeric pairs
        """
        insight: Insight = {}
        for key, value in text_map.items():
            identifier = self._decode_key(key)
            insight[identifier] = text_to_insights(value, key=key)
        return insight

    def _decode_key(self, key: str) -> Hashable:
        try:
            identifier = self.codec.from_text(key)
            hash(identifier)
            return identifier
        except ParseError as e:
            if e.key is None:
                e.key = key
                e.details['key'] = key
            raise
        except (TypeError, ValueError, KeyError) as e:
            raise ParseError(f"Column identifier could not be decoded: {e}", key=key, original_exception=e)


def insight_to_text(item: Tuple[Hashable, Insights], codec: Optional[IdentifierCodec] = None) -> Tuple[str, str]:
    """Encode a single (identifier, insights) entry."""
    identifier, insights = item
    codec = codec or ColumnHistoryCodec()
    return codec.to_text(identifier), insights_to_text(insights)


def parse_insights(text_map: Mapping[str, str], codec: Optional[IdentifierCodec] = None) -> Insight:
    """Decode a text map produced by the insights transformer."""
    return InsightSerializer(codec).decode(text_map)
