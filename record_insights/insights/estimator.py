"""
Pipeline entry points for record insights.

``RecordInsightsCorr`` is the estimator: it takes prediction vectors (input
1, the ground-truth/response role) and feature vectors (input 2) together
with the feature vector's column metadata and fits a
``RecordInsightsModel``. The model turns one (prediction, features) record
into its encoded insight text map.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, Iterator, Mapping, Optional, Sequence, Tuple, Union

from record_insights.core.config import InsightsConfig
from record_insights.core.exceptions import ParseError, SchemaMismatch
from record_insights.insights.fitter import CorrelationFitter
from record_insights.insights.model import ImportanceModel
from record_insights.insights.scorer import Insight, InsightScorer
from record_insights.insights.serializer import InsightSerializer
from record_insights.metadata.column_history import ColumnHistoryCodec, IdentifierCodec, VectorMetadata
from record_insights.stats.aggregator import StatisticsAggregator
from record_insights.utils.json_utils import safe_json_dump

logger = logging.getLogger(__name__)


class RecordInsightsModel:
    """
    Fitted record insights transformer.

    Attributes:
        model: Fitted ImportanceModel
        metadata: Feature vector metadata providing the column identifiers
        codec: Identifier codec used for the text keys
    """

    def __init__(
        self,
        model: ImportanceModel,
        metadata: VectorMetadata,
        codec: Optional[IdentifierCodec] = None
    ):
        if metadata.size != model.feature_size:
            raise SchemaMismatch("feature metadata", expected=model.feature_size, actual=metadata.size)

        self.model = model
        self.metadata = metadata
        self.codec = codec or ColumnHistoryCodec()
        self._identifiers = metadata.column_history()
        self._scorer = InsightScorer(model)
        self._serializer = InsightSerializer(self.codec)

    def explain(self, prediction, features) -> Insight:
        """Insight for one record, before encoding."""
        return self._scorer.score(prediction, features, self._identifiers)

    def transform(self, prediction, features) -> Dict[str, str]:
        """
        Encoded insight for one record.

        Args:
            prediction: Prediction vector (or None)
            features: Feature vector

        Returns:
            Map of column identifier text to JSON array of [component, importance]
        """
        return self._serializer.encode(self.explain(prediction, features))

    def transform_many(self, records: Iterable[Tuple[object, object]]) -> Iterator[Dict[str, str]]:
        """Encoded insights for a stream of (prediction, features) records."""
        for prediction, features in records:
            yield self.transform(prediction, features)

    def parse(self, text_map: Mapping[str, str]) -> Insight:
        """Decode a text map produced by ``transform``."""
        return self._serializer.decode(text_map)

    def save(self, path: Union[str, Path]) -> None:
        """Write model and metadata as one JSON document."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            safe_json_dump({
                'model': self.model.to_dict(),
                'metadata': self.metadata.to_dict(),
            }, f)
        logger.info(f"Saved record insights model to {path}")

    @classmethod
    def load(cls, path: Union[str, Path], codec: Optional[IdentifierCodec] = None) -> "RecordInsightsModel":
        path = Path(path)
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError as e:
            raise ParseError(f"Model file {path} is not valid JSON: {e}", original_exception=e)

        if not isinstance(data, dict) or 'model' not in data or 'metadata' not in data:
            raise ParseError(f"Model file {path} must contain 'model' and 'metadata'")

        return cls(
            ImportanceModel.from_dict(data['model']),
            VectorMetadata.from_dict(data['metadata']),
            codec
        )


class RecordInsightsCorr:
    """
    Estimator producing record-level insights from feature/prediction correlation.

    Input 1 must be the predictions to explain and input 2 the feature vector
    fed to the model. Regression outputs must be given as one-element vectors.

    Example:
        >>> estimator = RecordInsightsCorr(InsightsConfig(top_k=3))
        >>> insights_model = estimator.fit(predictions, features, metadata)
        >>> insights_model.transform(predictions[0], features[0])
    """

    def __init__(
        self,
        config: Optional[InsightsConfig] = None,
        aggregator: Optional[StatisticsAggregator] = None,
        codec: Optional[IdentifierCodec] = None
    ):
        self.config = config or InsightsConfig()
        self.fitter = CorrelationFitter(aggregator)
        self.codec = codec

    def fit(
        self,
        predictions: Sequence[object],
        features: Sequence[object],
        metadata: VectorMetadata
    ) -> RecordInsightsModel:
        """
        Fit on aligned prediction and feature vectors.

        Raises:
            SchemaMismatch: If the inputs have different record counts, vector
                sizes vary, or the metadata size is not the feature size
        """
        if len(predictions) != len(features):
            raise SchemaMismatch(
                "record count",
                expected=len(predictions),
                actual=len(features),
                message=f"Got {len(predictions)} prediction vectors but {len(features)} feature vectors"
            )

        model = self.fitter.fit(zip(predictions, features), self.config, metadata.column_history())
        return RecordInsightsModel(model, metadata, self.codec)
