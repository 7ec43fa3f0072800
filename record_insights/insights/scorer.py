"""
Inference phase: per-record importance ranking.

For one record, importance of feature f for prediction component p is

    importance[p][f] = 0                                if correlations[p][f] is NaN
                       correlations[p][f] * normalized[f]  otherwise

A NaN or infinite feature value likewise scores 0, so every importance is
finite.

Each component keeps its top_k features by absolute importance (stable sort,
so ties keep feature order). The per-component results are then folded into
one insight by concatenating entries for shared columns. Entries are never
deduplicated or summed: a column selected for two components carries two
(component, importance) pairs.
"""

from typing import Dict, Hashable, Iterable, List, Sequence, Tuple

import numpy as np

from record_insights.core.exceptions import SchemaMismatch
from record_insights.insights.model import ImportanceModel
from record_insights.utils.vectors import as_vector, vector_size

# Sequence of (prediction component index, importance)
Insights = List[Tuple[int, float]]
Insight = Dict[Hashable, Insights]


def compute_importance(model: ImportanceModel, features) -> np.ndarray:
    """
    Signed importance of every feature for every prediction component.

    Returns:
        P x F array
    """
    normalized = model.normalizer.apply(features)
    with np.errstate(invalid="ignore"):
        importance = model.correlations * normalized
    # Undefined correlations and non-finite feature values score 0
    return np.where(np.isfinite(importance), importance, 0.0)


def top_k_for_component(
    identifiers: Sequence[Hashable],
    importance: np.ndarray,
    k: int,
    component: int
) -> Insight:
    """
    Select the k features with greatest absolute importance for one component.

    Args:
        identifiers: Feature identifiers, aligned with ``importance``
        importance: Importance of each feature for this component
        k: Number of features to keep
        component: Prediction component index recorded with each entry

    Returns:
        Mapping of identifier to a single (component, importance) pair,
        ordered by descending absolute importance
    """
    order = np.argsort(-np.abs(importance), kind="stable")[:k]
    return {identifiers[f]: [(component, float(importance[f]))] for f in order}


def merge_insights(per_component: Iterable[Insight]) -> Insight:
    """
    Fold per-component insights into one.

    Shared keys get their sequences concatenated in component order; no
    deduplication and no summation.
    """
    merged: Insight = {}
    for insight in per_component:
        for key, entries in insight.items():
            if key in merged:
                merged[key] = merged[key] + list(entries)
            else:
                merged[key] = list(entries)
    return merged


class InsightScorer:
    """
    Scores single records against a fitted ImportanceModel.

    Stateless apart from the read-only model, so one scorer can be used from
    many threads or worker processes at once.

    Example:
        >>> scorer = InsightScorer(model)
        >>> insight = scorer.score(prediction, features, metadata.column_history())
    """

    def __init__(self, model: ImportanceModel):
        self.model = model

    def score(
        self,
        prediction,
        features,
        column_identifiers: Sequence[Hashable]
    ) -> Insight:
        """
        Explain one record.

        Args:
            prediction: Prediction vector of length P, or None when only the
                features are available (the prediction values are not used)
            features: Feature vector of length F
            column_identifiers: One identifier per feature slot

        Returns:
            Insight with at most top_k entries per prediction component

        Raises:
            SchemaMismatch: If the identifier count, feature length or
                prediction length disagree with the model
        """
        model = self.model
        features = as_vector(features, what="feature vector")

        if len(column_identifiers) != model.feature_size:
            raise SchemaMismatch("column identifiers", expected=model.feature_size, actual=len(column_identifiers))
        if vector_size(features) != model.feature_size:
            raise SchemaMismatch("feature vector", expected=model.feature_size, actual=vector_size(features))
        if prediction is not None:
            prediction = as_vector(prediction, what="prediction vector")
            if vector_size(prediction) != model.prediction_size:
                raise SchemaMismatch(
                    "prediction vector", expected=model.prediction_size, actual=vector_size(prediction)
                )

        importance = compute_importance(model, features)
        return merge_insights(
            top_k_for_component(column_identifiers, importance[p], model.top_k, p)
            for p in range(model.prediction_size)
        )
