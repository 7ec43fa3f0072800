"""
Record-level feature importance.

Key Components:
- NormType / Normalizer / make_normalizer: feature normalization
- CorrelationFitter: fit phase producing an ImportanceModel
- InsightScorer: per-record top-K importance ranking
- InsightSerializer: text encoding of insights
- RecordInsightsCorr / RecordInsightsModel: pipeline entry points
"""

from .normalizer import NormType, Normalizer, make_normalizer
from .model import ImportanceModel
from .fitter import CorrelationFitter
from .scorer import InsightScorer, compute_importance, merge_insights, top_k_for_component
from .serializer import InsightSerializer, insight_to_text, parse_insights
from .estimator import RecordInsightsCorr, RecordInsightsModel

__all__ = [
    'NormType',
    'Normalizer',
    'make_normalizer',
    'ImportanceModel',
    'CorrelationFitter',
    'InsightScorer',
    'compute_importance',
    'merge_insights',
    'top_k_for_component',
    'InsightSerializer',
    'insight_to_text',
    'parse_insights',
    'RecordInsightsCorr',
    'RecordInsightsModel',
]
