"""
Record Insights - record-level feature importance for model predictions.

Fit a correlation-based importance model once over (prediction, feature)
vector pairs, then explain each record by the features that most influenced
each prediction component.
"""

__version__ = "0.1.0"
