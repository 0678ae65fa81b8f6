"""
Alert processing pipeline for WindWatch-NG.
"""

from .selector import AlertSelector, AlertSelection, EventPredicate, keyword_predicate
from .stations import (
    ZoneResolver,
    ObservationClient,
    ObservationOutcome,
    StationAggregator,
    qualifies,
)
from .pipeline import AlertPipeline, PipelineRun

__all__ = [
    "AlertSelector",
    "AlertSelection",
    "EventPredicate",
    "keyword_predicate",
    "ZoneResolver",
    "ObservationClient",
    "ObservationOutcome",
    "StationAggregator",
    "qualifies",
    "AlertPipeline",
    "PipelineRun",
]
