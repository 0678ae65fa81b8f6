"""
Alert enrichment pipeline for WindWatch-NG.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..core.models import EnrichedAlert
from .selector import AlertSelection, AlertSelector, EventPredicate
from .stations import StationAggregator

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    """Result of one pipeline run."""

    alerts: List[EnrichedAlert] = field(default_factory=list)
    selection: AlertSelection = field(default_factory=AlertSelection)
    without_stations: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)

    @property
    def feed_ok(self) -> bool:
        return self.selection.ok

    @property
    def feed_error(self) -> Optional[str]:
        return self.selection.error


class AlertPipeline:
    """Selects alerts and enriches each with its qualifying stations.

    Alerts are processed one after another; the zone and station fetches for
    a single alert run concurrently. A failure while processing one alert is
    logged and only that alert is skipped.
    """

    def __init__(
        self,
        selector: AlertSelector,
        aggregator: StationAggregator,
        predicate: EventPredicate,
        threshold_mph: float = 15.0,
    ):
        self.selector = selector
        self.aggregator = aggregator
        self.predicate = predicate
        self.threshold_mph = threshold_mph

    async def execute(self) -> PipelineRun:
        """Run the pipeline once and return the full run result."""
        selection = await self.selector.select_alerts(self.predicate)
        result = PipelineRun(selection=selection)

        if not selection.alerts:
            logger.info("No candidate alerts, nothing to enrich")
            return result

        for alert in selection.alerts:
            try:
                stations = await self.aggregator.aggregate(
                    alert.affected_zones, self.threshold_mph
                )
            except Exception as e:
                logger.error(f"Failed to process alert {alert.id}: {e}", exc_info=True)
                result.failed.append(alert.id)
                continue

            if not stations:
                logger.debug(f"Alert {alert.id} has no stations >= {self.threshold_mph} mph")
                result.without_stations.append(alert.id)
                continue

            logger.info(
                f"Alert: {alert.event} ({len(stations)} stations >= {self.threshold_mph} mph)"
            )
            result.alerts.append(EnrichedAlert.from_alert(alert, stations))

        logger.info(
            f"Pipeline complete: {len(result.alerts)} of {len(selection.alerts)} alerts kept"
        )
        return result

    async def run(self) -> List[EnrichedAlert]:
        """Run the pipeline once and return the enriched alerts."""
        return (await self.execute()).alerts
