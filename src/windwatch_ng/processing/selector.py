"""
Alert selection from the NWS active alerts feed.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional

from ..api.nws_client import NWSClient, NWSClientError
from ..core.models import WeatherAlert

logger = logging.getLogger(__name__)

EventPredicate = Callable[[str], bool]


def keyword_predicate(keywords: Iterable[str]) -> EventPredicate:
    """
    Build a predicate matching events that contain any keyword.

    Matching is a case-insensitive substring test, so ["wind"] selects both
    "High Wind Warning" and "Wind Advisory".
    """
    lowered = [keyword.lower() for keyword in keywords if keyword]

    def matches(event: str) -> bool:
        event = (event or "").lower()
        return any(keyword in event for keyword in lowered)

    return matches


@dataclass
class AlertSelection:
    """Outcome of one alert selection.

    An empty selection with ``error`` set means the feed could not be read,
    which is not the same as a feed with no matching alerts.
    """

    alerts: List[WeatherAlert] = field(default_factory=list)
    total_active: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def __iter__(self) -> Iterator[WeatherAlert]:
        return iter(self.alerts)

    def __len__(self) -> int:
        return len(self.alerts)


class AlertSelector:
    """Fetches active alerts for an area and keeps those of interest."""

    def __init__(self, client: NWSClient, area: Optional[str] = None):
        self.client = client
        self.area = area or client.config.area

    async def select_alerts(self, predicate: EventPredicate) -> AlertSelection:
        """
        Fetch active alerts and filter them by event.

        Args:
            predicate: Called with each alert's event label

        Returns:
            Selection of matching alerts in feed order; never raises
        """
        try:
            alerts = await self.client.fetch_active_alerts(self.area)
        except NWSClientError as e:
            logger.error(f"Failed to fetch active alerts for {self.area}: {e}")
            return AlertSelection(error=str(e))

        selected = [alert for alert in alerts if predicate(alert.event)]
        logger.info(
            f"Selected {len(selected)} of {len(alerts)} active alerts for {self.area}"
        )
        return AlertSelection(alerts=selected, total_active=len(alerts))
