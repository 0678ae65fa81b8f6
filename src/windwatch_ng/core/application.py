"""
Core application logic for WindWatch-NG.
"""

import asyncio
import logging
import signal
from typing import Optional
import structlog

from .config import AppConfig
from ..api.nws_client import NWSClient
from ..database.manager import DatabaseManager, DatabaseError
from ..processing.pipeline import AlertPipeline, PipelineRun
from ..processing.selector import AlertSelector, keyword_predicate
from ..processing.stations import ObservationClient, StationAggregator, ZoneResolver
from ..utils.logging import setup_logging, PerformanceLogger, AlertLogger

logger = logging.getLogger(__name__)
events = structlog.get_logger(__name__)


class WindWatchApplication:
    """Polls the NWS feed and stores enriched wind alerts."""

    def __init__(self, config: AppConfig, store: bool = True):
        """
        Initialize the application.

        Args:
            config: Application configuration
            store: Write results to the database (if enabled in config)
        """
        self.config = config
        self.store = store and config.database.enabled
        self.nws_client: Optional[NWSClient] = None
        self.database_manager: Optional[DatabaseManager] = None
        self.pipeline: Optional[AlertPipeline] = None
        self.performance_logger: Optional[PerformanceLogger] = None
        self.alert_logger: Optional[AlertLogger] = None
        self.running = False
        self._shutdown_event = asyncio.Event()

    def build_pipeline(self, client: NWSClient) -> AlertPipeline:
        """Wire the pipeline components around an NWS client."""
        aggregator = StationAggregator(ZoneResolver(client), ObservationClient(client))
        return AlertPipeline(
            selector=AlertSelector(client, self.config.nws.area),
            aggregator=aggregator,
            predicate=keyword_predicate(self.config.filtering.event_keywords),
            threshold_mph=self.config.filtering.wind_threshold_mph,
        )

    async def initialize(self, nws_client: Optional[NWSClient] = None) -> None:
        """Initialize the application components."""
        _, self.performance_logger, self.alert_logger = setup_logging(self.config.logging)
        logger.info("Initializing WindWatch-NG application")

        self.nws_client = nws_client or NWSClient(self.config.nws)
        self.pipeline = self.build_pipeline(self.nws_client)

        if self.store:
            self.database_manager = DatabaseManager(self.config)
            await self.database_manager.initialize()
        else:
            logger.info("Database storage disabled")

    async def shutdown(self) -> None:
        """Shutdown the application gracefully."""
        logger.info("Shutting down WindWatch-NG application")

        self.running = False
        self._shutdown_event.set()

        if self.database_manager:
            await self.database_manager.close()

        if self.nws_client:
            await self.nws_client.close()

        logger.info("Application shutdown complete")

    async def run_once(self) -> PipelineRun:
        """
        Run the pipeline once and store its results.

        Storage is skipped entirely when no alert qualified. A storage
        failure is logged and does not fail the run.
        """
        timer_id = self.performance_logger.start_timer("poll_cycle")
        result = await self.pipeline.execute()

        if not result.feed_ok:
            self.alert_logger.log_feed_unavailable(result.feed_error, area=self.config.nws.area)

        for alert in result.alerts:
            self.alert_logger.log_alert_enriched(alert.id, alert.event, alert.observation_stations)

        stored = 0
        if not result.alerts:
            logger.info("No relevant alerts, nothing stored")
        elif self.database_manager:
            try:
                stored = await self.database_manager.upsert_alerts(result.alerts)
                self.alert_logger.log_alerts_stored(stored)
            except DatabaseError as e:
                logger.error(f"Failed to store alerts: {e}")

        events.info(
            "poll_cycle_complete",
            area=self.config.nws.area,
            feed_ok=result.feed_ok,
            alerts_kept=len(result.alerts),
            alerts_stored=stored,
        )

        self.performance_logger.end_timer(
            timer_id,
            success=result.feed_ok,
            alerts_selected=len(result.selection),
            alerts_kept=len(result.alerts),
            alerts_stored=stored,
        )
        return result

    async def run(self) -> None:
        """Run the main application loop."""
        await self.initialize()

        self._setup_signal_handlers()

        self.running = True
        logger.info(f"Starting main loop with {self.config.poll_interval}s poll interval")

        try:
            while self.running:
                await self._poll_cycle()

                # Wait for next poll or shutdown signal
                try:
                    await asyncio.wait_for(
                        self._shutdown_event.wait(),
                        timeout=self.config.poll_interval
                    )
                    break
                except asyncio.TimeoutError:
                    pass
        finally:
            await self.shutdown()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating shutdown")
            self._shutdown_event.set()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    async def _poll_cycle(self) -> None:
        """Execute one polling cycle."""
        logger.debug("Starting poll cycle")
        try:
            await self.run_once()
        except Exception as e:
            logger.error(f"Error in poll cycle: {e}", exc_info=True)
