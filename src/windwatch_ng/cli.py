"""
Command-line interface for WindWatch-NG.
"""

import argparse
import asyncio
import json
import logging
import sys
from rich.console import Console
from rich.table import Table

from .core.config import AppConfig
from .core.application import WindWatchApplication
from .processing.pipeline import PipelineRun

console = Console()
logger = logging.getLogger(__name__)


def setup_logging():
    """Setup basic logging."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def run_application_with_config(config_path=None):
    """Run the polling loop with specified config."""
    config = AppConfig.from_yaml(config_path)
    if not config.enabled:
        console.print("[yellow]WindWatch-NG is disabled in configuration[/yellow]")
        return

    console.print("[bold green]Starting WindWatch-NG[/bold green]")
    console.print(
        f"Area: {config.nws.area}  Events: {', '.join(config.filtering.event_keywords)}  "
        f"Threshold: {config.filtering.wind_threshold_mph} mph"
    )

    app = WindWatchApplication(config)
    try:
        await app.run()
    except KeyboardInterrupt:
        console.print("\n[yellow]Shutdown requested by user[/yellow]")


def render_run(result: PipelineRun) -> Table:
    """Build a table of enriched alerts."""
    table = Table(title=f"{len(result.alerts)} relevant alerts")
    table.add_column("Event", style="bold")
    table.add_column("Headline")
    table.add_column("Sent")
    table.add_column("Stations", justify="right")
    table.add_column("Max wind (mph)", justify="right")

    for alert in result.alerts:
        top = max(station.wind_speed_mph for station in alert.stations)
        table.add_row(
            alert.event,
            alert.headline or "",
            alert.sent.isoformat() if alert.sent else "",
            str(len(alert.stations)),
            f"{top:.1f}",
        )
    return table


async def run_once_with_config(config_path=None, as_json=False, store=True):
    """Run the pipeline once and print the result."""
    config = AppConfig.from_yaml(config_path)
    app = WindWatchApplication(config, store=store)

    try:
        await app.initialize()
        result = await app.run_once()
    finally:
        await app.shutdown()

    if as_json:
        print(json.dumps([alert.to_details() for alert in result.alerts], indent=2))
    else:
        if not result.feed_ok:
            console.print(f"[red]✗ Alert feed unavailable: {result.feed_error}[/red]")
        console.print(render_run(result))

    return 0 if result.feed_ok else 1


async def test_nws_client_with_config(config_path=None):
    """Test the NWS client with specified config."""
    from .api.nws_client import NWSClient

    console.print("[bold blue]Testing NWS API Connection[/bold blue]")

    config = AppConfig.from_yaml(config_path)

    async with NWSClient(config.nws) as nws_client:
        if not await nws_client.test_connection():
            console.print("[red]✗ NWS API connection failed[/red]")
            return 1

        console.print("[green]✓ NWS API connection successful[/green]")
        alerts = await nws_client.fetch_active_alerts()
        console.print(f"  {len(alerts)} active alerts for {config.nws.area}")
        return 0


def create_parser():
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        description="WindWatch-NG Wind Alert Monitor",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s run --config config/default.yaml    Run the polling loop
  %(prog)s once --json --no-store              Run once and print JSON
  %(prog)s test-nws                            Test NWS API connection
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    run_parser = subparsers.add_parser('run', help='Run the polling loop')
    run_parser.add_argument('--config', '-c',
                            help='Configuration file path (default: config/default.yaml)',
                            default='config/default.yaml')

    once_parser = subparsers.add_parser('once', help='Run the pipeline once')
    once_parser.add_argument('--config', '-c',
                             help='Configuration file path (default: config/default.yaml)',
                             default='config/default.yaml')
    once_parser.add_argument('--json', action='store_true', help='Print results as JSON')
    once_parser.add_argument('--no-store', action='store_true',
                             help='Do not write results to the database')

    test_nws_parser = subparsers.add_parser('test-nws', help='Test NWS API connection')
    test_nws_parser.add_argument('--config', '-c',
                                 help='Configuration file path (default: config/default.yaml)',
                                 default='config/default.yaml')

    return parser


def main():
    """Main entry point."""
    setup_logging()

    parser = create_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    exit_code = 0
    try:
        if args.command == 'run':
            asyncio.run(run_application_with_config(args.config))
        elif args.command == 'once':
            exit_code = asyncio.run(
                run_once_with_config(args.config, as_json=args.json, store=not args.no_store)
            )
        elif args.command == 'test-nws':
            exit_code = asyncio.run(test_nws_client_with_config(args.config))
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        sys.exit(0)
    except Exception as e:
        console.print(f"[red]Error: {e}[/red]")
        logger.exception("Unhandled exception")
        sys.exit(1)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
