"""Entry point for noc-watch — `noc-watch` console script."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console
from rich.live import Live
from rich.logging import RichHandler
from rich.panel import Panel

from noc_watch.config import Settings, settings
from noc_watch.monitor import Aggregator, ProbeScheduler
from noc_watch.probes import ProbeExecutor, SystemProbeExecutor
from noc_watch.sinks import DashboardSink, LogFileSink, render_snapshot

console = Console()

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def configure_logging(config: Settings) -> None:
    """Plain stderr logging when headless; above the live view otherwise."""
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.headless:
        logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    else:
        logging.basicConfig(
            level=level,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
            force=True,
        )


def build_scheduler(config: Settings, executor: ProbeExecutor | None = None) -> ProbeScheduler:
    """Wire executor, aggregator and the log file sink for the chosen mode."""
    scheduler = ProbeScheduler(
        executor or SystemProbeExecutor(config.wifi_interface, config),
        Aggregator(window=config.history_window),
        lease_interval=config.lease_interval,
        connectivity_interval=config.connectivity_interval,
        emit_interval=config.headless_emit_interval if config.headless else config.emit_interval,
    )
    log_sink = LogFileSink(config.log_file)
    if config.headless:
        scheduler.add_sink(log_sink)
    else:
        # Dashboard owns the 1s emit trigger; the log keeps its own cadence
        scheduler.add_sink(log_sink, interval=config.log_write_interval)
    return scheduler


def run_headless(config: Settings) -> None:
    console.print(
        Panel.fit(
            f"[bold]NOC Watch (headless)[/bold]\n"
            f"Interface: {config.wifi_interface}\n"
            f"Log file:  {config.log_file}\n"
            f"Probes:    lease every {config.lease_interval:g}s, "
            f"connectivity every {config.connectivity_interval:g}s",
            title="noc-watch",
            border_style="green",
        )
    )
    scheduler = build_scheduler(config)
    asyncio.run(scheduler.run(probe_on_start=config.probe_on_start))


def run_dashboard(config: Settings) -> None:
    scheduler = build_scheduler(config)
    initial = render_snapshot(scheduler.aggregator.snapshot(), config.wifi_interface)

    with Live(initial, console=console, screen=True, refresh_per_second=4) as live:
        scheduler.add_sink(DashboardSink(live, config.wifi_interface))
        asyncio.run(scheduler.run(emit_on_start=True, probe_on_start=config.probe_on_start))


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="NOC Watch — network interface health monitor")
    parser.add_argument("--headless", action="store_true", default=None, help="Run without the dashboard")
    parser.add_argument("--interface", dest="wifi_interface", help="Interface to probe (default: $WIFI_INTERFACE or wlan0)")
    parser.add_argument("--log-file", dest="log_file", help="Append results to this file")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--probe-on-start", dest="probe_on_start", action="store_true", default=None,
        help="Run both probes immediately instead of after one full period",
    )

    args = parser.parse_args(argv)
    overrides = {k: v for k, v in vars(args).items() if v is not None}
    config = settings.model_copy(update=overrides)

    configure_logging(config)

    try:
        if config.headless:
            run_headless(config)
        else:
            run_dashboard(config)
    except KeyboardInterrupt:
        console.print("[dim]noc-watch stopped[/dim]")
        sys.exit(0)


if __name__ == "__main__":
    main()
