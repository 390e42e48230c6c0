"""Terminal dashboard rendered with rich.

The sink only swaps the renderable held by a ``rich.live.Live``; the Live
refresh thread does the drawing. Nothing here reaches back into the
Aggregator, every value comes from the snapshot handed in.
"""

from __future__ import annotations

from rich import box
from rich.console import Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from noc_watch.monitor.models import ProbeResult, Snapshot

from .base import SnapshotSink
from .logfile import TIME_FORMAT, format_duration

CLOCK_FORMAT = "%H:%M:%S"


def _marker(result: ProbeResult) -> Text:
    return Text("✓", style="bold green") if result.success else Text("✗", style="bold red")


def _flag(value: bool) -> Text:
    return Text("yes", style="green") if value else Text("no", style="red")


def _rate(label: str, value: float) -> Text:
    line = Text(f"{label}: ")
    line.append(f"{value:.2f}%", style="yellow")
    return line


def build_stats_panel(snapshot: Snapshot, interface: str | None = None) -> Panel:
    counts = Text(f"Total Tests: {snapshot.total_count} | ")
    counts.append(f"Success: {snapshot.success_count}", style="green")
    counts.append(" | ")
    counts.append(f"Failure: {snapshot.failure_count}", style="red")

    now = Text("Current Time: ")
    now.append(snapshot.taken_at.strftime(TIME_FORMAT), style="cyan")

    body = Group(
        now,
        counts,
        _rate("Success Rate", snapshot.success_rate),
        _rate("DHCP Success Rate", snapshot.lease_success_rate),
        _rate("Ping Success Rate", snapshot.connectivity_success_rate),
    )
    title = "WiFi Quality Monitor - NOC Watch"
    if interface:
        title += f" ({interface})"
    return Panel(body, title=title, border_style="blue")


def build_lease_table(results: tuple[ProbeResult, ...]) -> RenderableType:
    if not results:
        return Text("Waiting for first DHCP test...", style="yellow")

    tbl = Table(box=box.SIMPLE, padding=(0, 1))
    tbl.add_column("#", justify="right", style="dim")
    tbl.add_column("", justify="center")
    tbl.add_column("Time")
    tbl.add_column("DHCP Renew", justify="right")
    for i, r in enumerate(results, start=1):
        tbl.add_row(
            str(i), _marker(r), r.timestamp.strftime(CLOCK_FORMAT),
            format_duration(r.lease_renew_duration),
        )
    return tbl


def build_connectivity_table(results: tuple[ProbeResult, ...]) -> RenderableType:
    if not results:
        return Text("Waiting for first ping test...", style="yellow")

    tbl = Table(box=box.SIMPLE, padding=(0, 1))
    tbl.add_column("#", justify="right", style="dim")
    tbl.add_column("", justify="center")
    tbl.add_column("Time")
    tbl.add_column("IPv4", justify="center")
    tbl.add_column("IPv6", justify="center")
    tbl.add_column("Latency", justify="right")
    for i, r in enumerate(results, start=1):
        tbl.add_row(
            str(i), _marker(r), r.timestamp.strftime(CLOCK_FORMAT),
            _flag(r.ipv4_reachable), _flag(r.ipv6_reachable), format_duration(r.latency),
        )
    return tbl


def build_latest_panel(snapshot: Snapshot) -> Panel:
    lines: list[Text] = [Text("Latest DHCP Test:", style="yellow")]
    lease = snapshot.latest_lease
    if lease is None:
        lines.append(Text("No DHCP tests completed yet.", style="dim"))
    else:
        lines += [
            Text(f"Time: {lease.timestamp.strftime(CLOCK_FORMAT)}"),
            Text(f"DHCP Renew: {format_duration(lease.lease_renew_duration)}"),
            Text(f"Success: {lease.success}"),
        ]

    lines.append(Text(""))
    lines.append(Text("Latest Ping Test:", style="yellow"))
    ping = snapshot.latest_connectivity
    if ping is None:
        lines.append(Text("No ping tests completed yet.", style="dim"))
    else:
        lines += [
            Text(f"Time: {ping.timestamp.strftime(CLOCK_FORMAT)}"),
            Text(f"IPv4: {ping.ipv4_reachable}"),
            Text(f"IPv6: {ping.ipv6_reachable}"),
            Text(f"Latency: {format_duration(ping.latency)}"),
            Text(f"Success: {ping.success}"),
        ]
    return Panel(Group(*lines), title="Latest Test Results")


def render_snapshot(snapshot: Snapshot, interface: str | None = None) -> Group:
    results = Panel(
        Group(
            Text("DHCP Test Results", style="bold yellow"),
            build_lease_table(snapshot.recent_leases),
            Text(""),
            Text("Ping Test Results", style="bold yellow"),
            build_connectivity_table(snapshot.recent_connectivity),
        ),
        title="Test Results",
    )
    return Group(build_stats_panel(snapshot, interface), results, build_latest_panel(snapshot))


class DashboardSink(SnapshotSink):
    """Feeds snapshots into a running ``rich.live.Live`` display."""

    name = "dashboard"

    def __init__(self, live: Live, interface: str | None = None) -> None:
        self.live = live
        self.interface = interface

    def accept(self, snapshot: Snapshot) -> None:
        self.live.update(render_snapshot(snapshot, self.interface))
