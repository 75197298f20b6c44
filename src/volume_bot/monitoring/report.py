"""Console run report rendered with rich."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from volume_bot.monitoring.alert_types import AlertSeverity

if TYPE_CHECKING:
    from volume_bot.orchestration.engine import RunSummary


def format_duration(seconds: float) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours}h {minutes}m {secs}s"


def format_optional(value: float | None, fmt: str, suffix: str = "") -> str:
    if value is None:
        return "n/a"
    return f"{value:{fmt}}{suffix}"


def render_run_report(summary: RunSummary, console: Console | None = None) -> None:
    """Print the end-of-run statistics, pattern usage, hourly volume and alerts."""
    console = console or Console()
    stats = summary.stats
    metrics = summary.metrics

    state_style = "green" if summary.reason.value == "target_reached" else "yellow"
    if summary.state.value == "emergency_stopped":
        state_style = "red"

    console.print(
        Panel(
            f"[bold blue]Volume Bot Run Report[/bold blue]\n"
            f"Asset: {summary.asset}\n"
            f"Mode: {summary.execution_mode.value}\n"
            f"State: [{state_style}]{summary.state.value}[/{state_style}] "
            f"({summary.reason.value})\n"
            f"Runtime: {format_duration(summary.duration_seconds)}",
            title=f"Run {summary.run_id}",
        )
    )

    stats_table = Table(title="Statistics")
    stats_table.add_column("Metric", style="cyan")
    stats_table.add_column("Value", justify="right", style="white")
    rows = [
        ("Patterns Executed", str(summary.patterns_executed)),
        ("Total Trades", str(stats.total_trades)),
        (
            "Successful",
            f"{stats.successful_trades} ({format_optional(stats.success_rate, '.1f', '%')})",
        ),
        ("Failed", str(stats.failed_trades)),
        ("Total Volume", f"{stats.total_volume:.6f}"),
        ("Total Gas Used", str(stats.total_gas_used)),
        ("Gas Efficiency", format_optional(metrics.gas_efficiency, ".2f")),
        ("Current Position", f"{stats.current_position:.6f}"),
        ("P&L", f"{stats.profit_loss:.6f}"),
        ("Max Drawdown", f"{metrics.max_drawdown:.6f}"),
        ("Avg Trade Time", f"{metrics.average_trade_time_ms:.1f} ms"),
    ]
    if stats.total_trades:
        rows.append(("Average Trade Size", f"{stats.total_volume / stats.total_trades:.6f}"))
    for name, value in rows:
        stats_table.add_row(name, value)
    console.print(stats_table)

    if stats.patterns_used:
        pattern_table = Table(title="Pattern Usage")
        pattern_table.add_column("Pattern", style="cyan")
        pattern_table.add_column("Trades", justify="right")
        pattern_table.add_column("Share", justify="right")
        for pattern, count in sorted(stats.patterns_used.items(), key=lambda kv: -kv[1]):
            share = count / stats.total_trades * 100 if stats.total_trades else 0.0
            pattern_table.add_row(pattern, str(count), f"{share:.1f}%")
        console.print(pattern_table)

    if metrics.hourly_volume:
        hourly_table = Table(title="Hourly Volume")
        hourly_table.add_column("Hour", justify="right", style="cyan")
        hourly_table.add_column("Volume", justify="right")
        for hour in sorted(metrics.hourly_volume):
            hourly_table.add_row(str(hour), f"{metrics.hourly_volume[hour]:.6f}")
        console.print(hourly_table)

    if summary.alerts:
        alert_table = Table(title="Alerts")
        alert_table.add_column("Time", style="dim")
        alert_table.add_column("Type", style="cyan")
        alert_table.add_column("Severity")
        alert_table.add_column("Message")
        for alert in summary.alerts:
            severity = (
                "[red]CRITICAL[/red]"
                if alert.severity is AlertSeverity.CRITICAL
                else "[yellow]WARNING[/yellow]"
            )
            alert_table.add_row(
                alert.timestamp.strftime("%H:%M:%S"), alert.type.value, severity, alert.message
            )
        console.print(alert_table)


__all__ = ["render_run_report", "format_duration"]
