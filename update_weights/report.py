"""
Benchmark report.

Collects the outcome of one session run (timings, backend agreement and a
few spot-check elements) and renders it with Rich or serializes it to JSON.
"""

import datetime
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .analysis import ErrorSummary
from .backends.base import Capability
from .driver import RunTiming
from .timing import timing_stats


@dataclass
class BenchmarkReport:
    """
    Result of one benchmark run.

    `error` and `capability` are None in reference-only mode.
    """

    size: int
    timing: RunTiming
    backend: Optional[str] = None
    capability: Optional[Capability] = None
    error: Optional[ErrorSummary] = None
    timestamp: str = field(default_factory=lambda: datetime.datetime.now().isoformat())

    @property
    def reference_only(self) -> bool:
        return self.timing.accelerated_ms is None

    @property
    def runtime_reduction_percent(self) -> Optional[float]:
        """(1 - accelerated / reference) * 100, None if undefined."""
        if self.reference_only or self.timing.reference_ms <= 0:
            return None
        return (1.0 - self.timing.accelerated_ms / self.timing.reference_ms) * 100.0

    @property
    def speedup(self) -> Optional[float]:
        if self.reference_only or not self.timing.accelerated_ms:
            return None
        return self.timing.reference_ms / self.timing.accelerated_ms

    def to_dict(self) -> Dict[str, Any]:
        timing = self.timing
        return {
            'timestamp': self.timestamp,
            'size': self.size,
            'backend': self.backend,
            'capability': self.capability.to_dict() if self.capability else None,
            'iterations': {
                'requested': timing.iterations_requested,
                'completed': timing.iterations_completed,
                'aborted': timing.aborted,
            },
            'results': {
                'reference': timing_stats(timing.reference_samples_ms),
                'accelerated': None if self.reference_only else timing_stats(timing.accelerated_samples_ms),
            },
            'fetch_ms': timing.fetch_ms,
            'runtime_reduction_percent': self.runtime_reduction_percent,
            'error': self.error.to_dict() if self.error else None,
        }


def save_report(report: BenchmarkReport, filepath: str) -> None:
    """
    Save a report to a JSON file.

    Args:
        report: Report from BenchmarkSession.run()
        filepath: Output path
    """
    with open(filepath, 'w') as f:
        json.dump(report.to_dict(), f, indent=2)


def render_report(report: BenchmarkReport, console: Optional[Console] = None) -> None:
    """Print a report: device panel, timing table, agreement and spot checks."""
    console = console or Console()
    timing = report.timing

    if report.capability is not None:
        cap = report.capability
        console.print(Panel(
            f"[cyan]Backend:[/cyan] {report.backend}\n"
            f"[cyan]Device:[/cyan] {cap.device_name or '-'} ({cap.device_class.name.lower()})\n"
            f"[cyan]Compute units:[/cyan] {cap.compute_units}\n"
            f"[cyan]Kernel:[/cyan] {cap.kernel}",
            title="Accelerated Backend",
            border_style="blue"
        ))
    else:
        console.print(Panel(
            "[yellow]No accelerated backend: reference-only run[/yellow]",
            title="Accelerated Backend",
            border_style="yellow"
        ))

    status = "[yellow]aborted[/yellow]" if timing.aborted else "[green]complete[/green]"
    console.print(
        f"\n{report.size} elements updated {timing.iterations_completed} time(s) "
        f"of {timing.iterations_requested} requested to maintain input averages ({status})\n"
    )

    table = Table(title="Update Timings", show_header=True, header_style="bold cyan")
    table.add_column("Backend", style="cyan", width=12, no_wrap=True)
    table.add_column("Total (ms)", justify="right", style="green", width=12)
    table.add_column("Mean (ms)", justify="right", width=10)
    table.add_column("Std (ms)", justify="right", width=10)
    table.add_column("Min (ms)", justify="right", width=10)
    table.add_column("Max (ms)", justify="right", width=10)

    rows = [("reference", timing.reference_samples_ms)]
    if not report.reference_only:
        rows.append(("accelerated", timing.accelerated_samples_ms))
    for name, samples in rows:
        stats = timing_stats(samples)
        table.add_row(
            name,
            f"{stats['total_ms']:.3f}",
            f"{stats['mean_ms']:.3f}",
            f"{stats['std_ms']:.3f}",
            f"{stats['min_ms']:.3f}",
            f"{stats['max_ms']:.3f}",
        )
    console.print(table)

    if report.reference_only:
        return

    reduction = report.runtime_reduction_percent
    speedup = report.speedup
    console.print(
        f"\n[bold]Runtime reduction:[/bold] "
        f"{'-' if reduction is None else f'{reduction:.2f}%'}"
        f"  [bold]Speedup:[/bold] {'-' if speedup is None else f'{speedup:.2f}x'}"
    )
    console.print(
        f"[dim]Accelerated result fetched once after the loop: "
        f"{timing.fetch_ms:.3f} ms, not included in the accelerated total[/dim]"
    )

    if report.error is None:
        return

    error = report.error
    style = "green" if error.is_defined else "yellow"
    console.print(
        f"\n[bold]Accelerated relative error to reference:[/bold] "
        f"[{style}]{error.relative_error_percent}[/{style}]"
        f"  (max |diff| {error.max_abs_diff:.3e}, mean |diff| {error.mean_abs_diff:.3e})"
    )

    if error.samples:
        samples = Table(title="Spot Check", show_header=True, header_style="bold cyan")
        samples.add_column("Index", justify="right", width=8)
        samples.add_column("Reference", justify="right", width=14)
        samples.add_column("Accelerated", justify="right", width=14)
        for index, ref, acc in error.samples:
            samples.add_row(str(index), f"{ref:.6f}", f"{acc:.6f}")
        console.print(samples)
