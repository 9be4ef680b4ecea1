"""
timing.py
=========

Monotonic timing helpers: per-iteration statistics for the benchmark loop and
phase profiling (initialize, size, run, fetch) with Rich console output.

All clocks are `time.perf_counter`, never wall-clock-of-day.

Functions:
----------
- elapsed_ms: Milliseconds since a perf_counter start mark.
- timing_stats: mean/std/min/max of a list of millisecond samples.
- TIMING_CONFIGURE: Configure global phase-timing settings.
- TIMING_RESET: Clear recorded phase timings.
- TIMING_RECORDS: Copy of the recorded phase timings.
- TIMING_REPORT: Rich table of phase timings.
- PROFILE_PHASE: Context manager timing one phase.
"""
import time
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text


# Module-level state
_phase_records: List[Dict[str, Any]] = []
_max_records: int = 1000
_timing_enabled: bool = True
_print_results: bool = True


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since `start` (a time.perf_counter() value)."""
    return (time.perf_counter() - start) * 1000.0


def timing_stats(samples_ms: Sequence[float]) -> Dict[str, float]:
    """
    Summary statistics of per-iteration timings.

    Returns:
        Dict with keys: total_ms, mean_ms, std_ms, min_ms, max_ms
        (all zero when there are no samples)
    """
    if not samples_ms:
        return {'total_ms': 0.0, 'mean_ms': 0.0, 'std_ms': 0.0, 'min_ms': 0.0, 'max_ms': 0.0}

    total = sum(samples_ms)
    mean = total / len(samples_ms)
    variance = sum((t - mean) ** 2 for t in samples_ms) / len(samples_ms)

    return {
        'total_ms': total,
        'mean_ms': mean,
        'std_ms': variance ** 0.5,
        'min_ms': min(samples_ms),
        'max_ms': max(samples_ms),
    }


def TIMING_CONFIGURE(enabled: bool = True, print_results: bool = True, max_records: int = 1000):
    """Configure global phase-timing settings."""
    global _timing_enabled, _print_results, _max_records
    _timing_enabled = enabled
    _print_results = print_results
    _max_records = max_records


def TIMING_RESET():
    """Clear all recorded phase timings."""
    global _phase_records
    _phase_records = []


def TIMING_RECORDS() -> List[Dict[str, Any]]:
    """Copy of the recorded phase timings, oldest first."""
    return [dict(rec) for rec in _phase_records]


def _print_record(record: Dict[str, Any]) -> None:
    elapsed = record['elapsed_seconds']
    msg = Text()
    msg.append("TIME ", style="bold magenta")
    msg.append(f"[{record['end_datetime']}] ", style="dim")
    msg.append(f"{record['label']} ", style="cyan bold")
    msg.append(f"{elapsed:.3f}s", style="green" if elapsed < 1.0 else "yellow" if elapsed < 10.0 else "red")
    if record['description']:
        msg.append(f" - {record['description']}", style="italic dim")
    Console().print(msg)


@contextmanager
def PROFILE_PHASE(label: str, description: Optional[str] = None):
    """
    Time one session phase and record it.

    The record is kept even when the phase raises, with `failed` set.

    Example
    -------
    >>> with PROFILE_PHASE("initialize", "building running_average.pyx"):
    ...     capability = backend.initialize(kernel)
    # Output: TIME [12:34:56.789] initialize 0.042s - building running_average.pyx
    """
    global _phase_records

    if not _timing_enabled:
        yield
        return

    start = time.perf_counter()
    failed = True
    try:
        yield
        failed = False
    finally:
        record = {
            'label': label,
            'description': description or '',
            'end_datetime': datetime.now().strftime('%H:%M:%S.%f')[:-3],
            'elapsed_seconds': time.perf_counter() - start,
            'failed': failed,
        }
        _phase_records.append(record)
        if len(_phase_records) > _max_records:
            _phase_records = _phase_records[-_max_records:]
        if _print_results:
            _print_record(record)


def TIMING_REPORT(console: Optional[Console] = None):
    """Print a table of recorded phase timings."""
    console = console or Console()
    if not _phase_records:
        console.print("[dim]No timing records.[/dim]")
        return

    table = Table(title="Phase Timing", show_header=True, header_style="bold magenta")
    table.add_column("Phase", style="cyan", width=20)
    table.add_column("Elapsed", justify="right", width=12)
    table.add_column("Description", style="italic", max_width=40)

    for rec in _phase_records:
        color = "red" if rec['failed'] else "green"
        table.add_row(rec['label'], f"[{color}]{rec['elapsed_seconds']:.3f}s[/{color}]", rec['description'])
    console.print(table)
