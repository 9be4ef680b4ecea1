"""
Per-iteration timing plots.

Draws the reference and accelerated update times of one run against the
iteration index. Uses the object-oriented Matplotlib API so that saving a
figure never needs an interactive display.
"""

from matplotlib.figure import Figure

from .report import BenchmarkReport


def plot_iteration_times(report: BenchmarkReport) -> Figure:
    """Figure of per-iteration update times for both backends."""
    timing = report.timing
    fig = Figure(figsize=(8, 4.5))
    ax = fig.subplots()

    iterations = range(1, len(timing.reference_samples_ms) + 1)
    ax.plot(iterations, timing.reference_samples_ms, marker=".", label="reference")
    if not report.reference_only:
        ax.plot(
            range(1, len(timing.accelerated_samples_ms) + 1),
            timing.accelerated_samples_ms,
            marker=".",
            label=f"accelerated ({report.backend})",
        )

    ax.set_xlabel("iteration t")
    ax.set_ylabel("update time (ms)")
    ax.set_title(f"Running-average update, N = {report.size}")
    ax.grid(True, alpha=0.3)
    ax.legend()
    return fig


def save_iteration_plot(report: BenchmarkReport, filepath: str, dpi: int = 120) -> str:
    """Save the per-iteration timing figure to `filepath`. Returns the path."""
    fig = plot_iteration_times(report)
    fig.savefig(filepath, dpi=dpi, bbox_inches="tight")
    return filepath
