"""
example_session.py
==================

Run the benchmark programmatically: initialize, size, run, report.
Falls back to a reference-only run if no accelerated backend is built.
"""

from update_weights import BenchmarkSession, RandomInputGenerator, resolve_backend, render_report
from update_weights.logging import configure_global_logging


def main(backend_name="numba", size=2 ** 18, iterations=20):
    configure_global_logging("INFO")

    backend = resolve_backend(backend_name, size=size)
    session = BenchmarkSession(
        backend,
        reference_only_fallback=True,
        generator=RandomInputGenerator(seed=1234),
    )

    session.initialize()
    session.size()
    report = session.run(iterations)
    render_report(report)

    # Re-size to start a fresh run on zeroed vectors
    session.size()
    report = session.run(iterations // 2)
    render_report(report)


if __name__ == "__main__":
    main()
