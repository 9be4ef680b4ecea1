"""
Benchmark run CLI command.

Commands:
- update-weights run  - Initialize a backend, size the vectors, run and report

Ctrl-C during the run requests a cooperative abort: the current iteration
finishes on both backends and the partial result is reported.
"""

import signal
import threading

from rich.console import Console
from rich.markup import escape

from ..backends import resolve_backend
from ..config import SIZE_PRESETS, load_config
from ..debug import DEBUG_INSPECT_SESSION, DEBUG_PRINT_EXCEPTION
from ..errors import UpdateWeightsError
from ..generator import RandomInputGenerator
from ..logging import configure_global_logging
from ..report import render_report, save_report
from ..session import BenchmarkSession
from ..timing import TIMING_CONFIGURE, TIMING_REPORT, TIMING_RESET


def add_run_parser(subparsers):
    """Add run subcommand parser."""
    parser = subparsers.add_parser(
        'run',
        help='Run the running-average benchmark',
        description='Update a running average on the reference and accelerated backends and compare them'
    )

    parser.add_argument(
        '--backend', '-b',
        help='Backend name or package.module:ClassName (default: cython, env UPDATE_WEIGHTS_BACKEND)'
    )

    parser.add_argument(
        '--kernel', '-k',
        help="Kernel logical name (default: the backend's own)"
    )

    parser.add_argument(
        '--size', '-s',
        help=f"Vector size: {', '.join(SIZE_PRESETS)} or an integer (default: medium)"
    )

    parser.add_argument(
        '--iterations', '-n',
        type=int,
        help='Number of update iterations (default: 10)'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Seed the input generator for a reproducible run'
    )

    parser.add_argument(
        '--no-fallback',
        dest='reference_only_fallback',
        action='store_false',
        default=None,
        help='Fail instead of running reference-only when the backend is unavailable'
    )

    parser.add_argument(
        '--samples',
        type=int,
        help='Number of spot-check elements in the report (default: 10)'
    )

    parser.add_argument(
        '--output', '-o',
        help='Save the report to a JSON file'
    )

    parser.add_argument(
        '--plot',
        help='Save a per-iteration timing plot to this image file'
    )

    parser.add_argument(
        '--inspect',
        action='store_true',
        help='Open an IPython shell with the session after the run'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Print full tracebacks on failure'
    )

    parser.add_argument(
        '--log-level',
        help='Logging level (default: WARNING, env UPDATE_WEIGHTS_LOG_LEVEL)'
    )

    return parser


def _fail(console: Console, args, message: str, exc: Exception) -> int:
    if args.debug:
        DEBUG_PRINT_EXCEPTION(exc)
    console.print(f"[red]{message}:[/red] {escape(str(exc))}")
    return 1


def handle_run(args):
    """Handle run subcommand."""
    console = Console()

    try:
        config = load_config(
            backend=args.backend,
            kernel=args.kernel,
            size=args.size,
            iterations=args.iterations,
            seed=args.seed,
            reference_only_fallback=args.reference_only_fallback,
            samples=args.samples,
            log_level=args.log_level,
        )
        configure_global_logging(config.log_level)
    except ValueError as e:
        return _fail(console, args, "Invalid configuration", e)

    TIMING_CONFIGURE(print_results=False)
    TIMING_RESET()

    abort_requested = threading.Event()

    def _request_abort(signum, frame):
        if abort_requested.is_set():
            raise KeyboardInterrupt
        abort_requested.set()
        console.print("\n[yellow]Abort requested; stopping after the current iteration (Ctrl-C again to kill)[/yellow]")

    try:
        backend = resolve_backend(config.backend, size=config.vector_size)
        session = BenchmarkSession(
            backend,
            kernel=config.kernel,
            reference_only_fallback=config.reference_only_fallback,
            fallback_size=config.vector_size,
            generator=RandomInputGenerator(config.seed),
            samples=config.samples,
        )

        console.print(f"[cyan]Initializing backend[/cyan] {config.backend} ...")
        capability = session.initialize()
        if not capability.available:
            console.print(f"[yellow]Warning:[/yellow] accelerated backend unavailable "
                          f"({capability.reason}); running reference only")

        store = session.size()
        console.print(f"[cyan]Vectors sized:[/cyan] {store.size} elements")
        console.print(f"[cyan]Running {config.iterations} iteration(s)...[/cyan]\n")

        previous_handler = signal.signal(signal.SIGINT, _request_abort)
        try:
            report = session.run(config.iterations, should_abort=abort_requested.is_set)
        finally:
            signal.signal(signal.SIGINT, previous_handler)

    except UpdateWeightsError as e:
        return _fail(console, args, f"Benchmark failed ({type(e).__name__})", e)

    render_report(report, console)
    console.print()
    TIMING_REPORT(console)

    if args.output:
        try:
            save_report(report, args.output)
            console.print(f"\n[green]Report saved to: {args.output}[/green]")
        except OSError as e:
            return _fail(console, args, "Failed to save report", e)

    if args.plot:
        from ..plotting import save_iteration_plot
        try:
            save_iteration_plot(report, args.plot)
            console.print(f"[green]Plot saved to: {args.plot}[/green]")
        except (OSError, ValueError) as e:
            return _fail(console, args, "Failed to save plot", e)

    if args.inspect:
        DEBUG_INSPECT_SESSION(session, report)

    return 2 if report.timing.aborted else 0
