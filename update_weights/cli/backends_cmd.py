"""
Backend listing CLI command.

Commands:
- update-weights backends          - List registered backends
- update-weights backends --probe  - Also initialize each to report availability
"""

from rich.console import Console
from rich.table import Table

from ..backends import BACKENDS, list_backends
from ..config import SIZE_PRESETS
from ..errors import InitializationFailure


def add_backends_parser(subparsers):
    """Add backends subcommand parser."""
    parser = subparsers.add_parser(
        'backends',
        help='List accelerated backends',
        description='List registered accelerated backends and, with --probe, whether they can run here'
    )

    parser.add_argument(
        '--probe',
        action='store_true',
        help='Initialize each backend to report availability and device class'
    )

    return parser


def handle_backends(args):
    """Handle backends subcommand."""
    console = Console()
    backends = list_backends()

    table = Table(title="Accelerated Backends", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan", width=10)
    table.add_column("Default kernel", style="yellow", width=22)
    table.add_column("Description", style="white")
    if args.probe:
        table.add_column("Device", width=14)
        table.add_column("Lanes", justify="right", width=6)

    for name, info in backends.items():
        row = [name, info['default_kernel'], info['description']]
        if args.probe:
            backend = BACKENDS[name](size=SIZE_PRESETS['small'])
            try:
                capability = backend.initialize(info['default_kernel'])
            except InitializationFailure as e:
                row += ["[red]error[/red]", "-"]
                console.print(f"[yellow]Warning:[/yellow] {name}: {e}")
            else:
                if capability.available:
                    row += [f"[green]{capability.device_class.name.lower()}[/green]", str(capability.compute_units)]
                else:
                    row += ["[red]unavailable[/red]", "-"]
        table.add_row(*row)

    console.print(table)
    console.print(f"\n[dim]Total: {len(backends)} registered backend(s)[/dim]")
    console.print("[dim]Run with: update-weights run --backend <name> (or package.module:ClassName)[/dim]")
    return 0
