"""
update-weights CLI main dispatcher.

Provides subcommands:
- update-weights run [options]
- update-weights backends
"""

import sys
import argparse
from typing import List, Optional


def main(argv: Optional[List[str]] = None):
    """
    Main entry point for the update-weights CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])
    """
    parser = argparse.ArgumentParser(
        prog='update-weights',
        description='Benchmark a running-average update on a reference and an accelerated backend',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    from .run_cmd import add_run_parser
    add_run_parser(subparsers)

    from .backends_cmd import add_backends_parser
    add_backends_parser(subparsers)

    args = parser.parse_args(argv)

    if args.command == 'run':
        from .run_cmd import handle_run
        return handle_run(args)
    elif args.command == 'backends':
        from .backends_cmd import handle_backends
        return handle_backends(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
