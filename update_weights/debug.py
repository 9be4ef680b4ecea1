"""
debug.py
========

Debugging aids for the benchmark CLI: Rich tracebacks for failed sessions and
an IPython shell for poking at a finished session's vectors.

Functions:
----------
- DEBUG_PRINT_EXCEPTION: Print a Rich traceback, optionally appending it to a log file.
- DEBUG_EMBED: Embed an IPython shell with a given namespace.
- DEBUG_INSPECT_SESSION: Embed a shell with a session, its vectors and its report bound.
"""
# standard imports
import sys, traceback, datetime

# third party imports
import IPython
import nest_asyncio
import numpy as np
from rich.console import Console
from rich.traceback import Traceback


def DEBUG_PRINT_EXCEPTION(exc=None, console=None, log_file=None):
    """
    Print a Rich traceback for `exc` (default: the exception being handled).

    Parameters:
    -----------
    exc : BaseException, optional
        Exception to render. Defaults to sys.exc_info().
    console : rich.console.Console, optional
        Console to print to (default: a stderr console).
    log_file : str, optional
        If provided, the plain traceback is also appended to this file.
    """
    console = console or Console(stderr=True)
    if exc is None:
        exc_type, exc_value, exc_traceback = sys.exc_info()
    else:
        exc_type, exc_value, exc_traceback = type(exc), exc, exc.__traceback__

    console.print(Traceback.from_exception(exc_type, exc_value, exc_traceback))

    if log_file:
        with open(log_file, "a") as f:
            f.write(f"--- update-weights failure on {datetime.datetime.now()} ---\n")
            traceback.print_exception(exc_type, exc_value, exc_traceback, file=f)
            f.write("\n")


def DEBUG_EMBED(user_ns, force_tty=False):
    """
    Embed an interactive IPython shell with `user_ns` as its namespace.

    Returns False without embedding when stdin is not a terminal and
    force_tty is not set.
    """
    if not (force_tty or sys.stdin.isatty()):
        Console(stderr=True).print("[yellow]Cannot embed a shell without an input terminal[/yellow]")
        return False

    nest_asyncio.apply()
    IPython.embed(user_ns=user_ns)
    return True


def DEBUG_INSPECT_SESSION(session, report=None, force_tty=False):
    """
    Drop into IPython with a benchmark session in scope.

    Bound names: `session`, `report`, `store`, `ref`, `acc`, `np`.
    """
    store = session.store
    user_ns = {
        "session": session,
        "report": report if report is not None else session.report,
        "store": store,
        "ref": store.reference_avg if store is not None else None,
        "acc": store.accelerated_avg if store is not None else None,
        "np": np,
    }
    Console().print("[cyan]Inspecting session:[/cyan] session, report, store, ref, acc, np")
    return DEBUG_EMBED(user_ns, force_tty=force_tty)
