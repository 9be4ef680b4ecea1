"""
logging.py
==========

Logging helpers that tag each message with the module and function of the
code that emitted it.

Classes:
--------
- TaggedFormatter: Formatter adding a `[module.function]` tag.

Functions:
----------
- setup_tagged_logger: Get a logger wired to the TaggedFormatter.
- configure_global_logging: One level for every logger, existing and future.
"""

import logging
import inspect

_INTERNAL_PREFIXES = ("logging", "update_weights.logging")


class TaggedFormatter(logging.Formatter):
    """
    Formatter that adds `record.tag` naming the outermost non-logging caller.
    """
    def format(self, record):
        caller_frame = None
        for frame_info in inspect.stack():
            module_name = frame_info.frame.f_globals.get("__name__", "__main__")
            if not module_name.startswith(_INTERNAL_PREFIXES):
                caller_frame = frame_info
                break

        if caller_frame:
            module_name = caller_frame.frame.f_globals.get("__name__", "__main__")
            function_name = caller_frame.function
        else:
            module_name = "__unknown__"
            function_name = "__unknown__"

        record.tag = f"[{module_name}.{function_name}]"
        return super().format(record)


def _resolve_level(level):
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        return resolved
    return level


def setup_tagged_logger(name=None, level=None):
    """
    Set up a logger that includes module and function tags in log messages.

    Parameters:
    -----------
    name : str, optional
        Logger name (default: this package's name).
    level : int or str, optional
        Logging level. Defaults to the level set by configure_global_logging,
        then the root logger's level, then WARNING so that library use stays
        quiet unless asked.

    Returns:
    --------
    logging.Logger
        Configured logger instance.
    """
    logger = logging.getLogger(name or "update_weights")

    if level is None:
        if _global_logging_level is not None:
            level = _global_logging_level
        else:
            root_logger = logging.getLogger()
            if root_logger.level != logging.NOTSET:
                level = root_logger.level
            else:
                level = logging.WARNING
    level = _resolve_level(level)

    logger.setLevel(level)

    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = TaggedFormatter("%(asctime)s %(tag)s %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    else:
        for handler in logger.handlers:
            handler.setLevel(level)

    return logger


def configure_global_logging(level=logging.INFO):
    """
    Configure one logging level for the root logger, every existing logger
    and their handlers, and every logger created later by setup_tagged_logger.

    Parameters:
    -----------
    level : int or str
        Logging level (e.g. logging.DEBUG or "debug").
    """
    global _global_logging_level
    level = _resolve_level(level)

    logging.getLogger().setLevel(level)

    for name in list(logging.Logger.manager.loggerDict.keys()):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)

    _global_logging_level = level


# Level applied to loggers created after configure_global_logging()
_global_logging_level = None
