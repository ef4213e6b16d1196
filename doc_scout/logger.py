"""Logging setup for **DocScout**.

* One project logger, ``DocScout``; modules import :data:`logger` or call
  ``logging.getLogger("DocScout")``::

      from doc_scout.logger import logger
      logger.info("Crawl started")
* Console output goes to stderr: stdout carries the JSON of reports and chunks.
* Optional rotating log file, re-configurable at runtime via :func:`configure`.
* :func:`page_logger` tags every record with the page being processed.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Final, MutableMapping, Tuple, Union

# --------------------------------------------------------------------------- #
# Constants & basic types                                                     #
# --------------------------------------------------------------------------- #

_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_LOGGER_NAME: Final[str] = "DocScout"

# third-party loggers that flood DEBUG output during a crawl
_NOISY_LOGGERS: Final[Tuple[str, ...]] = ("aiohttp.access", "aiohttp.client", "asyncio", "markdownify")

_LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Helper builders                                                             #
# --------------------------------------------------------------------------- #


def _console_handler(fmt: str) -> logging.StreamHandler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _file_handler(file: Path | str, fmt: str) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=str(file),
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _quiet_third_party(level: int) -> None:
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


class PageLoggerAdapter(logging.LoggerAdapter):
    """Prefixes messages with ``[depth N url]`` and exposes both as record attributes."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        extra = self.extra or {}
        kwargs.setdefault("extra", {}).update(extra)
        return f"[depth {extra.get('depth')} {extra.get('url')}] {msg}", kwargs


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """(Re)configure the project logger.

    Parameters
    ----------
    level
        Numeric or textual logging level (e.g. ``"DEBUG"``).
    log_file
        Path to a rotating logfile. *None* → stderr only.
    log_format
        Format string for :class:`logging.Formatter`.
    replace_handlers
        *True* removes existing handlers, *False* appends the new one(s).
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(level)

    if replace_handlers:
        for handler in list(lg.handlers):
            lg.removeHandler(handler)
            handler.close()

    lg.addHandler(_console_handler(log_format))

    if log_file is not None:
        lg.addHandler(_file_handler(log_file, log_format))

    lg.propagate = False
    _quiet_third_party(lg.level)
    return lg


def init_logging(
    level: _LevelT = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Shortcut used by the CLI: replace handlers and apply *level*/*log_file*."""
    return configure(level=level, log_file=log_file, log_format=log_format, replace_handlers=True)


def page_logger(url: str, depth: int) -> PageLoggerAdapter:
    """Logger for one crawled page."""
    return PageLoggerAdapter(logging.getLogger(_LOGGER_NAME), {"url": url, "depth": depth})


# --------------------------------------------------------------------------- #
# Ready‑to‑use instance                                                       #
# --------------------------------------------------------------------------- #

logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging", "page_logger", "PageLoggerAdapter"]
