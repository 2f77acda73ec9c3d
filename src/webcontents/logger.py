# SPDX-License-Identifier: GPL-3.0-or-later
#
# Copyright (C) 2025 webcontents-client contributors
# This file is part of webcontents-client, distributed under the terms of the GNU GPLv3.
"""
Logging for webcontents.

The package logs through its own loguru `Logger`, separate from the global
`loguru.logger`, so applications can configure both independently. Every
record carries a `request` extra, e.g. `Request #3`, or `-` outside a request.
"""

import sys as _sys
from collections.abc import Mapping
from typing import Literal

from loguru._logger import Core as _Core
from loguru._logger import Logger as _Logger

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {extra[request]} | {message}"
)

REDACTED = "***"

logger = _Logger(
    core=_Core(),
    exception=None,
    depth=0,
    record=False,
    lazy=False,
    colors=False,
    raw=False,
    capture=True,
    patchers=[],
    extra={"request": "-"},
)
logger.add(_sys.stderr, level="WARNING", format=LOG_FORMAT)


def set_logging_level(level: str, sink=_sys.stderr):
    """
    Replace all sinks of the webcontents logger with a single sink.

    Parameters
    ----------
    level
        Minimum severity to emit, e.g. `"DEBUG"`.
    sink
        Any loguru-compatible sink. Defaults to `sys.stderr`.
    """
    logger.remove()
    logger.add(sink, level=level, format=LOG_FORMAT)


def log_to_file(level: str, filename: str):
    """
    Send webcontents logs to a file, appending to it.

    loguru opens the file and closes it when the sink is replaced.
    """
    logger.remove()
    logger.add(filename, level=level, format=LOG_FORMAT, mode="a")


def redact_headers(headers: Mapping[str, str], secret: str) -> dict[str, str]:
    """Copy of `headers` with the value of the `secret` header masked."""
    return {
        name: (REDACTED if name.lower() == secret.lower() else value)
        for name, value in headers.items()
    }


def log_exception(
    exception: Exception,
    severity: Literal[
        "TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"
    ] = "ERROR",
    *,
    request: str | None = None,
) -> None:
    """
    Log an exception as `ClassName: message`.

    Parameters
    ----------
    severity : str, optional
        The severity level to log the message at. Default is 'ERROR'.
    request : str | None, optional
        Log prefix of the request that failed, e.g. `Request #3`.
    """
    bound = logger.bind(request=request) if request else logger

    try:
        logger.level(severity.upper())
    except ValueError:
        bound.error(
            f"Invalid severity level '{severity}' provided. Defaulting to 'ERROR'"
        )
        severity = "ERROR"

    bound.log(severity.upper(), f"{exception.__class__.__name__}: {exception}")
