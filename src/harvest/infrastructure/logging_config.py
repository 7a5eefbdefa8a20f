"""Centralized logging configuration.

Called once by the CLI entry point. Library modules only ever do
``logging.getLogger(__name__)``.
"""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging(level: str = "WARNING") -> None:
    """Configure the root logger to write to stderr.

    Output goes to stderr so it never mixes with command output on stdout.
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
        force=True,
    )

    # Reduce verbosity from the HTTP stack
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
