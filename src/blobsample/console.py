"""
Azure Blob Storage Sample - Console Helpers

User-facing progress output and the "press any key" pause.
"""

import logging

logger = logging.getLogger(__name__)


def echo(message: str = "") -> None:
    """Print a progress line for the person running the sample."""
    print(message, flush=True)


def wait_for_keypress(enabled: bool = True) -> None:
    """
    Block until Enter is pressed.

    Args:
        enabled: When False the pause is skipped (non-interactive runs).
    """
    if not enabled:
        return
    try:
        input()
    except EOFError:
        # stdin closed, e.g. when piped
        logger.debug("No interactive stdin, continuing without pause")
