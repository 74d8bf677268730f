"""
Booking engine entry point.

Usage:
    Scripted demo:  python main.py demo <scenario>
    Console mode:   python main.py console
"""

import asyncio
import logging
import sys

from booking_engine.config import settings

logger = logging.getLogger(__name__)


def _run_console_mode() -> None:
    """Start the offline console shell against in-memory stores."""
    from console_demo import ConsoleDemo

    asyncio.run(ConsoleDemo().run())


def _run_demo_mode(scenario: str) -> None:
    from console_demo import ConsoleDemo

    asyncio.run(ConsoleDemo().run_scenario(scenario))


if __name__ == "__main__":
    logger.info("Starting %s", settings.engine_name)
    if len(sys.argv) > 2 and sys.argv[1] == "demo":
        _run_demo_mode(sys.argv[2])
    else:
        _run_console_mode()
