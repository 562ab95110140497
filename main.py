"""
Command-line entry point for querying availability against the demo catalog.

Usage:
    Free slots:    python main.py availability <provider_id> <service_id> <YYYY-MM-DD>
    Open dates:    python main.py dates <provider_id> <service_id> <YYYY-MM-DD>
    Console demo:  python main.py console [booking|race|review]
"""

import json
import logging
import sys

from booking_core.config import settings
from booking_core.tools import operations

logger = logging.getLogger(__name__)


def _run_query(command: str, args: list[str]) -> int:
    if len(args) != 3:
        logger.error("%s needs <provider_id> <service_id> <YYYY-MM-DD>", command)
        return 2
    provider_id, service_id, day = args
    if command == "availability":
        result = operations.get_availability(provider_id, service_id, day)
    else:
        result = operations.get_available_dates(provider_id, service_id, day)
    sys.stdout.write(json.dumps(result, indent=2) + "\n")
    return 0 if result["success"] else 1


def _run_console_mode(args: list[str]) -> int:
    from console_demo import ConsoleSession

    ConsoleSession().run_scenario(args[0] if args else "booking")
    return 0


if __name__ == "__main__":
    logger.debug("Starting %s", settings.app_name)
    if len(sys.argv) > 1 and sys.argv[1] in ("availability", "dates"):
        sys.exit(_run_query(sys.argv[1], sys.argv[2:]))
    sys.exit(_run_console_mode(sys.argv[2:] if len(sys.argv) > 1 else []))
