import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """Configure the root logger for the CLI, API and UI entry points."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )
