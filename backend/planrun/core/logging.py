import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """Print planrun logs (normalizer warnings, saves, rollbacks) to stdout."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stdout,
    )
    logging.getLogger("planrun").setLevel(logging.DEBUG)
