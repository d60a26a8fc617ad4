"""
Logging configuration for x402_sbc
"""

import logging
import sys


def setup_logging(level: int = logging.INFO) -> None:
    """
    Setup logging configuration for x402_sbc.

    Args:
        level: Logging level (default: INFO)
    """
    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)-8s %(name)s %(filename)s:%(lineno)d %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    package_logger = logging.getLogger("x402_sbc")
    package_logger.setLevel(level)
    # setup_logging may be called more than once (settings reload, tests)
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.addHandler(console_handler)
    package_logger.propagate = False

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)
