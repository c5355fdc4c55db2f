"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Apply the configured log level to the root logger once per process."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("paydesk").setLevel(level.upper())
    # boto3 is chatty at INFO
    logging.getLogger("botocore").setLevel(logging.WARNING)
