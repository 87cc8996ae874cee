"""pymon - Linux telemetry sampling with bounded history."""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
