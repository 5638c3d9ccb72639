"""
Observability for podsecurity.

Provides log formatters and logging configuration.
"""

from podsecurity.observability.logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    configure_logging,
    get_logger,
)

__all__ = [
    "StructuredFormatter",
    "HumanReadableFormatter",
    "configure_logging",
    "get_logger",
]
