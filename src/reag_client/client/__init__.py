"""Query client for the ReAG pipeline.

This package provides the client that filters documents by metadata and runs
one structured-output language model call per document.
"""

from reag_client.client.reag_client import (
    DEFAULT_BATCH_SIZE,
    ClientConfiguration,
    ReagClient,
)


__all__ = [
    "DEFAULT_BATCH_SIZE",
    "ClientConfiguration",
    "ReagClient",
]
