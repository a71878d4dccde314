"""Metadata filtering for the ReAG client.

This package provides the filter model and the engine that selects documents
whose metadata satisfies every filter in a filter set.
"""

from reag_client.metadata_filter.metadata_filter import (
    FilterOperator,
    MetadataFilterEngine,
    MetaDataFilter,
)


__all__ = [
    "FilterOperator",
    "MetaDataFilter",
    "MetadataFilterEngine",
]
