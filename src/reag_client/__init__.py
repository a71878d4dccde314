"""ReAG Client - Reasoning-augmented generation over document collections.

This package filters documents by metadata, runs one structured-output
language model call per document, and collects the per-document results in
input order.
"""

from reag_client.client import ClientConfiguration, ReagClient
from reag_client.documents import Document
from reag_client.exceptions import FilterError, QueryError, ReagError
from reag_client.metadata_filter import (
    FilterOperator,
    MetadataFilterEngine,
    MetaDataFilter,
)
from reag_client.schema import QueryResult, SourceResponse, default_response_schema


__all__ = [
    "ClientConfiguration",
    "Document",
    "FilterError",
    "FilterOperator",
    "MetaDataFilter",
    "MetadataFilterEngine",
    "QueryError",
    "QueryResult",
    "ReagClient",
    "ReagError",
    "SourceResponse",
    "default_response_schema",
]
