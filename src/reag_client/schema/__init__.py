"""Structured output schemas and query result types."""

from reag_client.schema.response_schema import (
    QueryResult,
    SourceResponse,
    default_response_schema,
)


__all__ = [
    "QueryResult",
    "SourceResponse",
    "default_response_schema",
]
