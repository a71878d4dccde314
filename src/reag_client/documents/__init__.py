"""Documents for the ReAG client.

This package provides the document model that queries operate on and the
formatter that renders a document into the per-call system prompt.
"""

from reag_client.documents.document import Document
from reag_client.documents.document_formatter import (
    compose_system_prompt,
    format_document,
)


__all__ = [
    "Document",
    "compose_system_prompt",
    "format_document",
]
