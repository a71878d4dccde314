"""Renders documents into the text block embedded in the per-call system prompt."""

import json

from reag_client.documents.document import Document


SOURCE_HEADER = "\n\n# Available source\n\n"


def format_document(document: Document) -> str:
    """Formats a document as labeled Name, Metadata and Content sections.

    Metadata is serialized as compact JSON in insertion order. A document
    without metadata is rendered with ``null``.

    Example:
        Name: report.pdf
        Metadata: {"year":2023,"lang":"en"}
        Content: Revenue grew by 12% ...
    """
    metadata = (
        json.dumps(document.metadata, separators=(",", ":"), ensure_ascii=False)
        if document.metadata is not None
        else "null"
    )
    return f"Name: {document.name}\nMetadata: {metadata}\nContent: {document.content}"


def compose_system_prompt(system: str, document: Document) -> str:
    """Appends a document's formatted block to the base system prompt."""
    return f"{system}{SOURCE_HEADER}{format_document(document)}"
