"""Document: a named unit of text content plus optional metadata."""

from typing import Dict, Optional, Union

from langchain_core.documents import Document as LangChainDocument
from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr


MetadataValue = Union[StrictStr, StrictInt, StrictFloat]


class Document(BaseModel):
    """A named source document that a query is run against.

    Documents are immutable inputs owned by the caller. The client only reads
    them and attaches the same object to each query result, so callers can
    correlate outputs with inputs by identity.

    Attributes:
        name: Human-readable name of the source (file name, URL, title).
        content: Raw text content passed to the language model.
        metadata: Optional mapping of metadata keys to string or numeric values
            used for filtering. Booleans are rejected. ``None`` means the document
            has no metadata.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    content: str
    metadata: Optional[Dict[str, MetadataValue]] = None

    @classmethod
    def from_langchain(
        cls, document: LangChainDocument, name_key: str = "source"
    ) -> "Document":
        """Builds a Document from a LangChain Document.

        The name is taken from ``metadata[name_key]``, falling back to
        ``metadata["name"]`` and finally to an empty string. Metadata values
        that are not strings or numbers (lists, dicts, None) are dropped, since
        they cannot take part in metadata filtering.

        Args:
            document: A LangChain Document, e.g. produced by a retriever.
            name_key: Metadata key holding the document name.

        Returns:
            The converted Document. ``metadata`` is None if nothing usable was
            left after dropping unsupported values.
        """
        source_metadata = document.metadata or {}
        name = source_metadata.get(name_key, source_metadata.get("name", ""))

        metadata: Dict[str, MetadataValue] = {}
        for key, value in source_metadata.items():
            if isinstance(value, bool):
                continue
            if isinstance(value, (str, int, float)):
                metadata[key] = value

        return cls(
            name=str(name),
            content=document.page_content,
            metadata=metadata or None,
        )

    def to_langchain(self) -> LangChainDocument:
        """Converts the Document into a LangChain Document.

        The name is stored under the ``name`` metadata key.
        """
        metadata = dict(self.metadata or {})
        metadata.setdefault("name", self.name)
        return LangChainDocument(page_content=self.content, metadata=metadata)
