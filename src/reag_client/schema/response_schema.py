"""Default structured output schema and the per-document query result."""

from dataclasses import dataclass
from typing import Generic, Type, TypeVar

from pydantic import BaseModel, Field

from reag_client.documents.document import Document


T = TypeVar("T")


class SourceResponse(BaseModel):
    """Information extracted from a single source for a user prompt.

    The model is asked to either pull out the content relevant to the prompt
    and explain why, or to mark the source as irrelevant.
    """

    content: str = Field(
        description="The content of the source that is relevant to the question. "
        "Leave empty if the source is irrelevant."
    )
    reasoning: str = Field(
        description="Why the content is relevant, or why the source is irrelevant."
    )
    is_irrelevant: bool = Field(
        description="True if the source contains nothing that helps answer the question."
    )


def default_response_schema() -> Type[BaseModel]:
    """Returns the schema used when a client is configured without one."""
    return SourceResponse


@dataclass(frozen=True)
class QueryResult(Generic[T]):
    """The structured payload produced for one document.

    Attributes:
        payload: The object returned by the language model, an instance of the
            configured schema.
        document: The document the payload was generated from. This is the
            same object that was passed to the query.
    """

    payload: T
    document: Document
