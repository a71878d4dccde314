"""MetadataFilterEngine: selects documents whose metadata satisfies a filter set."""

import logging
import operator
import re
from enum import Enum
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Union

from pydantic import BaseModel

from reag_client.documents.document import Document, MetadataValue
from reag_client.exceptions import FilterError


logger = logging.getLogger(__name__)


class FilterOperator(str, Enum):
    """Comparison applied between a metadata value and a filter value.

    CONTAINS, STARTS_WITH, ENDS_WITH and REGEX only apply when both values are
    strings. The remaining operators use native Python equality and ordering,
    so numbers compare numerically and strings lexicographically.
    """

    EQUALS = "equals"
    CONTAINS = "contains"
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    NOT_EQUALS = "notEquals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    GREATER_THAN_OR_EQUAL = "greaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "lessThanOrEqual"
    REGEX = "regex"


class MetaDataFilter(BaseModel):
    """A single predicate over one metadata key.

    Attributes:
        key: Metadata key to look up on each document.
        value: Value the metadata value is compared against.
        operator: Comparison to apply. Defaults to EQUALS.
    """

    key: str
    value: MetadataValue
    operator: FilterOperator = FilterOperator.EQUALS


FilterLike = Union[MetaDataFilter, Mapping[str, Any]]

_STRING_OPERATORS: Dict[FilterOperator, Callable[[str, str], bool]] = {
    FilterOperator.CONTAINS: lambda actual, expected: expected in actual,
    FilterOperator.STARTS_WITH: str.startswith,
    FilterOperator.ENDS_WITH: str.endswith,
    FilterOperator.REGEX: lambda actual, expected: (
        re.search(expected, actual) is not None
    ),
}

_COMPARISON_OPERATORS: Dict[FilterOperator, Callable[[Any, Any], bool]] = {
    FilterOperator.EQUALS: operator.eq,
    FilterOperator.NOT_EQUALS: operator.ne,
    FilterOperator.GREATER_THAN: operator.gt,
    FilterOperator.LESS_THAN: operator.lt,
    FilterOperator.GREATER_THAN_OR_EQUAL: operator.ge,
    FilterOperator.LESS_THAN_OR_EQUAL: operator.le,
}


class MetadataFilterEngine:
    """Evaluates a conjunction of metadata filters against documents.

    A document survives a filter set only if it satisfies every filter. There
    is no OR or NOT grouping. A filter fails when the document lacks the key
    or holds an empty value there (``""`` and ``0`` count as empty).

    Operators that cannot be applied to the values involved (``contains`` on
    numbers, ordering a string against a number, an invalid regex pattern)
    count as no match. With ``strict=True`` they raise FilterError instead,
    which surfaces misconfigured filters.

    Attributes:
        strict: Whether inapplicable operator/value combinations raise.
    """

    def __init__(self, strict: bool = False) -> None:
        """Initializes the filter engine.

        Args:
            strict: Raise FilterError on inapplicable operator/value
                combinations instead of treating them as no match.
        """
        self.strict = strict

    def filter(
        self,
        documents: List[Document],
        predicates: Optional[Sequence[FilterLike]] = None,
    ) -> List[Document]:
        """Returns the documents that satisfy every predicate, in input order.

        Args:
            documents: Candidate documents. They are never modified.
            predicates: Filters as MetaDataFilter instances or plain dicts with
                ``key``, ``value`` and optional ``operator``.

        Returns:
            The input list itself when there are no predicates, otherwise a new
            list with the surviving documents.

        Raises:
            pydantic.ValidationError: If a dict predicate is malformed.
            FilterError: In strict mode, if a predicate cannot be applied.
        """
        if not predicates:
            return documents

        filters = [self._coerce(predicate) for predicate in predicates]
        survivors = [
            document
            for document in documents
            if all(self.matches(document, predicate) for predicate in filters)
        ]
        logger.debug(
            f"Metadata filter kept {len(survivors)} of {len(documents)} documents"
        )
        return survivors

    def matches(self, document: Document, predicate: MetaDataFilter) -> bool:
        """Checks whether a single document satisfies a single predicate."""
        actual = (document.metadata or {}).get(predicate.key)
        if not actual:
            return False

        expected = predicate.value
        if predicate.operator in _STRING_OPERATORS:
            if not (isinstance(actual, str) and isinstance(expected, str)):
                return self._no_match(predicate, actual)
            try:
                return _STRING_OPERATORS[predicate.operator](actual, expected)
            except re.error as error:
                return self._no_match(predicate, actual, error)

        try:
            return bool(_COMPARISON_OPERATORS[predicate.operator](actual, expected))
        except TypeError as error:
            return self._no_match(predicate, actual, error)

    def _no_match(
        self,
        predicate: MetaDataFilter,
        actual: Any,
        error: Optional[Exception] = None,
    ) -> bool:
        if self.strict:
            raise FilterError(
                f"Operator '{predicate.operator.value}' cannot be applied to "
                f"metadata key '{predicate.key}' with value {actual!r} and "
                f"filter value {predicate.value!r}."
            ) from error
        return False

    @staticmethod
    def _coerce(predicate: FilterLike) -> MetaDataFilter:
        if isinstance(predicate, MetaDataFilter):
            return predicate
        return MetaDataFilter.model_validate(predicate)
