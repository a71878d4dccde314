"""Exceptions raised by the ReAG client."""


class ReagError(Exception):
    """Base class for all errors raised by the ReAG client."""


class FilterError(ReagError, ValueError):
    """A metadata filter could not be applied to a metadata value.

    Only raised when the filter engine runs in strict mode. In the default
    lenient mode the same combinations are treated as "no match".
    """


class QueryError(ReagError):
    """A query failed as a whole.

    Wraps the first underlying failure (generation error, timeout, strict
    filter error). The original exception is available as ``__cause__``.
    """
