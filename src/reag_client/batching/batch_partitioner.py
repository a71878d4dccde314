"""Splits a document sequence into contiguous, fixed-size batches."""

from typing import List, Sequence, TypeVar


T = TypeVar("T")


def partition(documents: Sequence[T], batch_size: int) -> List[List[T]]:
    """Partitions documents into ``ceil(len(documents) / batch_size)`` batches.

    Batch ``i`` holds the documents at positions
    ``[i * batch_size, (i + 1) * batch_size)``. Order is preserved and no
    document is duplicated or dropped, so flattening the batches reproduces
    the input.

    Args:
        documents: The documents to partition.
        batch_size: Maximum number of documents per batch.

    Returns:
        The list of batches. Empty input yields no batches.

    Raises:
        ValueError: If batch_size is not a positive integer.
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be a positive integer, got {batch_size}.")

    return [
        list(documents[i : i + batch_size])
        for i in range(0, len(documents), batch_size)
    ]
