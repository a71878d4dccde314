"""Batch partitioning of filtered documents."""

from reag_client.batching.batch_partitioner import partition


__all__ = ["partition"]
