"""ReagClient: runs a prompt against every matching document with a language model.

For each query the client:

- Filters the candidate documents by metadata (MetadataFilterEngine).
- Partitions the survivors into batches of ``batch_size`` documents.
- Issues one structured-output call per document. The system message is the
  base system prompt followed by the formatted document; the human message is
  the caller's prompt.
- Gathers all calls and returns one QueryResult per document, in the order of
  the filtered documents.

Concurrency is bounded by a semaphore shared by all batches, sized by
``max_concurrency`` (``batch_size`` when unset). Any failing call aborts the
whole query: pending calls are cancelled and a single QueryError is raised.
"""

import asyncio
import copy
import hashlib
import json
import logging
from asyncio import gather
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Type, Union

from cachetools import TTLCache
from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel
from tqdm import tqdm

from reag_client.batching import partition
from reag_client.documents import Document, compose_system_prompt
from reag_client.exceptions import QueryError
from reag_client.metadata_filter import MetadataFilterEngine
from reag_client.metadata_filter.metadata_filter import FilterLike
from reag_client.schema import QueryResult, default_response_schema


logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 20

_MISSING = object()


@dataclass(frozen=True)
class ClientConfiguration:
    """Configuration for the ReagClient.

    Built once and shared read-only by every call the client makes.

    Attributes:
        model: A LangChain chat model that supports ``with_structured_output``.
        system: Base system prompt. The formatted document is appended to it.
        batch_size: Number of documents per batch. Also the default bound on
            concurrent generation calls.
        schema: Structured output schema, a Pydantic model class or a JSON
            schema dict. Defaults to SourceResponse.
        max_concurrency: Maximum number of generation calls in flight at once.
            Falls back to ``batch_size`` when None.
        timeout: Seconds the whole query may take before it is cancelled.
            None disables the timeout.
        strict_filters: Raise on metadata filters that cannot be applied
            instead of treating them as no match.
        cache_size: Maximum number of cached generation results. 0 disables
            the cache.
        cache_ttl: Seconds a cached generation result stays valid.
        show_progress: Display a tqdm progress bar over completed documents.

    Example:
        config = ClientConfiguration(model=ChatGroq(model="llama-3.3-70b-versatile"),
                                     system="You are a research assistant.")
        client = ReagClient(config)
    """

    model: BaseChatModel
    system: str
    batch_size: int = DEFAULT_BATCH_SIZE
    schema: Union[Type[BaseModel], Dict[str, Any]] = field(
        default_factory=default_response_schema
    )
    max_concurrency: Optional[int] = None
    timeout: Optional[float] = None
    strict_filters: bool = False
    cache_size: int = 0
    cache_ttl: float = 3600
    show_progress: bool = False

    def __post_init__(self) -> None:
        if self.batch_size <= 0:
            raise ValueError(
                f"batch_size must be a positive integer, got {self.batch_size}."
            )
        if self.max_concurrency is not None and self.max_concurrency <= 0:
            raise ValueError(
                f"max_concurrency must be a positive integer, got {self.max_concurrency}."
            )
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got {self.timeout}.")
        if self.cache_size < 0:
            raise ValueError(f"cache_size must not be negative, got {self.cache_size}.")

    @property
    def concurrency_limit(self) -> int:
        """Maximum number of generation calls in flight for one query."""
        return self.max_concurrency or self.batch_size


class ReagClient:
    """Queries a language model once per document and aggregates the results.

    Attributes:
        config: The client configuration.
        filter_engine: Engine used to apply metadata filters.
    """

    def __init__(self, config: ClientConfiguration) -> None:
        """Initializes the client and builds the generation chain.

        Args:
            config: Client configuration. The model must support structured
                output for ``config.schema``.
        """
        self.config = config
        self.filter_engine = MetadataFilterEngine(strict=config.strict_filters)

        # Prompt text goes in as variables so braces in documents are kept verbatim.
        prompt = ChatPromptTemplate.from_messages(
            [("system", "{system}"), ("human", "{prompt}")]
        )
        self.chain = prompt | config.model.with_structured_output(config.schema)

        self._cache: Optional[TTLCache[str, Any]] = (
            TTLCache(maxsize=config.cache_size, ttl=config.cache_ttl)
            if config.cache_size
            else None
        )
        self._schema_key = self._describe_schema(config.schema)

    async def query(
        self,
        prompt: str,
        documents: List[Document],
        filter: Optional[Sequence[FilterLike]] = None,
    ) -> List[QueryResult[Any]]:
        """Runs the prompt against every document that passes the filter.

        Args:
            prompt: The user prompt, sent unmodified as the human message.
            documents: Candidate documents.
            filter: Optional metadata filters, all of which a document must
                satisfy. Accepts MetaDataFilter instances or plain dicts.

        Returns:
            One QueryResult per filtered document, in filtered order. An empty
            list if no document passes the filter, without calling the model.

        Raises:
            QueryError: If filtering fails, any generation call fails, or the
                query times out. The cause is chained.
        """
        try:
            return await self._dispatch(prompt, documents, filter)
        except QueryError:
            raise
        except Exception as error:
            logger.error(f"Query failed: {error!r}")
            raise QueryError(f"Query failed: {error}") from error

    def query_sync(
        self,
        prompt: str,
        documents: List[Document],
        filter: Optional[Sequence[FilterLike]] = None,
    ) -> List[QueryResult[Any]]:
        """Runs ``query`` in a new event loop. Not usable inside a running loop."""
        return asyncio.run(self.query(prompt, documents, filter=filter))

    async def _dispatch(
        self,
        prompt: str,
        documents: List[Document],
        filters: Optional[Sequence[FilterLike]],
    ) -> List[QueryResult[Any]]:
        filtered = self.filter_engine.filter(documents, filters)
        if not filtered:
            logger.info("No documents matched the metadata filter")
            return []

        batches = partition(filtered, self.config.batch_size)
        logger.info(
            f"Querying {len(filtered)} documents in {len(batches)} batches "
            f"(concurrency limit {self.config.concurrency_limit})"
        )

        semaphore = asyncio.Semaphore(self.config.concurrency_limit)
        progress = tqdm(
            total=len(filtered),
            desc="Querying documents",
            disable=not self.config.show_progress,
        )

        # Tasks are created in filtered order; gather() returns results in that
        # order regardless of completion order.
        tasks = [
            asyncio.ensure_future(self._generate(prompt, document, semaphore, progress))
            for batch in batches
            for document in batch
        ]
        aggregate = gather(*tasks)
        try:
            done, _ = await asyncio.wait({aggregate}, timeout=self.config.timeout)
            if not done:
                logger.error(f"Query timed out after {self.config.timeout} seconds")
                raise QueryError(
                    f"Query failed: timed out after {self.config.timeout} seconds"
                ) from TimeoutError(
                    f"deadline of {self.config.timeout} seconds expired"
                )
            # Errors raised by the calls themselves, including their own
            # TimeoutErrors, surface here and are wrapped by query().
            payloads = aggregate.result()
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            if not aggregate.done():
                aggregate.cancel()
            progress.close()

        logger.info(f"Query completed for {len(payloads)} documents")
        return [
            QueryResult(payload=payload, document=document)
            for payload, document in zip(payloads, filtered)
        ]

    async def _generate(
        self,
        prompt: str,
        document: Document,
        semaphore: asyncio.Semaphore,
        progress: tqdm,
    ) -> Any:
        """Runs the structured-output chain for a single document."""
        system = compose_system_prompt(self.config.system, document)

        cache_key = None
        if self._cache is not None:
            cache_key = self._make_cache_key(system, prompt)
            cached = self._cache.get(cache_key, _MISSING)
            if cached is not _MISSING:
                logger.debug(f"Cache hit for document '{document.name}'")
                progress.update(1)
                return self._copy_payload(cached)

        async with semaphore:
            payload = await self.chain.ainvoke({"system": system, "prompt": prompt})

        if cache_key is not None:
            self._cache[cache_key] = self._copy_payload(payload)  # type: ignore[index]
        progress.update(1)
        return payload

    def _make_cache_key(self, system: str, prompt: str) -> str:
        """Hashes the system prompt, user prompt and schema into a cache key."""
        digest = hashlib.sha256()
        for part in (system, prompt, self._schema_key):
            digest.update(part.encode())
            digest.update(b"\x00")
        return digest.hexdigest()

    @staticmethod
    def _copy_payload(payload: Any) -> Any:
        """Deep-copies a payload so cached entries are never shared with callers."""
        if isinstance(payload, BaseModel):
            return payload.model_copy(deep=True)
        return copy.deepcopy(payload)

    @staticmethod
    def _describe_schema(schema: Union[Type[BaseModel], Dict[str, Any]]) -> str:
        if isinstance(schema, dict):
            return json.dumps(schema, sort_keys=True)
        return f"{schema.__module__}.{schema.__qualname__}"
