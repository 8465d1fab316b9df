"""Embedding gateway — batched, concurrency-bounded embedding with retry.

Flow for ``embed_batch``:
  1. Every text is trimmed to the model's 512-token ceiling.
  2. Texts are grouped into fixed-size batches and queued as
     ``(offset, batch)`` jobs on an ``asyncio.Queue``.
  3. A fixed number of workers drain the queue. Each worker writes its
     vectors into a pre-sized result list at the batch offset, so output
     order never depends on completion order.
  4. Each batch call is retried by tenacity with exponential backoff. A
     batch that exhausts its retries is recorded and the remaining batches
     still run; the first failed batch (by position) is raised once the
     queue drains.
     A ``ProviderResponseError`` is never retried and aborts the whole job.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from rag_lab.application.interfaces.embedding_provider import EmbeddingProvider
from rag_lab.domain.exceptions import ProviderError, ProviderResponseError
from rag_lab.domain.tokens import MAX_EMBEDDING_TOKENS, trim_to_token_limit

logger = logging.getLogger(__name__)

# ── Defaults ────────────────────────────────────────────────────────
DEFAULT_BATCH_SIZE = 16
DEFAULT_MAX_WORKERS = 4
DEFAULT_MAX_RETRIES = 2  # Attempts after the first failure
DEFAULT_RETRY_BASE_DELAY = 1.0  # Seconds; doubles per retry

_BatchJob = tuple[int, list[str]]


class EmbeddingGateway:
    """Application service that turns texts into vectors through any EmbeddingProvider."""

    def __init__(
        self,
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
        max_workers: int = DEFAULT_MAX_WORKERS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        retry_base_delay: float = DEFAULT_RETRY_BASE_DELAY,
        max_input_tokens: int = MAX_EMBEDDING_TOKENS,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        if batch_size < 1:
            raise ValueError(f"batch_size must be ≥ 1, got {batch_size}")
        if max_workers < 1:
            raise ValueError(f"max_workers must be ≥ 1, got {max_workers}")
        self._batch_size = batch_size
        self._max_workers = max_workers
        self._max_retries = max(0, max_retries)
        self._retry_base_delay = retry_base_delay
        self._max_input_tokens = max_input_tokens
        self._sleep = sleep

    async def embed_one(
        self, text: str, dimension: int, provider: EmbeddingProvider
    ) -> list[float]:
        """Embed a single text (a one-element ``embed_batch``)."""
        vectors = await self.embed_batch([text], dimension, provider)
        return vectors[0]

    async def embed_batch(
        self,
        texts: list[str],
        dimension: int,
        provider: EmbeddingProvider,
    ) -> list[list[float]]:
        """Embed *texts* and return one vector per text, in input order.

        Raises:
            ProviderError: If any batch still fails after all retries.
            ProviderResponseError: If the provider breaks the response contract.
        """
        if not texts:
            return []

        resolved_dimension = provider.resolve_dimension(dimension)
        prepared = [trim_to_token_limit(t, self._max_input_tokens) for t in texts]

        queue: asyncio.Queue[_BatchJob] = asyncio.Queue()
        for offset in range(0, len(prepared), self._batch_size):
            queue.put_nowait((offset, prepared[offset : offset + self._batch_size]))

        results: list[list[float] | None] = [None] * len(prepared)
        failures: dict[int, ProviderError] = {}
        worker_count = min(self._max_workers, queue.qsize())
        start = time.monotonic()

        logger.info(
            "Embedding %d texts via %s (%dd) in %d batches, %d workers",
            len(prepared),
            provider.provider_name,
            resolved_dimension,
            queue.qsize(),
            worker_count,
        )

        workers = [
            asyncio.create_task(
                self._worker(queue, results, failures, provider, resolved_dimension)
            )
            for _ in range(worker_count)
        ]
        try:
            await asyncio.gather(*workers)
        except BaseException:
            for task in workers:
                task.cancel()
            await asyncio.gather(*workers, return_exceptions=True)
            raise

        if failures:
            first_offset = min(failures)
            logger.error(
                "Embedding failed for %d of %d batches; first failure at offset %d",
                len(failures),
                -(-len(prepared) // self._batch_size),
                first_offset,
            )
            raise failures[first_offset]

        duration_ms = int((time.monotonic() - start) * 1000)
        logger.info("Embedded %d texts in %dms", len(prepared), duration_ms)
        return [vector for vector in results if vector is not None]

    async def _worker(
        self,
        queue: asyncio.Queue[_BatchJob],
        results: list[list[float] | None],
        failures: dict[int, ProviderError],
        provider: EmbeddingProvider,
        dimension: int,
    ) -> None:
        """Claim batches until the queue is empty; each batch owns a disjoint result slice."""
        while True:
            try:
                offset, batch = queue.get_nowait()
            except asyncio.QueueEmpty:
                return

            try:
                vectors = await self._embed_with_retry(provider, batch, dimension)
            except ProviderResponseError:
                raise
            except ProviderError as exc:
                failures[offset] = exc
                continue
            finally:
                queue.task_done()

            results[offset : offset + len(vectors)] = vectors

    async def _embed_with_retry(
        self,
        provider: EmbeddingProvider,
        batch: list[str],
        dimension: int,
    ) -> list[list[float]]:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._retry_base_delay),
            retry=retry_if_exception(_is_transient),
            before_sleep=_log_retry,
            sleep=self._sleep,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    vectors = await provider.embed(batch, dimension)
                    self._validate(provider, batch, vectors, dimension)
        except ProviderResponseError:
            raise
        except ProviderError as exc:
            logger.error(
                "Embedding batch of %d failed after %d attempts: %s",
                len(batch),
                self._max_retries + 1,
                exc,
            )
            raise

        if attempt.retry_state.attempt_number > 1:
            logger.info(
                "Embedding batch succeeded after %d retries (%s)",
                attempt.retry_state.attempt_number - 1,
                provider.provider_name,
            )
        return vectors

    @staticmethod
    def _validate(
        provider: EmbeddingProvider,
        batch: list[str],
        vectors: list[list[float]],
        dimension: int,
    ) -> None:
        if not isinstance(vectors, list) or len(vectors) != len(batch):
            raise ProviderResponseError(
                provider.provider_name,
                f"Expected {len(batch)} vectors, got "
                f"{len(vectors) if isinstance(vectors, list) else type(vectors).__name__}",
            )
        for i, vector in enumerate(vectors):
            if not isinstance(vector, list) or len(vector) != dimension:
                raise ProviderResponseError(
                    provider.provider_name,
                    f"Vector {i} has length "
                    f"{len(vector) if isinstance(vector, list) else 'n/a'}, expected {dimension}",
                )


def _is_transient(exc: BaseException) -> bool:
    """Provider failures are retried; response-contract violations are not."""
    return isinstance(exc, ProviderError) and not isinstance(exc, ProviderResponseError)


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        "Embedding attempt #%d failed (%s). Retrying in %.1fs...",
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
        retry_state.next_action.sleep if retry_state.next_action else 0.0,
    )
