"""RAG chat service — retrieval-grounded answers, single-shot or with memory.

This service is provider-agnostic: it receives a ChatProvider and a
RetrievalService via dependency injection.
"""

import logging
import time
from dataclasses import dataclass, field

from rag_lab.application.interfaces.chat_provider import ChatProvider
from rag_lab.application.services.prompt_builder import (
    DEFAULT_MAX_MEMORY_TOKENS,
    build_prompt,
)
from rag_lab.application.services.retrieval_service import RetrievalService
from rag_lab.domain.entities import (
    ChatMessage,
    RetrievalResult,
    RetrievalStatus,
    TokenUsage,
)
from rag_lab.domain.exceptions import ProviderError
from rag_lab.infrastructure.logging.colored_logger import PipelineLogger, PipelineStage

logger = logging.getLogger(__name__)
plog = PipelineLogger("RagChatService")

NO_COLLECTIONS_MESSAGE = "No document collections found. Please add some documents first."
NO_RELEVANT_MESSAGE = (
    "I couldn't find any relevant information in the knowledge base to answer your question."
)

ANSWER_SYSTEM_PROMPT = """\
You are a helpful assistant backed by several embedding models.
Answer questions using only the context retrieved from documents that were
processed with different embedding providers and dimensions.
If the context does not contain enough information to answer, say so.
Be brief and precise."""

CHAT_SYSTEM_PROMPT = (
    "You are a helpful assistant. Answer questions using only the provided "
    "context. If you don't know the answer, say so."
)


@dataclass
class RagAnswer:
    """Generated answer plus the retrieval outcome it was grounded on."""

    content: str
    retrieval: RetrievalResult
    model: str | None = None
    usage: TokenUsage = field(default_factory=TokenUsage)

    @property
    def status(self) -> RetrievalStatus:
        return self.retrieval.status


class RagChatService:
    """Application service — retrieve context, assemble the prompt, generate."""

    def __init__(
        self,
        retrieval: RetrievalService,
        chat_provider: ChatProvider,
        *,
        model: str,
        max_output_tokens: int = 500,
        max_memory_tokens: int = DEFAULT_MAX_MEMORY_TOKENS,
    ):
        self._retrieval = retrieval
        self._chat_provider = chat_provider
        self._model = model
        self._max_output_tokens = max_output_tokens
        self._max_memory_tokens = max_memory_tokens

    async def answer(
        self,
        question: str,
        *,
        similarity_threshold: float,
        max_chunks: int,
    ) -> RagAnswer:
        """Answer a standalone question from retrieved context."""
        retrieval = await self._retrieval.retrieve(question, similarity_threshold, max_chunks)
        empty = self._empty_answer(retrieval)
        if empty is not None:
            return empty

        messages = [
            ChatMessage(role="system", content=ANSWER_SYSTEM_PROMPT),
            ChatMessage(
                role="user",
                content=f"Context:\n{retrieval.context}\n\nQuestion: {question}\n\nAnswer:",
            ),
        ]
        return await self._generate(messages, retrieval)

    async def chat(
        self,
        conversation: list[ChatMessage],
        new_message: str,
        *,
        similarity_threshold: float,
        max_chunks: int,
    ) -> RagAnswer:
        """Answer the next turn of a conversation, keeping as much memory as fits."""
        retrieval = await self._retrieval.retrieve(new_message, similarity_threshold, max_chunks)
        empty = self._empty_answer(retrieval)
        if empty is not None:
            return empty

        memory = [m for m in conversation if m.role in ("user", "assistant")]
        messages = build_prompt(
            CHAT_SYSTEM_PROMPT,
            memory,
            retrieval.context,
            new_message,
            max_memory_tokens=self._max_memory_tokens,
        )
        return await self._generate(messages, retrieval)

    @staticmethod
    def _empty_answer(retrieval: RetrievalResult) -> RagAnswer | None:
        if retrieval.status is RetrievalStatus.NO_COLLECTIONS:
            return RagAnswer(content=NO_COLLECTIONS_MESSAGE, retrieval=retrieval)
        if retrieval.status is RetrievalStatus.NO_RELEVANT_HITS:
            return RagAnswer(content=NO_RELEVANT_MESSAGE, retrieval=retrieval)
        return None

    async def _generate(
        self, messages: list[ChatMessage], retrieval: RetrievalResult
    ) -> RagAnswer:
        start = time.monotonic()
        plog.step_start(
            PipelineStage.GENERATE,
            f"Generating with {len(retrieval.hits)} context chunks",
            model=self._model,
            messages=len(messages),
        )
        try:
            result = await self._chat_provider.complete(
                messages=messages,
                model=self._model,
                max_tokens=self._max_output_tokens,
            )
        except ProviderError as e:
            plog.step_error(PipelineStage.GENERATE, "Generation failed", error=e)
            raise

        duration_ms = int((time.monotonic() - start) * 1000)
        plog.step_complete(
            PipelineStage.GENERATE,
            f"Answer ready in {duration_ms}ms",
            total_tokens=result.usage.total_tokens,
        )
        return RagAnswer(
            content=result.content,
            retrieval=retrieval,
            model=result.model,
            usage=result.usage,
        )
