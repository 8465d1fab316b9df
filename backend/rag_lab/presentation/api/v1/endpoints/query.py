"""Question answering and RAG chat endpoints."""

from fastapi import APIRouter, Depends

from rag_lab.application.schemas import (
    ChatRequest,
    QueryRequest,
    RagAnswerResponse,
    SourceHit,
    TokenUsageResponse,
)
from rag_lab.application.services import RagAnswer, RagChatService
from rag_lab.config import Settings, get_settings
from rag_lab.domain.entities import ChatMessage
from rag_lab.domain.exceptions import (
    DocumentValidationError,
    ProviderError,
    VectorStoreError,
)
from rag_lab.infrastructure.dependencies import get_rag_chat_service
from rag_lab.presentation.api.v1.errors import to_http_exception

router = APIRouter(tags=["Query"])


@router.post("/query", response_model=RagAnswerResponse)
async def query(
    request: QueryRequest,
    service: RagChatService = Depends(get_rag_chat_service),
    settings: Settings = Depends(get_settings),
) -> RagAnswerResponse:
    """Answer a standalone question from the stored documents."""
    threshold, max_chunks = _retrieval_knobs(request, settings)
    try:
        answer = await service.answer(
            request.question,
            similarity_threshold=threshold,
            max_chunks=max_chunks,
        )
    except (DocumentValidationError, ProviderError, VectorStoreError) as e:
        raise to_http_exception(e) from e
    return _to_response(answer)


@router.post("/chat", response_model=RagAnswerResponse)
async def chat(
    request: ChatRequest,
    service: RagChatService = Depends(get_rag_chat_service),
    settings: Settings = Depends(get_settings),
) -> RagAnswerResponse:
    """Answer the next conversation turn, using prior turns as memory."""
    conversation = [ChatMessage(role=m.role, content=m.content) for m in request.conversation]
    threshold, max_chunks = _retrieval_knobs(request, settings)
    try:
        answer = await service.chat(
            conversation,
            request.message,
            similarity_threshold=threshold,
            max_chunks=max_chunks,
        )
    except (DocumentValidationError, ProviderError, VectorStoreError) as e:
        raise to_http_exception(e) from e
    return _to_response(answer)


def _retrieval_knobs(request: QueryRequest | ChatRequest, settings: Settings) -> tuple[float, int]:
    """Request values win; omitted ones fall back to the configured defaults."""
    threshold = request.similarity_threshold
    if threshold is None:
        threshold = settings.similarity_threshold
    max_chunks = request.max_chunks
    if max_chunks is None:
        max_chunks = settings.max_chunks
    return threshold, max_chunks


def _to_response(answer: RagAnswer) -> RagAnswerResponse:
    return RagAnswerResponse(
        answer=answer.content,
        status=answer.status.value,
        model=answer.model,
        sources=[
            SourceHit(
                text=hit.text,
                score=hit.score,
                collection=hit.collection.name,
                provider=hit.provider,
                dimension=hit.dimension,
            )
            for hit in answer.retrieval.hits
        ],
        collections_searched=answer.retrieval.collections_searched,
        usage=TokenUsageResponse(
            prompt_tokens=answer.usage.prompt_tokens,
            completion_tokens=answer.usage.completion_tokens,
            total_tokens=answer.usage.total_tokens,
        ),
    )
