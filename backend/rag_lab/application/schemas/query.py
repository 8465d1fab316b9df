"""Pydantic schemas for question answering and RAG chat."""

from typing import Literal

from pydantic import BaseModel, Field


# ── Request Schemas ──────────────────────────────────────────────────


class QueryRequest(BaseModel):
    """Request body for a standalone question over the knowledge base."""

    question: str = Field(..., min_length=1, description="Natural-language question")
    similarity_threshold: float | None = Field(
        default=None, ge=-1.0, le=1.0, description="Defaults to SIMILARITY_THRESHOLD"
    )
    max_chunks: int | None = Field(default=None, ge=1, le=100, description="Defaults to MAX_CHUNKS")


class ConversationMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str = ""


class ChatRequest(BaseModel):
    """Request body for the next turn of a RAG conversation."""

    message: str = Field(..., min_length=1, description="The new user message")
    conversation: list[ConversationMessage] = Field(default_factory=list)
    similarity_threshold: float | None = Field(
        default=None, ge=-1.0, le=1.0, description="Defaults to SIMILARITY_THRESHOLD"
    )
    max_chunks: int | None = Field(default=None, ge=1, le=100, description="Defaults to MAX_CHUNKS")


# ── Response Schemas ─────────────────────────────────────────────────


class SourceHit(BaseModel):
    """One retrieved chunk the answer was grounded on."""

    text: str
    score: float
    collection: str
    provider: str
    dimension: int


class TokenUsageResponse(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class RagAnswerResponse(BaseModel):
    """Generated answer, retrieval status and the sources it used."""

    answer: str
    status: str
    model: str | None = None
    sources: list[SourceHit] = []
    collections_searched: list[str] = []
    usage: TokenUsageResponse = Field(default_factory=TokenUsageResponse)
