"""Prompt assembly with token-bounded conversation memory."""

from rag_lab.domain.entities import ChatMessage
from rag_lab.domain.tokens import estimate_tokens

DEFAULT_MAX_MEMORY_TOKENS = 1000


def trim_memory(memory: list[ChatMessage], max_memory_tokens: int) -> list[ChatMessage]:
    """Keep the most recent messages whose combined estimate fits the budget.

    Walks newest to oldest and stops at the first message that would push
    the total over the budget. The result is in chronological order.
    """
    kept: list[ChatMessage] = []
    total = 0
    for message in reversed(memory):
        tokens = estimate_tokens(message.content)
        if total + tokens > max_memory_tokens:
            break
        kept.append(message)
        total += tokens
    kept.reverse()
    return kept


def build_prompt(
    system_prompt: str,
    memory: list[ChatMessage],
    context: str,
    user_message: str,
    max_memory_tokens: int = DEFAULT_MAX_MEMORY_TOKENS,
) -> list[ChatMessage]:
    """Build ``[system, *memory, system "Context:\\n…", user]``.

    Only the memory is trimmed; the context and the user message are passed
    through untouched. Pure: the input list is not modified.
    """
    return [
        ChatMessage(role="system", content=system_prompt),
        *trim_memory(memory, max_memory_tokens),
        ChatMessage(role="system", content=f"Context:\n{context}"),
        ChatMessage(role="user", content=user_message),
    ]
