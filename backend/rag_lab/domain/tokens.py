"""Token estimation helpers shared by chunking, embedding, and prompt assembly.

Uses a fixed 4-characters-per-token heuristic. It is language-agnostic
and deliberately approximate: no tokenizer is loaded.
"""

import math

CHARS_PER_TOKEN = 4

# Hard ceiling enforced by the backing embedding models.
MAX_EMBEDDING_TOKENS = 512

# A word boundary is only used for trimming if it lies within the last
# 20% of the allowed span; otherwise the text is cut mid-word.
_WORD_BOUNDARY_WINDOW = 0.2


def estimate_tokens(text: str) -> int:
    """Estimate the token count of *text* as ``ceil(len(text) / 4)``."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def trim_to_token_limit(text: str, max_tokens: int = MAX_EMBEDDING_TOKENS) -> str:
    """Trim *text* so that its estimated token count does not exceed *max_tokens*.

    Prefers cutting at the nearest preceding space, as long as that space
    is not further back than 20% of the allowed character span.
    """
    max_chars = max_tokens * CHARS_PER_TOKEN
    if len(text) <= max_chars:
        return text

    cut = text[:max_chars]
    boundary = cut.rfind(" ")
    if boundary >= max_chars * (1 - _WORD_BOUNDARY_WINDOW):
        cut = cut[:boundary]
    return cut.rstrip()
