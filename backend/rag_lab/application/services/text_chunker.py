"""Text chunker — splits content into bounded, overlap-preserving segments.

Sizes are measured with the 4-chars-per-token estimate. Plain text, an
ordered list of strings, or a string mapping are accepted; structured
items are chunked independently and tagged with their origin.
"""

import logging
import re
from collections.abc import Mapping, Sequence

from rag_lab.domain.entities import Chunk, SourceFormat
from rag_lab.domain.exceptions import DocumentValidationError
from rag_lab.domain.tokens import (
    MAX_EMBEDDING_TOKENS,
    estimate_tokens,
    trim_to_token_limit,
)

logger = logging.getLogger(__name__)

ChunkableContent = str | Sequence[str] | Mapping[str, str]

# A sentence is a run of non-terminal characters plus its terminal punctuation.
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]*")
_TERMINAL_RE = re.compile(r"[.!?]")

_SHORT_TEXT_CHARS = 50
_MIN_CHUNK_TOKENS = 5  # Chunks at or below this size are noise
_WORDS_PER_OVERLAP_TOKEN = 4


class TextChunker:
    """Greedy sentence packer with word-level overlap between consecutive chunks."""

    def __init__(
        self,
        *,
        hard_token_limit: int = MAX_EMBEDDING_TOKENS,
        min_chunk_tokens: int = _MIN_CHUNK_TOKENS,
    ):
        self._hard_token_limit = hard_token_limit
        self._min_chunk_tokens = min_chunk_tokens

    def chunk(
        self,
        content: ChunkableContent,
        max_tokens: int,
        overlap_tokens: int = 0,
    ) -> list[Chunk]:
        """Chunk plain or structured content, preserving input order.

        Raises:
            DocumentValidationError: If structured input holds non-string items
                or the budgets are invalid.
        """
        if max_tokens <= 0:
            raise DocumentValidationError(f"max_tokens must be positive, got {max_tokens}")
        if overlap_tokens < 0:
            raise DocumentValidationError(
                f"overlap_tokens must not be negative, got {overlap_tokens}"
            )

        if isinstance(content, str):
            parts = self.split_text(content, max_tokens, overlap_tokens)
            return [
                Chunk(text=part, chunk_index=i, total_chunks=len(parts))
                for i, part in enumerate(parts)
            ]

        if isinstance(content, Mapping):
            chunks: list[Chunk] = []
            for key, value in content.items():
                if not isinstance(value, str):
                    raise DocumentValidationError(
                        f"Value for key '{key}' must be a string, got {type(value).__name__}"
                    )
                parts = self.split_text(value, max_tokens, overlap_tokens)
                chunks.extend(
                    Chunk(
                        text=part,
                        chunk_index=i,
                        total_chunks=len(parts),
                        source_format=SourceFormat.JSON,
                        source_key=str(key),
                    )
                    for i, part in enumerate(parts)
                )
            return chunks

        if isinstance(content, Sequence):
            chunks = []
            for index, item in enumerate(content):
                if not isinstance(item, str):
                    raise DocumentValidationError(
                        f"Item {index} must be a string, got {type(item).__name__}"
                    )
                parts = self.split_text(item, max_tokens, overlap_tokens)
                chunks.extend(
                    Chunk(
                        text=part,
                        chunk_index=i,
                        total_chunks=len(parts),
                        source_format=SourceFormat.ARRAY,
                        original_index=index,
                    )
                    for i, part in enumerate(parts)
                )
            return chunks

        raise DocumentValidationError(
            f"Unsupported content type: {type(content).__name__}"
        )

    def split_text(self, text: str, max_tokens: int, overlap_tokens: int = 0) -> list[str]:
        """Split a single text into chunk strings.

        The budget is capped at the hard ceiling, so no chunk ever needs to be
        cut after packing. A carried overlap that would push the seeded chunk
        over budget is dropped for that chunk.
        """
        text = text.strip()
        if not text:
            return []

        budget = min(max_tokens, self._hard_token_limit)
        if estimate_tokens(text) <= budget:
            return [text]

        if len(text) <= _SHORT_TEXT_CHARS and not _TERMINAL_RE.search(text):
            return [text]

        pieces: list[str] = []
        for match in _SENTENCE_RE.finditer(text):
            sentence = match.group(0).strip()
            if sentence:
                pieces.extend(self._split_long_sentence(sentence, budget))

        chunks: list[str] = []
        current = ""
        for piece in pieces:
            candidate = f"{current} {piece}" if current else piece
            if estimate_tokens(candidate) > budget and current:
                chunks.append(current)
                overlap = self._overlap_tail(current, overlap_tokens)
                seeded = f"{overlap} {piece}" if overlap else piece
                current = seeded if estimate_tokens(seeded) <= budget else piece
            else:
                current = candidate
        if current:
            chunks.append(current)

        trimmed = [trim_to_token_limit(c, self._hard_token_limit) for c in chunks]
        kept = [c for c in trimmed if estimate_tokens(c) > self._min_chunk_tokens]

        logger.debug(
            "Split %d chars into %d chunks (%d dropped as noise, max_tokens=%d, overlap=%d)",
            len(text),
            len(kept),
            len(trimmed) - len(kept),
            max_tokens,
            overlap_tokens,
        )
        return kept

    @staticmethod
    def _split_long_sentence(sentence: str, max_tokens: int) -> list[str]:
        """Break a sentence that alone exceeds the budget into word windows."""
        if estimate_tokens(sentence) <= max_tokens:
            return [sentence]

        windows: list[str] = []
        current = ""
        for word in sentence.split():
            candidate = f"{current} {word}" if current else word
            if estimate_tokens(candidate) > max_tokens and current:
                windows.append(current)
                current = word
            else:
                current = candidate
        if current:
            windows.append(current)
        return windows

    @staticmethod
    def _overlap_tail(chunk: str, overlap_tokens: int) -> str:
        """Trailing words carried into the next chunk (about one word per 4 tokens)."""
        word_count = overlap_tokens // _WORDS_PER_OVERLAP_TOKEN
        if word_count <= 0:
            return ""
        return " ".join(chunk.split()[-word_count:])
