"""Domain entity for text chunks produced during ingestion."""

from dataclasses import dataclass
from enum import Enum


class SourceFormat(str, Enum):
    """Shape of the content a chunk was cut from."""

    TEXT = "text"
    ARRAY = "array"
    JSON = "json"


@dataclass(frozen=True)
class Chunk:
    """A bounded segment of source text with metadata tracing it to its origin.

    ``chunk_index`` and ``total_chunks`` are relative to the item the chunk
    came from: for structured input each array element or mapping value is
    chunked on its own.
    """

    text: str
    chunk_index: int
    total_chunks: int
    source_format: SourceFormat = SourceFormat.TEXT
    source_key: str | None = None  # Set for mapping input
    original_index: int | None = None  # Set for array input
