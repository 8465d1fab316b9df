"""Colored pipeline logger — ANSI-colored console logging for ingestion and retrieval.

Provides a PipelineLogger with color-coded output per pipeline stage,
making it easy to visually trace a document or query in the terminal.

Color scheme:
    🟢 Green   — Collection routing / upsert
    🟡 Yellow  — Chunking
    🟣 Magenta — Embedding
    🔵 Blue    — Search / merge
    🟠 Cyan    — Generation
    🔴 Red     — Errors
"""

import logging
import time
from contextlib import contextmanager
from typing import Any


# ── ANSI Color Codes ─────────────────────────────────────────────────

class _Colors:
    """ANSI escape codes for terminal colors."""

    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    GRAY = "\033[90m"


# ── Pipeline Stage Definitions ───────────────────────────────────────

class PipelineStage:
    """Predefined pipeline stages with colors and icons."""

    ROUTE = ("ROUTE", _Colors.GREEN, "🗂️")
    CHUNK = ("CHUNK", _Colors.YELLOW, "✂️")
    EMBED = ("EMBED", _Colors.MAGENTA, "🧬")
    UPSERT = ("UPSERT", _Colors.GREEN, "💾")
    SEARCH = ("SEARCH", _Colors.BLUE, "🔎")
    MERGE = ("MERGE", _Colors.BLUE, "🔀")
    GENERATE = ("GENERATE", _Colors.CYAN, "🤖")
    CLEAR = ("CLEAR", _Colors.WHITE, "🧹")
    PIPELINE = ("PIPELINE", _Colors.WHITE, "⚙️")
    COMPLETE = ("COMPLETE", _Colors.GREEN, "✅")


# ── PipelineLogger ───────────────────────────────────────────────────

class PipelineLogger:
    """Color-coded logger for the RAG pipelines.

    Usage:
        log = PipelineLogger("IngestionService")
        log.step_start(PipelineStage.CHUNK, "Chunking 4 210 chars")
        log.detail("budget=256 tokens")
        log.step_complete(PipelineStage.CHUNK, "12 chunks")
    """

    def __init__(self, component_name: str):
        self._logger = logging.getLogger(component_name)

    @staticmethod
    def _format_kwargs(kwargs: dict[str, Any], color: str) -> str:
        if not kwargs:
            return ""
        details = " | ".join(f"{k}={v}" for k, v in kwargs.items())
        return f" {color}({details}){_Colors.RESET}"

    def step_start(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the start of a pipeline step with its stage color."""
        label, color, icon = stage
        formatted = (
            f"{color}{_Colors.BOLD}{icon} [{label}]{_Colors.RESET} "
            f"{color}{message}{_Colors.RESET}"
        )
        self._logger.info(formatted + self._format_kwargs(kwargs, _Colors.GRAY))

    def step_complete(self, stage: tuple[str, str, str], message: str, **kwargs: Any) -> None:
        """Log the successful completion of a pipeline step."""
        label, color, icon = stage
        formatted = (
            f"{color}{icon} [{label}]{_Colors.RESET} "
            f"{_Colors.GREEN}✓ {message}{_Colors.RESET}"
        )
        self._logger.info(formatted + self._format_kwargs(kwargs, _Colors.GRAY))

    def step_error(self, stage: tuple[str, str, str], message: str, error: Exception | None = None) -> None:
        """Log a pipeline step error in red."""
        label, _, _icon = stage
        formatted = (
            f"{_Colors.RED}{_Colors.BOLD}❌ [{label}]{_Colors.RESET} "
            f"{_Colors.RED}{message}{_Colors.RESET}"
        )
        if error:
            formatted += f" {_Colors.DIM}→ {type(error).__name__}: {error}{_Colors.RESET}"
        self._logger.error(formatted)

    def detail(self, message: str, **kwargs: Any) -> None:
        """Log additional detail (gray/dimmed)."""
        formatted = f"   {_Colors.GRAY}├─ {message}{_Colors.RESET}"
        self._logger.info(formatted + self._format_kwargs(kwargs, _Colors.DIM))

    @contextmanager
    def timed_step(self, stage: tuple[str, str, str], message: str, **kwargs: Any):
        """Context manager that logs start/end with elapsed time.

        Usage:
            with log.timed_step(PipelineStage.EMBED, "Embedding 12 chunks"):
                vectors = await gateway.embed_batch(...)
        """
        self.step_start(stage, message, **kwargs)
        start = time.perf_counter()
        try:
            yield
        except Exception as e:
            elapsed = time.perf_counter() - start
            self.step_error(stage, f"{message} — failed after {elapsed:.2f}s", error=e)
            raise
        else:
            elapsed = time.perf_counter() - start
            self.step_complete(stage, f"{message} — {elapsed:.2f}s", **kwargs)
