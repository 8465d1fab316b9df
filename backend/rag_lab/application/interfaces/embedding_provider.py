"""Abstract interface (port) for embedding generation.

Providers come in two variants, chosen once when the provider is built:

* ``FixedDimensionEmbeddingProvider`` — always returns its native vector
  size and ignores the requested dimension.
* ``ConfigurableDimensionEmbeddingProvider`` — serves any dimension up to
  its native size (matryoshka-style truncation on the server).
"""

from abc import ABC, abstractmethod
from enum import Enum

from rag_lab.domain.exceptions import DocumentValidationError


class DimensionMode(str, Enum):
    FIXED = "fixed"
    CONFIGURABLE = "configurable"


class EmbeddingProvider(ABC):
    """Port for generating text embeddings — implemented in the infrastructure layer."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Unique name used in collection identities (e.g. 'surus', 'openai')."""
        ...

    @property
    @abstractmethod
    def dimension_mode(self) -> DimensionMode:
        ...

    @abstractmethod
    def resolve_dimension(self, requested: int | None) -> int:
        """Return the vector size this provider will actually produce for *requested*."""
        ...

    @abstractmethod
    async def embed(self, texts: list[str], dimension: int) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Args:
            texts: Text strings to embed.
            dimension: Resolved vector size (see ``resolve_dimension``).

        Returns:
            One embedding vector per input text, in input order.

        Raises:
            ProviderError: If the provider returns a non-success status.
            ProviderResponseError: If the response shape is not recognized.
        """
        ...


class FixedDimensionEmbeddingProvider(EmbeddingProvider):
    """Provider that always returns vectors of its native size."""

    @property
    def dimension_mode(self) -> DimensionMode:
        return DimensionMode.FIXED

    @property
    @abstractmethod
    def native_dimension(self) -> int:
        ...

    def resolve_dimension(self, requested: int | None) -> int:
        return self.native_dimension


class ConfigurableDimensionEmbeddingProvider(EmbeddingProvider):
    """Provider that truncates its native representation to a requested size."""

    @property
    def dimension_mode(self) -> DimensionMode:
        return DimensionMode.CONFIGURABLE

    @property
    @abstractmethod
    def default_dimension(self) -> int:
        ...

    @property
    @abstractmethod
    def max_dimension(self) -> int:
        ...

    def resolve_dimension(self, requested: int | None) -> int:
        if requested is None:
            return self.default_dimension
        if not 1 <= requested <= self.max_dimension:
            raise DocumentValidationError(
                f"Dimension {requested} is not supported by '{self.provider_name}' "
                f"(expected 1–{self.max_dimension})"
            )
        return requested
