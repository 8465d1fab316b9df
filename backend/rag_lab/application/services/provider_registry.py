"""Registry of embedding providers, keyed by provider name."""

from rag_lab.application.interfaces.embedding_provider import EmbeddingProvider
from rag_lab.domain.exceptions import DocumentValidationError


class EmbeddingProviderRegistry:
    """Resolves the provider named in a request or a collection identity."""

    def __init__(self, providers: list[EmbeddingProvider]):
        self._providers: dict[str, EmbeddingProvider] = {}
        for provider in providers:
            if provider.provider_name in self._providers:
                raise ValueError(f"Duplicate embedding provider '{provider.provider_name}'")
            self._providers[provider.provider_name] = provider

    def get(self, name: str) -> EmbeddingProvider | None:
        return self._providers.get(name)

    def require(self, name: str) -> EmbeddingProvider:
        """Return the named provider or raise a validation error listing the known ones."""
        provider = self._providers.get(name)
        if provider is None:
            known = ", ".join(sorted(self._providers)) or "none"
            raise DocumentValidationError(
                f"Unknown embedding provider '{name}'",
                suggestion=f"Use one of: {known}",
            )
        return provider

    @property
    def names(self) -> list[str]:
        return list(self._providers)
