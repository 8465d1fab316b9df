"""Domain-specific exceptions — framework-independent."""


class DocumentValidationError(Exception):
    """Raised when submitted content or parameters cannot be ingested or queried.

    Covers empty content, malformed structured input, unknown providers,
    unsupported dimensions, and content that produces zero chunks.
    """

    def __init__(self, message: str, suggestion: str | None = None):
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)


class ProviderError(Exception):
    """Raised when an embedding or generation provider returns an error.

    ``status_code`` mirrors the HTTP status of the failed call; transport
    failures that never produced a response use ``0``.
    """

    def __init__(self, provider: str, status_code: int, message: str):
        self.provider = provider
        self.status_code = status_code
        self.message = message
        super().__init__(f"[{provider}] {status_code}: {message}")


class ProviderResponseError(ProviderError):
    """Raised when a provider response does not match the expected contract.

    Signals an incompatible API rather than a transient fault, so it is
    never retried.
    """

    def __init__(self, provider: str, message: str, status_code: int = 200):
        super().__init__(provider, status_code, message)


class VectorStoreError(Exception):
    """Raised when a vector-store operation fails."""

    def __init__(self, operation: str, status_code: int, message: str):
        self.operation = operation
        self.status_code = status_code
        self.message = message
        super().__init__(f"Vector store {operation} failed ({status_code}): {message}")
