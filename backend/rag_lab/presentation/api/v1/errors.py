"""Translate domain exceptions into HTTP errors."""

from fastapi import HTTPException, status

from rag_lab.domain.exceptions import (
    DocumentValidationError,
    ProviderError,
    VectorStoreError,
)


def to_http_exception(error: Exception) -> HTTPException:
    if isinstance(error, DocumentValidationError):
        detail: dict = {"error": error.message}
        if error.suggestion:
            detail["suggestion"] = error.suggestion
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    if isinstance(error, ProviderError):
        return HTTPException(
            status_code=error.status_code if 400 <= error.status_code < 600 else 502,
            detail=f"[{error.provider}] {error.message}",
        )

    if isinstance(error, VectorStoreError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Vector store {error.operation} failed: {error.message}",
        )

    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))
