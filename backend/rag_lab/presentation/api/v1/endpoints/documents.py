"""Document endpoints — ingest, list collections, clear the knowledge base."""

from dataclasses import asdict

from fastapi import APIRouter, Depends, status

from rag_lab.application.schemas import (
    ClearResponse,
    CollectionResponse,
    IngestRequest,
    IngestResponse,
    StorageCostResponse,
)
from rag_lab.application.services import CollectionRouter, IngestionService
from rag_lab.domain.exceptions import (
    DocumentValidationError,
    ProviderError,
    VectorStoreError,
)
from rag_lab.infrastructure.dependencies import get_collection_router, get_ingestion_service
from rag_lab.presentation.api.v1.errors import to_http_exception

router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post("", response_model=IngestResponse, status_code=status.HTTP_201_CREATED)
async def ingest_document(
    request: IngestRequest,
    service: IngestionService = Depends(get_ingestion_service),
) -> IngestResponse:
    """Chunk, embed and store content in the collection for (provider, dimension).

    Accepts plain text, an array of strings, or a JSON object whose values
    are strings.
    """
    try:
        result = await service.ingest(request.content, request.provider, request.dimension)
    except (DocumentValidationError, ProviderError, VectorStoreError) as e:
        raise to_http_exception(e) from e

    return IngestResponse(
        chunk_count=result.chunk_count,
        dimension=result.dimension,
        provider=result.provider,
        collection=result.collection.name,
        cost_metrics=StorageCostResponse(**asdict(result.cost_metrics)),
    )


@router.get("/collections", response_model=list[CollectionResponse])
async def list_collections(
    collections: CollectionRouter = Depends(get_collection_router),
) -> list[CollectionResponse]:
    """List the document collections with their provider, dimension and size."""
    try:
        identities = await collections.list_identities()
        infos = [await collections.describe(identity) for identity in identities]
    except VectorStoreError as e:
        raise to_http_exception(e) from e

    return [
        CollectionResponse(
            name=identity.name,
            provider=identity.provider,
            dimension=identity.dimension,
            points_count=info.points_count if info else None,
        )
        for identity, info in zip(identities, infos)
    ]


@router.delete("", response_model=ClearResponse)
async def clear_documents(
    collections: CollectionRouter = Depends(get_collection_router),
) -> ClearResponse:
    """Delete every document collection."""
    try:
        deleted = await collections.clear_all()
    except VectorStoreError as e:
        raise to_http_exception(e) from e
    return ClearResponse(deleted_collections=deleted, deleted_count=len(deleted))
