"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from rag_lab.presentation.api.v1.endpoints.documents import router as documents_router
from rag_lab.presentation.api.v1.endpoints.health import router as health_router
from rag_lab.presentation.api.v1.endpoints.query import router as query_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(documents_router)
router.include_router(query_router)
