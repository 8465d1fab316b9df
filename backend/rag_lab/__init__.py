"""RAG Lab — multi-provider embedding ingestion and retrieval service."""
