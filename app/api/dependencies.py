"""
API Dependencies.
Providers for repositories, collaborators and services used by the routes.
"""

from functools import lru_cache

from fastapi import Depends

from app.config import settings
from app.core.form_registry import FormRegistry
from app.core.integration_client import IntegrationClient
from app.core.record_service import RecordService
from app.core.repositories import FormRepository, SchemaRepository
from app.core.schema_metrics import SchemaMetrics, schema_metrics
from app.core.schema_service import SchemaService
from app.core.schema_store import SchemaStore
from app.core.webhook_service import WebhookRelay
import logging

logger = logging.getLogger(__name__)


@lru_cache()
def get_schema_repository() -> SchemaRepository:
    """Schema repository for the configured storage backend."""
    if settings.STORAGE_BACKEND == "memory":
        from app.core.memory_repositories import InMemorySchemaRepository
        logger.info("Using in-memory schema repository")
        return InMemorySchemaRepository()

    from app.core.postgres_repositories import PostgresSchemaRepository
    return PostgresSchemaRepository()


@lru_cache()
def get_form_repository() -> FormRepository:
    """Form repository for the configured storage backend."""
    if settings.STORAGE_BACKEND == "memory":
        from app.core.memory_repositories import InMemoryFormRepository
        logger.info("Using in-memory form repository")
        return InMemoryFormRepository()

    from app.core.postgres_repositories import PostgresFormRepository
    return PostgresFormRepository()


@lru_cache()
def get_integration_client() -> IntegrationClient:
    return IntegrationClient.from_settings()


@lru_cache()
def get_webhook_relay() -> WebhookRelay:
    return WebhookRelay.from_settings()


def get_schema_metrics() -> SchemaMetrics:
    return schema_metrics


def get_form_registry(
    repository: FormRepository = Depends(get_form_repository),
    integration_client: IntegrationClient = Depends(get_integration_client)
) -> FormRegistry:
    return FormRegistry(repository, integration_client=integration_client)


def get_schema_store(
    repository: SchemaRepository = Depends(get_schema_repository),
    metrics: SchemaMetrics = Depends(get_schema_metrics)
) -> SchemaStore:
    return SchemaStore(repository, metrics=metrics)


def get_schema_service(
    form_registry: FormRegistry = Depends(get_form_registry),
    schema_store: SchemaStore = Depends(get_schema_store)
) -> SchemaService:
    return SchemaService(form_registry, schema_store)


def get_record_service(
    form_registry: FormRegistry = Depends(get_form_registry),
    schema_store: SchemaStore = Depends(get_schema_store),
    relay: WebhookRelay = Depends(get_webhook_relay)
) -> RecordService:
    return RecordService(form_registry, schema_store, relay)
