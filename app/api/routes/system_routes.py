"""
System API Routes.
Operational counters of the schema engine.
"""

from fastapi import APIRouter, Depends
from typing import Any, Dict
from app.core.responses import ResponseHandler
from app.core.schema_metrics import SchemaMetrics
from app.api.dependencies import get_schema_metrics

router = APIRouter(tags=["System"])


@router.get("/metrics", response_model=Dict[str, Any])
async def get_metrics(metrics: SchemaMetrics = Depends(get_schema_metrics)):
    """Schema creations per record type, including catalog misses."""
    return ResponseHandler.success(data=metrics.get_summary())
