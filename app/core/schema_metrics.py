"""
Schema engine counters.
Tracks schema creations by seed source so operators can spot record types
that fell back to the minimal schema because the catalog had no entry.
"""

import threading
from datetime import datetime
from typing import Any, Dict, Optional


class SchemaMetrics:
    """Track schema creation events per record type."""

    def __init__(self):
        self._lock = threading.Lock()
        self.created_from_catalog: Dict[str, int] = {}
        self.catalog_misses: Dict[str, int] = {}
        self.last_catalog_miss: Optional[Dict[str, Any]] = None

    def record_creation(self, tenant_id: str, record_type: str, from_catalog: bool) -> None:
        """Record that a schema row was created for a record type."""
        with self._lock:
            if from_catalog:
                self.created_from_catalog[record_type] = self.created_from_catalog.get(record_type, 0) + 1
                return
            self.catalog_misses[record_type] = self.catalog_misses.get(record_type, 0) + 1
            self.last_catalog_miss = {
                "tenant_id": tenant_id,
                "record_type": record_type,
                "timestamp": datetime.utcnow().isoformat()
            }

    def get_summary(self) -> Dict[str, Any]:
        """Get counters for all tracked record types."""
        with self._lock:
            return {
                "schemas_created_from_catalog": dict(self.created_from_catalog),
                "catalog_misses": dict(self.catalog_misses),
                "total_catalog_misses": sum(self.catalog_misses.values()),
                "last_catalog_miss": dict(self.last_catalog_miss) if self.last_catalog_miss else None
            }


# Global schema metrics
schema_metrics = SchemaMetrics()
