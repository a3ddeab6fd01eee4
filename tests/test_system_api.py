def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    body = r.json()
    assert body["status"] == "healthy"
    assert body["storage_backend"] == "memory"
    assert "memory_mb" in body["performance"]


def test_root(client):
    body = client.get("/").json()
    assert body["api_prefix"] == "/api/v1"
    assert body["health"] == "/health"


def test_metrics_count_catalog_hits_and_misses(registered, form_repo, metrics):
    from app.models.database_models import FormDefinition

    form_repo.insert_custom(FormDefinition(
        tenant_id="T1", form_id="projects", form_title="Projects", type="custom", integration_key="hubspot"
    ))
    registered.get("/api/v1/schema/activities/T1")
    registered.get("/api/v1/schema/projects/T1")
    registered.get("/api/v1/schema/projects/T1")

    r = registered.get("/api/v1/metrics")
    assert r.status_code == 200
    summary = r.json()["data"]
    assert summary["schemas_created_from_catalog"] == {"activities": 1}
    assert summary["catalog_misses"] == {"projects": 1}
    assert summary["total_catalog_misses"] == 1
    assert summary["last_catalog_miss"]["tenant_id"] == "T1"


def test_requests_carry_timing_headers(client):
    r = client.get("/")
    assert "X-Process-Time" in r.headers
    assert "X-Request-ID" in r.headers


def test_error_body_shape(client):
    r = client.get("/api/v1/forms")
    assert r.status_code == 400
    body = r.json()
    assert set(body) == {"success", "error", "metadata"}
    assert body["success"] is False
    assert set(body["error"]) == {"code", "message", "details"}
    assert body["metadata"]["status_code"] == 400
    assert body["metadata"]["timestamp"]


def test_openapi_documents_error_body(client):
    spec = client.get("/api/openapi.json").json()
    assert "ErrorResponse" in spec["components"]["schemas"]
    responses = spec["paths"]["/api/v1/schema/{record_type}/{tenant_id}"]["get"]["responses"]
    for code in ("400", "404", "500"):
        assert responses[code]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
