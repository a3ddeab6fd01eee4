import logging
import threading

import pytest

from app.core.exceptions import NotFoundException, ValidationException
from app.core.schema_store import SchemaStore, validate_field_request
from app.schemas.record_schema import FieldRequest


@pytest.fixture
def store(schema_repo, metrics):
    return SchemaStore(schema_repo, metrics=metrics)


def test_get_or_create_seeds_from_catalog(store, metrics):
    schema = store.get_or_create("T1", "clients")
    assert "websiteUrl" in schema.properties
    assert schema.required == ["id", "name"]
    assert schema.version == 1
    assert metrics.get_summary()["schemas_created_from_catalog"] == {"clients": 1}


def test_existing_schema_is_returned_unmodified(store, schema_repo):
    schema_repo.put_raw_row("T1", "clients", {"id": {"type": "string", "title": "Key"}}, ["id"])
    schema = store.get_or_create("T1", "clients")
    assert schema.properties == {"id": {"type": "string", "title": "Key"}}


def test_catalog_miss_falls_back_to_minimal_schema(store, metrics, caplog):
    with caplog.at_level(logging.WARNING, logger="app.core.schema_store"):
        schema = store.get_or_create("T1", "projects")

    assert set(schema.properties) == {"id", "name"}
    assert schema.required == ["id", "name"]
    assert "No default schema found for form type: projects" in caplog.text
    assert metrics.get_summary()["catalog_misses"] == {"projects": 1}


def test_concurrent_get_or_create_leaves_one_row(store, schema_repo, metrics):
    barrier = threading.Barrier(8)
    results = []

    def create():
        barrier.wait()
        results.append(store.get_or_create("T1", "activities"))

    threads = [threading.Thread(target=create) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert schema_repo.count() == 1
    assert len(results) == 8
    assert all(r.properties == results[0].properties for r in results)
    assert metrics.get_summary()["schemas_created_from_catalog"] == {"activities": 1}


def test_concurrent_add_field_keeps_every_field(store):
    store.get_or_create("T1", "activities")
    names = [f"field{i}" for i in range(10)]

    threads = [
        threading.Thread(
            target=store.add_field,
            args=("T1", "activities", FieldRequest(name=name, type="text", title=name, required=True)),
        )
        for name in names
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    schema = store.get_or_create("T1", "activities")
    assert set(names) <= set(schema.properties)
    assert set(names) <= set(schema.required)
    assert schema.version == 11


def test_re_adding_a_field_replaces_it(store):
    store.add_field("T1", "projects", FieldRequest(name="due", type="date", title="Due", required=True))
    schema = store.add_field("T1", "projects", FieldRequest(name="due", type="text", title="Due (text)", required=True))

    assert schema.properties["due"] == {"type": "text", "title": "Due (text)"}
    assert schema.required == ["id", "name", "due"]


def test_remove_field_requires_schema_row(store):
    with pytest.raises(NotFoundException):
        store.remove_field("T1", "activities", "name")


def test_remove_field_drops_required_entry(store):
    store.get_or_create("T1", "activities")
    schema = store.remove_field("T1", "activities", "type")
    assert "type" not in schema.properties
    assert schema.required == ["id", "name"]


@pytest.mark.parametrize("field", [
    None,
    FieldRequest(type="text", title="X"),
    FieldRequest(name="x", title="X"),
    FieldRequest(name="x", type="text", title=""),
    FieldRequest(name="x", type="select", title="X"),
    FieldRequest(name="x", type="select", title="X", enum=[]),
])
def test_invalid_field_requests(field):
    with pytest.raises(ValidationException):
        validate_field_request(field)
