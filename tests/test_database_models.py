from app.models.database_models import (
    FieldDefinition,
    FormDefinition,
    RecordSchema,
    normalize_properties,
    normalize_required,
    normalize_schema,
    sort_forms,
)


def test_select_is_stored_as_string_with_options():
    definition = FieldDefinition.from_request("select", "Priority", enum=["low", "high"])
    assert definition.to_dict() == {"type": "string", "title": "Priority", "enum": ["low", "high"]}


def test_format_types_gain_matching_format():
    for field_type in ("email", "phone", "currency", "date"):
        definition = FieldDefinition.from_request(field_type, "Value")
        assert definition.to_dict() == {"type": field_type, "title": "Value", "format": field_type}


def test_other_types_pass_through():
    assert FieldDefinition.from_request("text", "Notes", default="n/a").to_dict() == {
        "type": "text", "title": "Notes", "default": "n/a"
    }
    # options are only kept for select fields
    assert "enum" not in FieldDefinition.from_request("number", "Count", enum=["1"]).to_dict()


def test_empty_enum_is_dropped():
    assert "enum" not in FieldDefinition(type="string", title="Status", enum=[]).to_dict()
    assert FieldDefinition.from_dict({"type": "string", "title": "S", "enum": []}) == FieldDefinition("string", "S")


def test_enum_keeps_first_occurrence_of_each_option():
    definition = FieldDefinition.from_request("select", "Priority", enum=["low", "low", "high", "low"])
    assert definition.to_dict()["enum"] == ["low", "high"]
    assert FieldDefinition.from_dict({"type": "string", "title": "S", "enum": ["a", "b", "a"]}).enum == ["a", "b"]


def test_normalize_properties_skips_malformed_values():
    assert normalize_properties({"id": {"type": "string", "title": "ID"}, "bad": "string", "n": None}) == {
        "id": {"type": "string", "title": "ID"}
    }
    assert normalize_properties(["id"]) == {}
    assert normalize_required(["id", 7, None], ["id"]) == ["id"]


def test_normalize_required_dedupes_and_filters():
    assert normalize_required(["id", "name", "id", "ghost"], ["id", "name"]) == ["id", "name"]
    assert normalize_required(None, ["id"]) == []


def test_normalize_schema_drops_empty_names():
    properties, required = normalize_schema(
        {"": {"type": "string", "title": "?"}, "id": {"type": "string", "title": "ID", "enum": []}},
        ["", "id"],
    )
    assert properties == {"id": {"type": "string", "title": "ID"}}
    assert required == ["id"]


def test_record_schema_json_shape():
    schema = RecordSchema("T1", "activities", {"id": FieldDefinition("string", "ID")}, ["id"])
    assert schema.to_json_schema() == {
        "type": "object",
        "properties": {"id": {"type": "string", "title": "ID"}},
        "required": ["id"],
    }


def test_sort_forms_puts_defaults_first():
    forms = [
        FormDefinition("T1", "b", "Beta", type="custom", integration_key="k"),
        FormDefinition("T1", "clients", "Clients"),
        FormDefinition("T1", "a", "Alpha", type="custom", integration_key="k"),
        FormDefinition("T1", "activities", "Activities"),
    ]
    assert [f.form_id for f in sort_forms(forms)] == ["activities", "clients", "a", "b"]
