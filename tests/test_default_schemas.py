from app.core.default_schemas import BUILT_IN_FORMS, DefaultSchemaCatalog, default_catalog, minimal_schema


def test_every_built_in_form_has_a_catalog_entry():
    for form_id, _title in BUILT_IN_FORMS:
        assert form_id in default_catalog


def test_lookup_is_case_insensitive():
    assert default_catalog.lookup("CLIENTS") == default_catalog.lookup("clients")


def test_lookup_miss_returns_none():
    assert default_catalog.lookup("widgets") is None
    assert default_catalog.lookup("") is None


def test_lookup_hands_out_copies():
    seed = default_catalog.lookup("activities")
    seed["properties"]["type"]["enum"].append("lunch")
    seed["required"].append("ownerId")
    del seed["properties"]["name"]

    fresh = default_catalog.lookup("activities")
    assert "lunch" not in fresh["properties"]["type"]["enum"]
    assert "ownerId" not in fresh["required"]
    assert "name" in fresh["properties"]


def test_catalog_entries_are_well_formed():
    for key in default_catalog.keys():
        seed = default_catalog.lookup(key)
        assert seed["properties"]
        assert set(seed["required"]) <= set(seed["properties"])
        for definition in seed["properties"].values():
            assert definition.get("enum", ["non-empty"]) != []


def test_custom_catalog_is_frozen_at_construction():
    source = {"Tickets": {"properties": {"id": {"type": "string", "title": "ID"}}, "required": ["id"]}}
    catalog = DefaultSchemaCatalog(source)
    source["Tickets"]["required"].append("subject")

    assert catalog.keys() == ["tickets"]
    assert catalog.lookup("tickets")["required"] == ["id"]


def test_minimal_schema():
    schema = minimal_schema()
    assert set(schema["properties"]) == {"id", "name"}
    assert schema["required"] == ["id", "name"]
    schema["required"].clear()
    assert minimal_schema()["required"] == ["id", "name"]
