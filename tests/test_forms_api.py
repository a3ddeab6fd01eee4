FORMS_URL = "/api/v1/forms"


def create_form(client, **overrides):
    body = {
        "customerId": "T1",
        "formId": "Projects",
        "formTitle": "Projects",
        "integrationKey": "hubspot",
    }
    body.update(overrides)
    return client.post(FORMS_URL, json=body)


def test_list_requires_customer_id(client, form_repo):
    r = client.get(FORMS_URL)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Customer ID is required"
    assert form_repo.list_for_tenant("T1") == []


def test_list_registers_built_in_forms(client):
    r = client.get(FORMS_URL, params={"customerId": "T1"})
    assert r.status_code == 200
    forms = r.json()["forms"]
    assert [(f["formId"], f["formTitle"], f["type"]) for f in forms] == [
        ("activities", "Activities", "default"),
        ("clients", "Clients", "default"),
    ]
    assert forms[0]["customerId"] == "T1"
    assert forms[0]["integrationKey"] is None
    assert forms[0]["createdAt"]


def test_listing_twice_is_idempotent(client, form_repo):
    client.get(FORMS_URL, params={"customerId": "T1"})
    first = form_repo.find("T1", "activities")
    client.get(FORMS_URL, params={"customerId": "T1"})

    forms = form_repo.list_for_tenant("T1")
    assert len(forms) == 2
    second = form_repo.find("T1", "activities")
    assert second.created_at == first.created_at
    assert second.type == "default"


def test_custom_forms_sort_after_defaults(client):
    create_form(client, formId="zeta", formTitle="Aardvarks")
    create_form(client, formId="alpha", formTitle="Zebras")

    forms = client.get(FORMS_URL, params={"customerId": "T1"}).json()["forms"]
    assert [f["formTitle"] for f in forms] == ["Activities", "Clients", "Aardvarks", "Zebras"]
    assert [f["type"] for f in forms] == ["default", "default", "custom", "custom"]


def test_create_custom_form(client, integration_client, form_repo):
    r = create_form(client)
    assert r.status_code == 200
    body = r.json()
    assert body["formId"] == "projects"
    assert body["formTitle"] == "Projects"
    assert body["type"] == "custom"
    assert body["integrationKey"] == "hubspot"
    assert body["customerId"] == "T1"

    assert integration_client.calls == [{
        "customer_id": "T1",
        "integration_key": "hubspot",
        "instance_key": "projects",
        "auto_create": True,
    }]
    assert form_repo.find("T1", "projects").is_custom


def test_create_requires_customer_id(client, integration_client):
    r = create_form(client, customerId=None)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Customer ID is required"
    assert integration_client.calls == []


def test_create_requires_form_fields(client, integration_client):
    r = create_form(client, integrationKey="", formTitle=None)
    assert r.status_code == 400
    assert r.json()["error"]["details"]["missing_fields"] == ["formTitle", "integrationKey"]
    assert integration_client.calls == []


def test_create_rejects_integration_key_with_path_characters(client, integration_client, form_repo):
    r = create_form(client, integrationKey="hubspot/../../admin/flows?x=")
    assert r.status_code == 400
    assert r.json()["error"]["code"] == "VALIDATION_ERROR"
    assert r.json()["error"]["details"] == {"field": "integrationKey"}
    assert integration_client.calls == []
    assert form_repo.find("T1", "projects") is None


def test_failed_provisioning_leaves_no_registration(client, integration_client, form_repo):
    integration_client.fail = True

    r = create_form(client)
    assert r.status_code == 500
    assert r.json()["error"]["code"] == "UPSTREAM_PROVISIONING_ERROR"
    assert r.json()["error"]["message"] == "Failed to create form and integration resources"
    assert form_repo.find("T1", "projects") is None


def test_duplicate_custom_form_is_a_generic_failure(client, form_repo):
    assert create_form(client).status_code == 200

    r = create_form(client, formId="PROJECTS", formTitle="Other")
    assert r.status_code == 500
    assert r.json()["error"]["message"] == "Failed to create form and integration resources"
    assert form_repo.find("T1", "projects").form_title == "Projects"


def test_reconcile_never_overwrites_custom_form(client, form_repo):
    assert create_form(client, formId="Activities", formTitle="My Activities").status_code == 200

    forms = client.get(FORMS_URL, params={"customerId": "T1"}).json()["forms"]
    activities = [f for f in forms if f["formId"] == "activities"]
    assert len(activities) == 1
    assert activities[0]["type"] == "custom"
    assert activities[0]["formTitle"] == "My Activities"
