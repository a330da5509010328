"""Integration tests for the databases and entries HTTP API."""

import pytest

API = "/api/v1/databases"

CONTACTS = {
    "workspaceId": "w1",
    "name": "Contacts",
    "properties": {
        "Name": {"name": "Name", "type": "title"},
        "Email": {"name": "Email", "type": "email"},
        "Status": {"name": "Status", "type": "select", "options": ["Lead", "Customer"]},
    },
    "views": [{"type": "table", "name": "Table"}],
}


async def _create_database(client, headers, body=None):
    response = await client.post(API, json=body or CONTACTS, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


class TestDatabasesApi:

    @pytest.mark.asyncio
    async def test_create_and_get(self, client, auth_headers):
        created = await _create_database(client, auth_headers)

        assert created["columns"] == ["Name", "Email", "Status"]
        assert created["views"] == [{"type": "table", "name": "Table"}]
        assert created["createdBy"] == "user-1"

        response = await client.get(f"{API}/{created['id']}", headers=auth_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["schema"]["id"] == created["id"]
        assert body["entries"] == []

    @pytest.mark.asyncio
    async def test_validation_error_body(self, client, auth_headers):
        body = {**CONTACTS, "properties": {"Notes": {"name": "Notes", "type": "text"}}}

        response = await client.post(API, json=body, headers=auth_headers)

        assert response.status_code == 400
        payload = response.json()
        assert payload["error"] == "Validation error"
        assert {
            "field": "properties",
            "message": "Database must have a Title column",
            "code": "title_required",
        } in payload["details"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides, code",
        [
            ({"properties": {"Name": {"name": 123, "type": "title"}}}, "property_name_invalid"),
            ({"views": [{"type": "_columnWidths", "widths": "wide"}]}, "view_invalid"),
        ],
    )
    async def test_malformed_definitions_are_bad_requests(self, client, auth_headers, overrides, code):
        response = await client.post(API, json={**CONTACTS, **overrides}, headers=auth_headers)

        assert response.status_code == 400
        assert [d["code"] for d in response.json()["details"]] == [code]

    @pytest.mark.asyncio
    async def test_not_found_body(self, client, auth_headers):
        response = await client.get(f"{API}/missing", headers=auth_headers)

        assert response.status_code == 404
        assert response.json() == {"error": "Not found", "message": "Database 'missing' not found"}

    @pytest.mark.asyncio
    async def test_list_with_counts(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        await client.post(
            f"{API}/{created['id']}/entries", json={"data": {"Name": "Ada"}}, headers=auth_headers
        )

        response = await client.get(f"{API}/workspace/w1", headers=auth_headers)

        assert response.status_code == 200
        payload = response.json()
        assert payload["total"] == 1
        assert payload["items"][0]["entryCount"] == 1

    @pytest.mark.asyncio
    async def test_column_management(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        db_url = f"{API}/{created['id']}"

        response = await client.put(
            f"{db_url}/columns/order", json={"order": ["Name", "Status", "Email"]}, headers=auth_headers
        )
        assert response.json()["columns"] == ["Name", "Status", "Email"]

        response = await client.post(
            f"{db_url}/properties", json={"afterKey": "Name"}, headers=auth_headers
        )
        assert response.status_code == 201
        assert response.json()["columns"] == ["Name", "New Column", "Status", "Email"]

        response = await client.patch(
            f"{db_url}/properties/New Column", json={"name": "Phone"}, headers=auth_headers
        )
        assert response.json()["columns"] == ["Name", "Phone", "Status", "Email"]

        response = await client.put(
            f"{db_url}/columns/Email/hidden", json={"hidden": True}, headers=auth_headers
        )
        assert response.json()["hiddenColumns"] == ["Email"]
        assert response.json()["visibleColumns"] == ["Name", "Phone", "Status"]

        response = await client.put(
            f"{db_url}/columns/Name/width", json={"width": 220}, headers=auth_headers
        )
        assert response.json()["columnWidths"] == {"Name": 220}

        response = await client.post(
            f"{db_url}/columns/move", json={"key": "Email", "beforeKey": "Name"}, headers=auth_headers
        )
        assert response.json()["columns"] == ["Email", "Name", "Phone", "Status"]

        response = await client.delete(f"{db_url}/properties/Phone", headers=auth_headers)
        assert response.json()["columns"] == ["Email", "Name", "Status"]

        response = await client.get(db_url, headers=auth_headers)
        assert response.json()["schema"]["columns"] == ["Email", "Name", "Status"]

    @pytest.mark.asyncio
    async def test_delete_only_title_rejected(self, client, auth_headers):
        created = await _create_database(client, auth_headers)

        response = await client.delete(f"{API}/{created['id']}/properties/Name", headers=auth_headers)

        assert response.status_code == 400
        assert response.json()["details"][0]["code"] == "title_required"

    @pytest.mark.asyncio
    async def test_update_and_delete_database(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        db_url = f"{API}/{created['id']}"

        response = await client.put(
            db_url,
            json={
                "name": "People",
                "properties": {
                    "Status": CONTACTS["properties"]["Status"],
                    "Name": CONTACTS["properties"]["Name"],
                },
                "views": [{"type": "gallery", "name": "Cards", "coverProperty": "Name"}],
            },
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["name"] == "People"
        assert response.json()["columns"] == ["Status", "Name"]
        assert response.json()["views"][0]["coverProperty"] == "Name"

        response = await client.delete(db_url, headers=auth_headers)
        assert response.status_code == 204
        assert (await client.get(db_url, headers=auth_headers)).status_code == 404


class TestEntriesApi:

    @pytest.mark.asyncio
    async def test_entry_lifecycle(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        entries_url = f"{API}/{created['id']}/entries"

        response = await client.post(
            entries_url,
            json={"data": {"Name": "Ada", "Email": "ada@example.com", "Status": "Lead"}},
            headers=auth_headers,
        )
        assert response.status_code == 201
        entry = response.json()
        assert entry["order"] == 0

        response = await client.put(
            f"{entries_url}/{entry['id']}",
            json={"data": {"Status": None}},
            headers=auth_headers,
        )
        assert response.json()["data"] == {"Name": "Ada", "Email": "ada@example.com"}

        response = await client.post(f"{entries_url}/{entry['id']}/duplicate", headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["data"]["Name"] == "Copy of Ada"

        response = await client.delete(f"{entries_url}/{entry['id']}", headers=auth_headers)
        assert response.status_code == 204
        response = await client.delete(f"{entries_url}/{entry['id']}", headers=auth_headers)
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_entry_reports_all_fields(self, client, auth_headers):
        created = await _create_database(client, auth_headers)

        response = await client.post(
            f"{API}/{created['id']}/entries",
            json={"data": {"Email": "nope"}},
            headers=auth_headers,
        )

        assert response.status_code == 400
        fields = {d["field"] for d in response.json()["details"]}
        assert fields == {"Name", "Email"}

    @pytest.mark.asyncio
    async def test_query(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        entries_url = f"{API}/{created['id']}/entries"
        for name in ["Acme Corporation", "Beta", "Cme"]:
            await client.post(entries_url, json={"data": {"Name": name}}, headers=auth_headers)

        response = await client.post(
            f"{API}/{created['id']}/query",
            json={
                "filters": [{"property": "Name", "operator": "contains", "value": "cme"}],
                "sort": {"column": "Name", "direction": "desc"},
            },
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert [e["data"]["Name"] for e in response.json()["items"]] == ["Cme", "Acme Corporation"]

    @pytest.mark.asyncio
    async def test_bulk_create_and_update(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        bulk_url = f"{API}/{created['id']}/entries/bulk"

        response = await client.post(
            bulk_url, json={"rows": [{"Name": "A"}, {"Name": "B"}]}, headers=auth_headers
        )
        assert response.status_code == 200
        ids = [e["id"] for e in response.json()["succeeded"]]

        response = await client.patch(
            bulk_url,
            json={"entryIds": ids, "data": {"Status": "Customer"}},
            headers=auth_headers,
        )
        assert response.status_code == 200
        assert response.json()["succeededCount"] == 2

    @pytest.mark.asyncio
    async def test_bulk_delete_partial_failure(self, client, auth_headers):
        created = await _create_database(client, auth_headers)
        entries_url = f"{API}/{created['id']}/entries"
        ids = []
        for name in ["A", "B"]:
            response = await client.post(entries_url, json={"data": {"Name": name}}, headers=auth_headers)
            ids.append(response.json()["id"])

        response = await client.post(
            f"{entries_url}/bulk-delete",
            json={"entryIds": [ids[0], "missing", ids[1]]},
            headers=auth_headers,
        )

        assert response.status_code == 207
        payload = response.json()
        assert payload["succeeded"] == ids
        assert payload["succeededCount"] == 2
        assert payload["failed"][0]["index"] == 1
        assert payload["failed"][0]["entryId"] == "missing"

        remaining = await client.get(f"{API}/{created['id']}", headers=auth_headers)
        assert remaining.json()["entries"] == []
