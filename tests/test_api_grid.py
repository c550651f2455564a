"""Tests for the grid HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from datagrid.main import app

BASE = "/api/v1/grids"

COLUMNS = [
    {"key": "id", "title": "ID", "type": "number", "editable": False},
    {"key": "name", "title": "Name", "required": True},
    {"key": "team", "title": "Team"},
]


@pytest.fixture
def client():
    """Create a test client that runs the application lifespan."""
    with TestClient(app) as client:
        yield client


@pytest.fixture
def grid_id(client):
    """Create a grid with 25 rows and return its id."""
    rows = [
        {"id": i, "name": f"user {i:02d}", "team": "red" if i % 2 else "blue"}
        for i in range(1, 26)
    ]
    response = client.post(
        BASE, json={"id": "members", "title": "members", "columns": COLUMNS, "rows": rows}
    )
    assert response.status_code == 201
    return "members"


def test_ping(client):
    """Test the health endpoint."""
    response = client.get("/ping")

    assert response.status_code == 200
    assert response.json()["ping"] == "pong!"


def test_create_grid_returns_first_page(client, grid_id):
    """Test the initial snapshot."""
    snapshot = client.get(f"{BASE}/{grid_id}").json()["snapshot"]

    assert snapshot["total_rows"] == 25
    assert snapshot["total_pages"] == 3
    assert snapshot["page"] == 1
    assert len(snapshot["rows"]) == 10
    assert snapshot["visible_range"] == [1, 10]


def test_create_duplicate_grid_conflicts(client, grid_id):
    """Test creating a grid id twice."""
    response = client.post(BASE, json={"id": grid_id, "columns": COLUMNS})

    assert response.status_code == 409


def test_unknown_grid_is_404(client):
    """Test access to a missing grid."""
    assert client.get(f"{BASE}/nope").status_code == 404


def test_sort_and_page(client, grid_id):
    """Test sorting descending and moving to the last page."""
    client.post(f"{BASE}/{grid_id}/sort", json={"column_key": "id"})
    client.post(f"{BASE}/{grid_id}/sort", json={"column_key": "id"})
    response = client.put(f"{BASE}/{grid_id}/page", json={"page": 3})

    snapshot = response.json()["snapshot"]
    assert snapshot["sort"] == [{"column_key": "id", "direction": "desc"}]
    assert [r["key"] for r in snapshot["rows"]] == ["5", "4", "3", "2", "1"]
    assert snapshot["visible_range"] == [21, 25]


def test_invalid_page_size_is_rejected(client, grid_id):
    """Test a page size that is not offered."""
    response = client.put(f"{BASE}/{grid_id}/page", json={"page_size": 7})

    assert response.status_code == 422


def test_unknown_sort_column_is_404(client, grid_id):
    """Test sorting by a column that does not exist."""
    response = client.post(f"{BASE}/{grid_id}/sort", json={"column_key": "missing"})

    assert response.status_code == 404


def test_filter_values_and_toggle(client, grid_id):
    """Test listing and applying filter values."""
    values = client.get(f"{BASE}/{grid_id}/filters/team/values").json()
    searched = client.get(
        f"{BASE}/{grid_id}/filters/team/values", params={"search": "RE"}
    ).json()
    response = client.post(f"{BASE}/{grid_id}/filters/team/toggle", json={"value": "red"})

    assert values["values"] == ["blue", "red"]
    assert searched["values"] == ["red"]
    snapshot = response.json()["snapshot"]
    assert snapshot["filters"] == {"team": ["red"]}
    assert snapshot["total_rows"] == 13

    cleared = client.delete(f"{BASE}/{grid_id}/filters").json()["snapshot"]
    assert cleared["total_rows"] == 25


def test_selection_survives_paging(client, grid_id):
    """Test that selected keys persist across pages."""
    client.post(f"{BASE}/{grid_id}/selection/3")
    client.post(f"{BASE}/{grid_id}/selection/page")
    response = client.put(f"{BASE}/{grid_id}/page", json={"page": 2})

    snapshot = response.json()["snapshot"]
    assert len(snapshot["selected_keys"]) == 10
    assert "3" in snapshot["selected_keys"]
    assert not any(r["selected"] for r in snapshot["rows"])


def test_select_unknown_row_is_404(client, grid_id):
    """Test selecting a key that is not in the grid."""
    assert client.post(f"{BASE}/{grid_id}/selection/999").status_code == 404


def test_add_and_save_row(client, grid_id):
    """Test creating a row through the edit workflow."""
    added = client.post(f"{BASE}/{grid_id}/rows").json()
    key = added["result"]["key"]
    assert key.startswith("local-")

    invalid = client.post(f"{BASE}/{grid_id}/rows/{key}/save").json()
    assert invalid["result"]["status"] == "invalid"
    assert invalid["result"]["missing_fields"] == ["Name"]
    assert invalid["notifications"][0]["kind"] == "warning"

    client.patch(f"{BASE}/{grid_id}/rows/{key}", json={"column_key": "name", "value": "Neo"})
    saved = client.post(f"{BASE}/{grid_id}/rows/{key}/save").json()

    assert saved["result"]["status"] == "saved"
    assert saved["result"]["record"]["name"] == "Neo"
    assert saved["snapshot"]["total_rows"] == 26
    assert saved["snapshot"]["editing_keys"] == []


def test_edit_non_editable_column_is_400(client, grid_id):
    """Test changing a read-only column."""
    client.post(f"{BASE}/{grid_id}/rows/1/edit")
    response = client.patch(
        f"{BASE}/{grid_id}/rows/1", json={"column_key": "id", "value": 100}
    )

    assert response.status_code == 400


def test_change_without_edit_is_409(client, grid_id):
    """Test changing a row that is not being edited."""
    response = client.patch(
        f"{BASE}/{grid_id}/rows/1", json={"column_key": "name", "value": "x"}
    )

    assert response.status_code == 409


def test_single_delete(client, grid_id):
    """Test request then confirm of a single delete."""
    pending = client.post(f"{BASE}/{grid_id}/rows/2/delete").json()
    assert pending["snapshot"]["pending_delete"] == "2"

    deleted = client.post(f"{BASE}/{grid_id}/delete/confirm").json()

    assert deleted["result"] == {"status": "deleted", "deleted_keys": [2], "error": None}
    assert deleted["snapshot"]["total_rows"] == 24


def test_bulk_delete_selection(client, grid_id):
    """Test deleting the selected rows."""
    client.post(f"{BASE}/{grid_id}/selection/1")
    client.post(f"{BASE}/{grid_id}/selection/4")

    response = client.post(f"{BASE}/{grid_id}/bulk-delete", json={})

    body = response.json()
    assert body["result"]["status"] == "deleted"
    assert body["snapshot"]["total_rows"] == 23
    assert body["snapshot"]["selected_keys"] == []
    assert body["notifications"][0]["kind"] == "success"


def test_duplicate_and_save_all(client, grid_id):
    """Test copying a row and saving every open edit."""
    client.post(f"{BASE}/{grid_id}/selection/5")
    duplicated = client.post(f"{BASE}/{grid_id}/duplicate").json()
    assert len(duplicated["result"]["keys"]) == 1

    saved = client.post(f"{BASE}/{grid_id}/save-all").json()

    assert saved["result"]["status"] == "saved"
    assert saved["snapshot"]["total_rows"] == 26


def test_save_all_with_nothing_open(client, grid_id):
    """Test save-all without rows in editing."""
    body = client.post(f"{BASE}/{grid_id}/save-all").json()

    assert body["result"]["status"] == "nothing"
    assert body["notifications"][0]["kind"] == "warning"


def test_export_download(client, grid_id):
    """Test the CSV download."""
    client.post(f"{BASE}/{grid_id}/filters/team/toggle", json={"value": "blue"})

    response = client.get(f"{BASE}/{grid_id}/export")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="members_')
    assert response.content.startswith(b"\xef\xbb\xbf")
    lines = response.content.decode("utf-8-sig").split("\n")
    assert lines[0] == "ID,Name,Team"
    assert len(lines) == 13


def test_delete_grid(client, grid_id):
    """Test removing a grid."""
    assert client.delete(f"{BASE}/{grid_id}").status_code == 204
    assert client.get(f"{BASE}/{grid_id}").status_code == 404


def test_new_row_keyed_on_custom_field(client):
    """Test that a created row stays in a grid keyed on a field other than id."""
    columns = [
        {"key": "code", "title": "Code", "editable": False},
        {"key": "name", "title": "Name", "required": True},
    ]
    client.post(
        BASE,
        json={
            "id": "menus",
            "key_field": "code",
            "columns": columns,
            "rows": [{"code": "M1", "name": "Home"}],
        },
    )
    key = client.post(f"{BASE}/menus/rows").json()["result"]["key"]
    client.patch(f"{BASE}/menus/rows/{key}", json={"column_key": "name", "value": "new"})

    saved = client.post(f"{BASE}/menus/rows/{key}/save").json()

    # Verify the created record is shown under its generated code
    code = saved["result"]["record"]["code"]
    assert "id" not in saved["result"]["record"]
    assert saved["snapshot"]["total_rows"] == 2
    assert code in [r["key"] for r in saved["snapshot"]["rows"]]
    stored = client.app.state.grid_registry.get("menus").gateway.records
    assert stored[code]["name"] == "new"


def test_grids_do_not_share_stored_rows(client):
    """Test that equal row keys in two grids address different records."""
    for grid in ("g1", "g2"):
        client.post(
            BASE, json={"id": grid, "columns": COLUMNS, "rows": [{"id": 1, "name": "one"}]}
        )

    client.post(f"{BASE}/g1/rows/1/edit")
    client.patch(f"{BASE}/g1/rows/1", json={"column_key": "name", "value": "kept"})
    client.post(f"{BASE}/g1/rows/1/save")
    client.post(f"{BASE}/g2/rows/1/delete")
    client.post(f"{BASE}/g2/delete/confirm")

    registry = client.app.state.grid_registry
    assert registry.get("g1").gateway.records == {1: {"id": 1, "name": "kept"}}
    assert registry.get("g2").gateway.records == {}
    assert registry.get("g1").gateway is not registry.get("g2").gateway
    assert client.get(f"{BASE}/g1").json()["snapshot"]["total_rows"] == 1


def test_export_with_non_ascii_title(client, grid_id):
    """Test the download header for a title outside ASCII."""
    response = client.get(f"{BASE}/{grid_id}/export", params={"title": "메뉴관리"})

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert disposition.startswith('attachment; filename="____')
    assert "filename*=UTF-8''%EB%A9%94%EB%89%B4%EA%B4%80%EB%A6%AC_" in disposition


def test_export_title_with_quote(client, grid_id):
    """Test that quotes in the title do not break the header."""
    response = client.get(f"{BASE}/{grid_id}/export", params={"title": 'a"b'})

    assert response.status_code == 200
    assert response.headers["content-disposition"].startswith('attachment; filename="a_b_')


def test_bulk_delete_of_deleted_key_is_a_no_op(client, grid_id):
    """Test resending a bulk delete for rows that are already gone."""
    first = client.post(f"{BASE}/{grid_id}/bulk-delete", json={"keys": ["7"]})
    second = client.post(f"{BASE}/{grid_id}/bulk-delete", json={"keys": ["7"]})

    assert first.json()["result"]["status"] == "deleted"
    assert second.status_code == 200
    assert second.json()["result"]["status"] == "nothing"
    assert second.json()["snapshot"]["total_rows"] == 24


def test_duplicate_column_keys_are_rejected(client):
    """Test creating a grid whose columns share a key."""
    columns = [{"key": "a", "title": "A"}, {"key": "a", "title": "Again"}]

    response = client.post(BASE, json={"id": "dupes", "columns": columns})

    assert response.status_code == 422
    assert "Duplicate column key: a" in response.json()["detail"]
    assert client.get(f"{BASE}/dupes").status_code == 404
