"""Tests for the folder endpoints."""

BASE = "/api/projects/proj-1/folders"


def _create(client, name="Data"):
    resp = client.post(BASE, json={"name": name})
    assert resp.status_code == 201
    return resp.json()


def _upload(client, folder_id, name="a.txt", size=100, display_name="A"):
    return client.post(
        f"{BASE}/{folder_id}/files",
        files={"file": (name, b"x" * size, "text/plain")},
        data={"display_name": display_name},
    )


class TestCreateFolder:

    def test_create(self, client):
        data = _create(client, "Raw data")
        assert data["name"] == "Raw data"
        assert data["project_id"] == "proj-1"
        assert data["size"] == 0
        assert data["files"] == []
        assert data["remaining_space"] == 104857600
        assert data["size_label"] == "0 B"
        assert data["created_by"] == "anonymous"

    def test_blank_name_rejected(self, client):
        resp = client.post(BASE, json={"name": "   "})
        assert resp.status_code == 422

    def test_list_only_project_folders(self, client):
        _create(client, "A")
        _create(client, "B")
        client.post("/api/projects/proj-2/folders", json={"name": "Other"})

        resp = client.get(BASE)
        assert resp.status_code == 200
        assert [f["name"] for f in resp.json()] == ["A", "B"]


class TestGetFolder:

    def test_get_includes_files_and_size(self, client):
        folder = _create(client)
        _upload(client, folder["id"], size=1536)

        data = client.get(f"{BASE}/{folder['id']}").json()
        assert data["size"] == 1536
        assert data["size_label"] == "1.50 KB"
        assert data["files"][0]["name"] == "A.txt"

    def test_unknown_folder(self, client):
        resp = client.get(f"{BASE}/folder-missing")
        assert resp.status_code == 404
        assert resp.json()["error"] == "FOLDER_NOT_FOUND"

    def test_folder_hidden_from_other_project(self, client):
        folder = _create(client)
        resp = client.get(f"/api/projects/proj-2/folders/{folder['id']}")
        assert resp.status_code == 404


class TestRenameFolder:

    def test_rename_preserves_size(self, client):
        folder = _create(client, "Old")
        _upload(client, folder["id"], size=300)

        resp = client.put(f"{BASE}/{folder['id']}", json={"name": "New"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "New"
        assert data["size"] == 300
        assert len(data["files"]) == 1


class TestDeleteFolder:

    def test_cascade(self, client, blob_store):
        folder = _create(client)
        file_ids = [_upload(client, folder["id"], name=f"{i}.txt").json()["id"] for i in range(3)]

        resp = client.delete(f"{BASE}/{folder['id']}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["deleted_file_ids"] == file_ids
        assert data["deleted_files"] == 3

        assert client.get(f"{BASE}/{folder['id']}").status_code == 404
        assert client.get(BASE).json() == []
        assert not (blob_store.root / "projects").exists()

    def test_delete_unknown(self, client):
        assert client.delete(f"{BASE}/folder-missing").status_code == 404
