# tests/unit/test_storage.py
"""Tests for blob stores and the persistence adapter."""

import pytest

from daymap.models import FileBlobStore, InMemoryBlobStore, ProjectPersistence


class TestFileBlobStore:
    def test_set_get_delete(self, tmp_path):
        store = FileBlobStore(tmp_path / "data")
        assert store.get("projects") is None

        store.set("projects", "[]")
        assert store.get("projects") == "[]"
        assert (tmp_path / "data" / "projects.json").exists()
        assert not list((tmp_path / "data").glob("*.tmp"))

        store.delete("projects")
        store.delete("projects")
        assert store.get("projects") is None

    def test_overwrite(self, tmp_path):
        store = FileBlobStore(tmp_path)
        store.set("k", "one")
        store.set("k", "two")
        assert store.get("k") == "two"

    def test_invalid_key(self, tmp_path):
        with pytest.raises(ValueError):
            FileBlobStore(tmp_path).get("../etc/passwd")


class TestProjectPersistence:
    def test_empty_store(self):
        persistence = ProjectPersistence(InMemoryBlobStore())
        assert persistence.load() == []
        assert persistence.load_last_active_project_id() is None

    def test_save_and_load(self, tmp_path, sample_project):
        persistence = ProjectPersistence(FileBlobStore(tmp_path))
        persistence.save([sample_project])
        persistence.save_last_active_project_id("p1")

        reloaded = ProjectPersistence(FileBlobStore(tmp_path))
        assert reloaded.load() == [sample_project]
        assert reloaded.load_last_active_project_id() == "p1"

    def test_clearing_last_active(self):
        store = InMemoryBlobStore()
        persistence = ProjectPersistence(store)
        persistence.save_last_active_project_id("p1")
        persistence.save_last_active_project_id(None)
        assert store.get("last_active_project_id") is None

    def test_corrupt_projects(self):
        store = InMemoryBlobStore()
        store.set("projects", '[{"id": "p1"}]')
        with pytest.raises(ValueError, match="corrupt"):
            ProjectPersistence(store).load()
