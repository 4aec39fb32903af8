import json
import logging
import os

import pytest

from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import WriteFailed
from projingest.settings import JsonFileStore, MemoryStore, PatternMemory, RecentFolders, folder_key


@pytest.fixture
def folders(tmp_path):
    """Create a handful of real directories for the recents list."""
    paths = []
    for name in ("alpha", "beta", "gamma", "delta"):
        path = tmp_path / name
        path.mkdir()
        paths.append(str(path))
    return paths


def test_memory_store():
    store = MemoryStore({"a": 1})
    assert store.get("a") == 1
    assert store.get("b") is None
    store.set("b", [1, 2])
    assert store.get("b") == [1, 2]
    store.delete("b")
    store.delete("missing")
    assert store.get("b", "fallback") == "fallback"


def test_json_file_store_persists(tmp_path):
    path = tmp_path / "settings" / "projingest.json"

    store = JsonFileStore(path)
    assert store.get("x") is None
    store.set("x", {"nested": True})
    store.set("y", "value")
    store.delete("y")

    assert json.loads(path.read_text(encoding="utf-8")) == {"x": {"nested": True}}
    assert JsonFileStore(path).get("x") == {"nested": True}
    assert not (tmp_path / "settings" / "projingest.json.tmp").exists()


def test_json_file_store_ignores_corrupt_file(tmp_path, caplog):
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")

    with caplog.at_level(logging.WARNING):
        store = JsonFileStore(path)

    assert store.get("anything") is None
    assert "Ignoring unreadable settings file" in caplog.text

    store.set("k", "v")
    assert json.loads(path.read_text(encoding="utf-8")) == {"k": "v"}


def test_json_file_store_ignores_non_object(tmp_path):
    path = tmp_path / "settings.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert JsonFileStore(path).get("0") is None


def test_json_file_store_write_failure(tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory", encoding="utf-8")
    store = JsonFileStore(blocker / "settings.json")

    with pytest.raises(WriteFailed) as exc_info:
        store.set("k", "v")

    assert exc_info.value.path == str(blocker / "settings.json")


def test_folder_key_is_stable_per_folder():
    assert folder_key("excludePatterns", "/srv/app") == "excludePatterns-c5dbc625954963fc29b20852d96ccc395bdf82ad"
    assert folder_key("excludePatterns", "/srv/app") == folder_key("excludePatterns", "/srv/app/")
    assert folder_key("excludePatterns", "/srv/app") != folder_key("includePatterns", "/srv/app")
    assert folder_key("excludePatterns", "/srv/app") != folder_key("excludePatterns", "/srv/other")


def test_folder_key_uses_absolute_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    assert folder_key("p", "project") == folder_key("p", tmp_path / "project")


def test_pattern_memory_round_trip():
    store = MemoryStore()
    memory = PatternMemory(store)

    assert memory.load_exclude("/srv/app") is None
    assert memory.load_include("/srv/app") is None

    memory.save("/srv/app", "# Exclude files/folders\nbuild/", "src/*.go")

    assert memory.load_exclude("/srv/app") == "# Exclude files/folders\nbuild/"
    assert memory.load_include("/srv/app") == "src/*.go"
    assert store.get(folder_key("includePatterns", "/srv/app")) == "src/*.go"
    assert memory.load_exclude("/srv/other") is None


def test_pattern_memory_empty_block_is_remembered():
    memory = PatternMemory(MemoryStore())
    memory.save("/srv/app", "", "")
    # An empty block differs from "never saved"
    assert memory.load_exclude("/srv/app") == ""


def test_pattern_memory_forget():
    memory = PatternMemory(MemoryStore())
    memory.save("/srv/app", "build/", "*.py")
    memory.forget("/srv/app")
    assert memory.load_exclude("/srv/app") is None
    assert memory.load_include("/srv/app") is None


def test_recent_folders_most_recent_first(folders):
    recents = RecentFolders(MemoryStore())
    for folder in folders[:3]:
        recents.add(folder)

    assert recents.folders == [folders[2], folders[1], folders[0]]
    assert recents.most_recent == folders[2]
    assert len(recents) == 3
    assert folders[0] in recents
    assert folders[3] not in recents
    assert 42 not in recents


def test_recent_folders_no_duplicates(folders):
    recents = RecentFolders(MemoryStore())
    recents.add(folders[0])
    recents.add(folders[1])
    recents.add(folders[0])

    assert recents.folders == [folders[0], folders[1]]


def test_recent_folders_move_to_top(folders):
    recents = RecentFolders(MemoryStore())
    for folder in folders[:3]:
        recents.add(folder)

    recents.move_to_top(folders[0])

    assert recents.folders == [folders[0], folders[2], folders[1]]


def test_recent_folders_limit(folders):
    recents = RecentFolders(MemoryStore(), limit=2)
    for folder in folders:
        recents.add(folder)

    assert recents.folders == [folders[3], folders[2]]


def test_recent_folders_invalid_limit():
    with pytest.raises(ValueError):
        RecentFolders(MemoryStore(), limit=0)


def test_recent_folders_persist(folders):
    store = MemoryStore()
    recents = RecentFolders(store)
    recents.add(folders[0])
    recents.add(folders[1])

    assert store.get(RecentFolders.KEY) == [folders[1], folders[0]]
    assert RecentFolders(store).folders == [folders[1], folders[0]]


def test_recent_folders_drop_missing_on_load(folders, tmp_path):
    missing = str(tmp_path / "gone")
    store = MemoryStore({RecentFolders.KEY: [folders[0], missing, folders[0], 7]})
    diagnostics = DiagnosticLog()

    recents = RecentFolders(store, diagnostics=diagnostics)

    assert recents.folders == [folders[0]]
    warnings = diagnostics.at_least(logging.WARNING)
    assert len(warnings) == 2
    assert warnings[0].message == f"Recent folder is no longer available, skipping: {missing}"


def test_recent_folders_load_respects_limit(folders):
    store = MemoryStore({RecentFolders.KEY: folders})
    assert RecentFolders(store, limit=3).folders == folders[:3]


def test_recent_folders_remove_and_clear(folders):
    store = MemoryStore()
    recents = RecentFolders(store)
    for folder in folders[:3]:
        recents.add(folder)

    recents.remove(folders[1])
    assert recents.folders == [folders[2], folders[0]]

    recents.clear()
    assert recents.folders == []
    assert recents.most_recent is None
    assert store.get(RecentFolders.KEY) is None


def test_recent_folders_store_paths_absolute(tmp_path, monkeypatch):
    (tmp_path / "project").mkdir()
    monkeypatch.chdir(tmp_path)

    recents = RecentFolders(MemoryStore())
    recents.add("project")

    assert recents.folders == [os.path.join(str(tmp_path), "project")]
    assert "project" in recents
