"""Persistent settings through an injected key-value store.

The core never reads or writes persistent storage by itself. Everything that
survives a session (the pattern blocks last used for a folder, the list of
recently opened folders) goes through a KeyValueStore supplied by the caller.
"""

import hashlib
import json
import logging
import os
import threading
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from projingest.config import DEFAULT_RECENTS_LIMIT
from projingest.diagnostics import DiagnosticLog
from projingest.exceptions import WriteFailed
from projingest.file_system_tree.file_system import resolve_path
from projingest.types import PathType

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """What projingest needs from a settings backend. Values are JSON-compatible."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    def delete(self, key: str) -> None:
        ...


class MemoryStore:
    """KeyValueStore held in memory; nothing survives the process.

    Example:
        >>> store = MemoryStore()
        >>> store.set("theme", "dark")
        >>> store.get("theme")
        'dark'
        >>> store.delete("theme")
        >>> store.get("theme", "light")
        'light'
    """

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """KeyValueStore persisted as a single JSON object in a file.

    The file is read once on construction and rewritten on every change. A
    missing file starts an empty store; a corrupt one is ignored with a warning
    and replaced on the next write.

    Attributes:
        path (Path): Location of the JSON file.

    Raises:
        WriteFailed: From set() or delete(), if the file cannot be written.
    """

    def __init__(self, path: PathType) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: top level is not an object", self.path)
            return {}
        return data

    def _save(self) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise WriteFailed(str(self.path), e.strerror or str(e)) from e

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._data[key] = value
            self._save()

    def delete(self, key: str) -> None:
        with self._lock:
            if key in self._data:
                del self._data[key]
                self._save()


def folder_key(prefix: str, folder: PathType) -> str:
    """Build a per-folder store key from a prefix and the folder's absolute path.

    Example:
        >>> folder_key("excludePatterns", "/srv/app")
        'excludePatterns-c5dbc625954963fc29b20852d96ccc395bdf82ad'
    """
    digest = hashlib.sha1(str(resolve_path(folder)).encode("utf-8")).hexdigest()
    return f"{prefix}-{digest}"


class PatternMemory:
    """Remembers the exclude and include blocks last used for each folder.

    Example:
        >>> memory = PatternMemory(MemoryStore())
        >>> memory.save("/srv/app", "build/", "")
        >>> memory.load_exclude("/srv/app")
        'build/'
        >>> memory.load_exclude("/srv/other") is None
        True
    """

    EXCLUDE_PREFIX = "excludePatterns"
    INCLUDE_PREFIX = "includePatterns"

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load_exclude(self, folder: PathType) -> Optional[str]:
        return self.store.get(folder_key(self.EXCLUDE_PREFIX, folder))

    def load_include(self, folder: PathType) -> Optional[str]:
        return self.store.get(folder_key(self.INCLUDE_PREFIX, folder))

    def save(self, folder: PathType, exclude_block: str, include_block: str) -> None:
        self.store.set(folder_key(self.EXCLUDE_PREFIX, folder), exclude_block)
        self.store.set(folder_key(self.INCLUDE_PREFIX, folder), include_block)

    def forget(self, folder: PathType) -> None:
        self.store.delete(folder_key(self.EXCLUDE_PREFIX, folder))
        self.store.delete(folder_key(self.INCLUDE_PREFIX, folder))


class RecentFolders:
    """Most-recently-used list of opened folders.

    The list is kept most recent first, without duplicates, and capped at
    ``limit`` entries. It is loaded from the store on construction; folders
    that no longer exist are dropped with a diagnostic.

    Attributes:
        store (KeyValueStore): Backend the list is persisted in.
        limit (int): Maximum number of folders kept.

    Example:
        >>> recents = RecentFolders(MemoryStore(), limit=2)  # doctest: +SKIP
        >>> recents.add("/srv/a"); recents.add("/srv/b"); recents.add("/srv/c")  # doctest: +SKIP
        >>> recents.folders  # doctest: +SKIP
        ['/srv/c', '/srv/b']
    """

    KEY = "recentFolders"

    def __init__(
        self,
        store: KeyValueStore,
        limit: int = DEFAULT_RECENTS_LIMIT,
        diagnostics: Optional[DiagnosticLog] = None,
    ) -> None:
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.store = store
        self.limit = limit
        self.diagnostics = diagnostics if diagnostics is not None else DiagnosticLog(__name__)
        self._folders: List[str] = []
        self.load()

    def load(self) -> None:
        """(Re)load the list from the store."""
        saved = self.store.get(self.KEY)
        if not saved:
            self.diagnostics.debug("No recent folders found.")
            self._folders = []
            return

        loaded = []
        for folder in saved:
            if not isinstance(folder, str) or not os.path.isdir(folder):
                self.diagnostics.warning(f"Recent folder is no longer available, skipping: {folder}")
                continue
            if folder not in loaded:
                loaded.append(folder)
        self._folders = loaded[: self.limit]
        self.diagnostics.debug(f"Loaded {len(self._folders)} recent folders.")

    def _save(self) -> None:
        self.store.set(self.KEY, list(self._folders))

    @property
    def folders(self) -> List[str]:
        return list(self._folders)

    @property
    def most_recent(self) -> Optional[str]:
        return self._folders[0] if self._folders else None

    def add(self, folder: PathType) -> None:
        """Put a folder at the top, removing any older entry for it."""
        path = str(resolve_path(folder))
        self._folders = [path] + [f for f in self._folders if f != path]
        del self._folders[self.limit :]
        self._save()

    def move_to_top(self, folder: PathType) -> None:
        """Move a known folder to the top. Unknown folders are added."""
        self.add(folder)

    def remove(self, folder: PathType) -> None:
        path = str(resolve_path(folder))
        self._folders = [f for f in self._folders if f != path]
        self._save()

    def clear(self) -> None:
        self._folders = []
        self.store.delete(self.KEY)
        self.diagnostics.info("Cleared all recent folders.")

    def __len__(self) -> int:
        return len(self._folders)

    def __contains__(self, folder: object) -> bool:
        if not isinstance(folder, (str, os.PathLike)):
            return False
        return str(resolve_path(folder)) in self._folders
