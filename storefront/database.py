from __future__ import annotations
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Generic, Optional, Protocol, TypeVar
from pydantic import TypeAdapter, ValidationError
from pymongo import MongoClient
from pymongo.errors import PyMongoError

from .config import Settings, settings as default_settings
from .errors import StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T")

class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def close(self) -> None: ...

class MemoryStorage:
    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def close(self) -> None:
        pass

class JsonFileStorage:
    """One ``<key>.json`` file per key under ``directory``."""

    def __init__(self, directory: str | Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            tmp = path.with_suffix(".tmp")
            tmp.write_text(value, encoding="utf-8")
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e

    def close(self) -> None:
        pass

class MongoStorage:
    """Each key is one document ``{_id: key, value, updated_at}``."""

    def __init__(self, collection: Any, client: Optional[MongoClient] = None):
        self.collection = collection
        self.client = client

    @classmethod
    def from_settings(cls, cfg: Settings) -> "MongoStorage":
        client = MongoClient(cfg.DATABASE_URL)
        return cls(client[cfg.DATABASE_NAME]["storage"], client)

    def close(self) -> None:
        if self.client is not None:
            self.client.close()
            self.client = None

    def get(self, key: str) -> Optional[str]:
        try:
            doc = self.collection.find_one({"_id": key})
        except PyMongoError as e:
            raise StorageError(f"Cannot read {key}: {e}") from e
        return doc.get("value") if doc else None

    def set(self, key: str, value: str) -> None:
        now = datetime.now(timezone.utc)
        try:
            self.collection.update_one(
                {"_id": key},
                {"$set": {"value": value, "updated_at": now}},
                upsert=True,
            )
        except PyMongoError as e:
            raise StorageError(f"Cannot write {key}: {e}") from e

def get_storage(cfg: Settings | None = None) -> KeyValueStorage:
    cfg = cfg or default_settings
    if cfg.STORAGE_BACKEND == "memory":
        return MemoryStorage()
    if cfg.STORAGE_BACKEND == "mongo":
        return MongoStorage.from_settings(cfg)
    return JsonFileStorage(cfg.STORAGE_DIR)

# Tolerant loading

@dataclass(frozen=True)
class LoadResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap_or(self, default: T) -> T:
        if self.error is not None or self.value is None:
            return default
        return self.value

def load_document(storage: KeyValueStorage, key: str, adapter: TypeAdapter[T]) -> LoadResult[T]:
    """Read and validate the JSON document under ``key``.

    Never raises: absence yields an ok result with no value, anything
    unreadable or invalid yields a failed result carrying the reason.
    """
    try:
        raw = storage.get(key)
    except StorageError as e:
        return LoadResult(error=str(e))
    if raw is None:
        return LoadResult()
    try:
        return LoadResult(value=adapter.validate_python(json.loads(raw)))
    except (ValueError, TypeError, ValidationError) as e:
        return LoadResult(error=f"malformed {key!r} document: {e}")

def save_document(storage: KeyValueStorage, key: str, document: Any) -> bool:
    """Serialize and write ``document``; failures are logged, not raised."""
    try:
        storage.set(key, json.dumps(document, ensure_ascii=False))
    except StorageError as e:
        logger.error("Failed to persist %s: %s", key, e)
        return False
    return True
