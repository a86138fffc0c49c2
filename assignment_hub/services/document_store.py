# FILE: assignment_hub/services/document_store.py
"""
Document store capability consumed by the core

Records are plain dicts keyed by collection and id. Every write bumps the
record's "version" so callers can detect concurrent edits; update() rejects a
write whose expected_version no longer matches.
"""
import asyncio
import copy
import json
import logging
import os
import uuid
import weakref
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiofiles

from assignment_hub.errors import AssignmentHubError, StoreUnavailable, VersionConflict

logger = logging.getLogger(__name__)


class DocumentNotFound(AssignmentHubError):
    """update() target does not exist"""

    status_code = 404


def _matches(record: Dict[str, Any], filters: Dict[str, Any]) -> bool:
    return all(record.get(field) == value for field, value in filters.items())


def _new_id() -> str:
    return uuid.uuid4().hex


class DocumentStore:
    """Base class for document stores"""

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError

    async def query(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        raise NotImplementedError

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        raise NotImplementedError

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None
    ) -> Dict[str, Any]:
        raise NotImplementedError


class InMemoryDocumentStore(DocumentStore):
    """Process-local store (tests, demos)"""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, collection: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        record = self._collection(collection).get(doc_id)
        return copy.deepcopy(record) if record is not None else None

    async def query(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        return [
            copy.deepcopy(record)
            for record in self._collection(collection).values()
            if _matches(record, filters)
        ]

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        doc_id = record.get("id") or _new_id()
        stored = copy.deepcopy(record)
        stored["id"] = doc_id
        stored["version"] = 1
        self._collection(collection)[doc_id] = stored
        logger.debug(f"Created {collection}/{doc_id}")
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None
    ) -> Dict[str, Any]:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFound(f"{collection}/{doc_id} not found")

        current = docs[doc_id]
        if expected_version is not None and current.get("version", 0) != expected_version:
            raise VersionConflict(
                f"{collection}/{doc_id} is at version {current.get('version', 0)}, expected {expected_version}",
                detail={"current_version": current.get("version", 0)}
            )

        updated = {**current, **copy.deepcopy(fields)}
        updated["id"] = doc_id
        updated["version"] = current.get("version", 0) + 1
        docs[doc_id] = updated
        logger.debug(f"Updated {collection}/{doc_id} -> v{updated['version']}")
        return copy.deepcopy(updated)


class JsonFileDocumentStore(DocumentStore):
    """
    One JSON file per document under <data_dir>/<collection>/<id>.json

    Writes go to a temp file and are swapped in with os.replace, so readers
    never see a half-written record. Read-check-write in update() is
    serialized per document within this process.
    """

    def __init__(self, data_dir: str):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        # Entries disappear once no update holds the lock
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _collection_dir(self, collection: str) -> Path:
        return self.data_dir / collection

    def _doc_path(self, collection: str, doc_id: str) -> Path:
        if not doc_id or "/" in doc_id or "\\" in doc_id or doc_id.startswith("."):
            raise DocumentNotFound(f"Invalid document id: {doc_id!r}")
        return self._collection_dir(collection) / f"{doc_id}.json"

    def _lock_for(self, collection: str, doc_id: str) -> asyncio.Lock:
        key = f"{collection}/{doc_id}"
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        return lock

    async def _read(self, path: Path) -> Optional[Dict[str, Any]]:
        if not path.exists():
            return None
        try:
            async with aiofiles.open(path, mode="r", encoding="utf-8") as f:
                return json.loads(await f.read())
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            raise StoreUnavailable(f"Could not read {path.name}") from e

    async def _write(self, path: Path, record: Dict[str, Any]):
        tmp_path = path.parent / f".{path.stem}.{uuid.uuid4().hex}.tmp"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(tmp_path, mode="w", encoding="utf-8") as f:
                await f.write(json.dumps(record, ensure_ascii=False, indent=2))
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to write {path}: {e}")
            if tmp_path.exists():
                tmp_path.unlink()
            raise StoreUnavailable(f"Could not write {path.name}") from e

    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        try:
            path = self._doc_path(collection, doc_id)
        except DocumentNotFound:
            return None
        return await self._read(path)

    async def query(self, collection: str, **filters: Any) -> List[Dict[str, Any]]:
        collection_dir = self._collection_dir(collection)
        if not collection_dir.exists():
            return []

        results = []
        for path in sorted(collection_dir.glob("*.json")):
            record = await self._read(path)
            if record is not None and _matches(record, filters):
                results.append(record)
        return results

    async def create(self, collection: str, record: Dict[str, Any]) -> str:
        doc_id = record.get("id") or _new_id()
        stored = {**record, "id": doc_id, "version": 1}
        await self._write(self._doc_path(collection, doc_id), stored)
        logger.debug(f"Created {collection}/{doc_id}")
        return doc_id

    async def update(
        self,
        collection: str,
        doc_id: str,
        fields: Dict[str, Any],
        expected_version: Optional[int] = None
    ) -> Dict[str, Any]:
        path = self._doc_path(collection, doc_id)
        async with self._lock_for(collection, doc_id):
            current = await self._read(path)
            if current is None:
                raise DocumentNotFound(f"{collection}/{doc_id} not found")

            if expected_version is not None and current.get("version", 0) != expected_version:
                raise VersionConflict(
                    f"{collection}/{doc_id} is at version {current.get('version', 0)}, expected {expected_version}",
                    detail={"current_version": current.get("version", 0)}
                )

            updated = {**current, **fields, "id": doc_id, "version": current.get("version", 0) + 1}
            await self._write(path, updated)

        logger.debug(f"Updated {collection}/{doc_id} -> v{updated['version']}")
        return updated


def create_document_store(backend: str, data_dir: str) -> DocumentStore:
    """Build the store selected by STORE_BACKEND"""
    if backend == "memory":
        return InMemoryDocumentStore()
    return JsonFileDocumentStore(data_dir)
