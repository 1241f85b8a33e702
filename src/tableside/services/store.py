"""
Document store used for sessions, menu items and orders.

Documents are plain dicts addressed by (collection, id). Every document
carries a ``version`` counter that ``update`` bumps, so callers can make a
write conditional on the version they read.
"""
import asyncio
import copy
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiohttp

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Raised when the backing store fails"""


class DocumentNotFoundError(StoreError):
    def __init__(self, collection: str, doc_id: str):
        super().__init__(f"Document {collection}/{doc_id} not found")
        self.collection = collection
        self.doc_id = doc_id


def _sort_key(doc: Dict[str, Any]):
    return (doc.get("sortOrder", 0), str(doc.get("id", "")))


class DocumentStore(ABC):
    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document with its version, or None"""

    @abstractmethod
    async def create(self, collection: str, doc_id: str, data: Dict[str, Any]) -> bool:
        """Create a document; False if it already exists"""

    @abstractmethod
    async def put(self, collection: str, doc_id: str, data: Dict[str, Any]) -> None:
        """Create or overwrite a document"""

    @abstractmethod
    async def update(self, collection: str, doc_id: str, changes: Dict[str, Any],
                     expected_version: Optional[int] = None) -> Optional[int]:
        """Merge changes into a document.

        Returns the new version, or None when ``expected_version`` is given
        and no longer matches the stored one.
        """

    @abstractmethod
    async def query(self, collection: str, **equals: Any) -> List[Dict[str, Any]]:
        """Return documents whose fields equal the given values"""


class InMemoryDocumentStore(DocumentStore):
    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._lock = asyncio.Lock()

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    async def get(self, collection, doc_id):
        async with self._lock:
            doc = self._collection(collection).get(doc_id)
            return copy.deepcopy(doc) if doc is not None else None

    async def create(self, collection, doc_id, data):
        async with self._lock:
            docs = self._collection(collection)
            if doc_id in docs:
                return False
            docs[doc_id] = {"id": doc_id, **copy.deepcopy(data), "version": 1}
            return True

    async def put(self, collection, doc_id, data):
        async with self._lock:
            docs = self._collection(collection)
            version = docs.get(doc_id, {}).get("version", 0) + 1
            docs[doc_id] = {"id": doc_id, **copy.deepcopy(data), "version": version}

    async def update(self, collection, doc_id, changes, expected_version=None):
        async with self._lock:
            doc = self._collection(collection).get(doc_id)
            if doc is None:
                raise DocumentNotFoundError(collection, doc_id)
            if expected_version is not None and doc["version"] != expected_version:
                return None
            doc.update(copy.deepcopy(changes))
            doc["version"] += 1
            return doc["version"]

    async def query(self, collection, **equals):
        async with self._lock:
            matches = [
                copy.deepcopy(doc) for doc in self._collection(collection).values()
                if all(doc.get(key) == value for key, value in equals.items())
            ]
        return sorted(matches, key=_sort_key)


class SupabaseDocumentStore(DocumentStore):
    """PostgREST-backed store.

    Each collection is a table with columns ``id text primary key``,
    ``data jsonb`` and ``version integer``.
    """

    def __init__(self, base_url: str, headers: Dict[str, str], timeout: float = 10.0):
        self.base_url = base_url.rstrip("/") + "/rest/v1"
        self.headers = headers
        self.timeout = aiohttp.ClientTimeout(total=timeout)

    async def _request(self, method: str, collection: str, params: Dict[str, str],
                       body: Any = None, prefer: Optional[str] = None) -> List[Dict[str, Any]]:
        headers = dict(self.headers)
        if prefer:
            headers["Prefer"] = prefer
        url = f"{self.base_url}/{collection}"
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.request(method, url, headers=headers, params=params,
                                           data=json.dumps(body) if body is not None else None) as response:
                    if response.status >= 400:
                        text = await response.text()
                        raise StoreError(f"{method} {collection} failed ({response.status}): {text}")
                    if response.status == 204:
                        return []
                    return await response.json()
        except aiohttp.ClientError as e:
            raise StoreError(f"{method} {collection} failed: {e}") from e

    @staticmethod
    def _unwrap(row: Dict[str, Any]) -> Dict[str, Any]:
        return {"id": row["id"], **(row.get("data") or {}), "version": row["version"]}

    async def get(self, collection, doc_id):
        rows = await self._request("GET", collection, {"id": f"eq.{doc_id}", "select": "id,data,version"})
        return self._unwrap(rows[0]) if rows else None

    async def create(self, collection, doc_id, data):
        rows = await self._request(
            "POST", collection, {},
            body={"id": doc_id, "data": {"id": doc_id, **data}, "version": 1},
            prefer="resolution=ignore-duplicates,return=representation",
        )
        return bool(rows)

    async def put(self, collection, doc_id, data):
        current = await self.get(collection, doc_id)
        version = (current or {}).get("version", 0) + 1
        await self._request(
            "POST", collection, {},
            body={"id": doc_id, "data": {"id": doc_id, **data}, "version": version},
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def update(self, collection, doc_id, changes, expected_version=None):
        current = await self.get(collection, doc_id)
        if current is None:
            raise DocumentNotFoundError(collection, doc_id)
        version = current.pop("version")
        if expected_version is not None and version != expected_version:
            return None
        current.update(changes)
        # The version filter makes the PATCH a compare-and-set
        rows = await self._request(
            "PATCH", collection,
            {"id": f"eq.{doc_id}", "version": f"eq.{version}"},
            body={"data": current, "version": version + 1},
            prefer="return=representation",
        )
        if not rows:
            return None
        return rows[0]["version"]

    async def query(self, collection, **equals):
        params = {"select": "id,data,version"}
        for key, value in equals.items():
            if isinstance(value, bool):
                value = str(value).lower()
            params[f"data->>{key}"] = f"eq.{value}"
        rows = await self._request("GET", collection, params)
        return sorted((self._unwrap(row) for row in rows), key=_sort_key)


def create_store(backend: str, supabase_url: str = "", headers: Optional[Dict[str, str]] = None) -> DocumentStore:
    """Build the store selected by configuration"""
    if backend == "supabase":
        logger.info(f"Using Supabase document store at {supabase_url}")
        return SupabaseDocumentStore(supabase_url, headers or {})
    logger.info("Using in-memory document store")
    return InMemoryDocumentStore()
