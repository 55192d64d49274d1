"""
╔══════════════════════════════════════════════════════════════════════════════╗
║  OwlDoor CRM - Record Store                                                  ║
║                                                                              ║
║  Generic table interface over MongoDB (Motor):                               ║
║    select / get / insert / update / swap / upsert / delete / increment       ║
║                                                                              ║
║  RULES:                                                                      ║
║  - every record is keyed by an opaque string `id` (uuid4)                    ║
║  - Mongo `_id` is never returned                                             ║
║  - no retries; a failure surfaces once as RecordStoreError                   ║
║  - increment ($inc) and swap ($set, returns previous row) are single         ║
║    atomic operations (no client read-modify-write)                           ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from config import new_id, now_iso
from services.errors import RecordStoreError, RecordNotFound

logger = logging.getLogger("record_store")

NO_MONGO_ID = {"_id": 0}

DEFAULT_SELECT_LIMIT = 1000


class RecordStore:

    def __init__(self, database):
        self.db = database

    # ---------------- reads ----------------

    async def select(
        self,
        table: str,
        filter: Optional[Dict[str, Any]] = None,
        order: Optional[Sequence[Tuple[str, int]]] = None,
        limit: int = DEFAULT_SELECT_LIMIT,
    ) -> List[Dict[str, Any]]:
        try:
            cursor = self.db[table].find(filter or {}, NO_MONGO_ID)
            if order:
                cursor = cursor.sort(list(order))
            return await cursor.to_list(limit)
        except PyMongoError as e:
            logger.error(f"[STORE] select {table} failed: {e}")
            raise RecordStoreError(f"Failed to load {table}") from e

    async def find_one(self, table: str, filter: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            return await self.db[table].find_one(filter, NO_MONGO_ID)
        except PyMongoError as e:
            logger.error(f"[STORE] find_one {table} failed: {e}")
            raise RecordStoreError(f"Failed to load {table}") from e

    async def get(self, table: str, record_id: str) -> Dict[str, Any]:
        doc = await self.find_one(table, {"id": record_id})
        if not doc:
            raise RecordNotFound(f"Record {record_id} not found in {table}")
        return doc

    # ---------------- writes ----------------

    async def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]:
        now = now_iso()
        doc = {"id": new_id(), "created_at": now, "updated_at": now}
        doc.update(row)
        try:
            # insert_one adds _id to the dict it receives
            await self.db[table].insert_one(dict(doc))
        except PyMongoError as e:
            logger.error(f"[STORE] insert {table} failed: {e}")
            raise RecordStoreError(f"Failed to create {table} record") from e
        return doc

    async def update(
        self,
        table: str,
        patch: Dict[str, Any],
        match: Dict[str, Any],
        many: bool = False,
    ) -> int:
        """
        $set `patch` on the matching row(s).
        Single-row updates raise RecordNotFound when nothing matched.
        """
        data = dict(patch)
        data.pop("id", None)
        data["updated_at"] = now_iso()
        try:
            if many:
                result = await self.db[table].update_many(match, {"$set": data})
            else:
                result = await self.db[table].update_one(match, {"$set": data})
        except PyMongoError as e:
            logger.error(f"[STORE] update {table} {match} failed: {e}")
            raise RecordStoreError(f"Failed to update {table}") from e

        if not many and result.matched_count == 0:
            raise RecordNotFound(f"No {table} record matches {match}")
        return result.matched_count

    async def swap(self, table: str, patch: Dict[str, Any], match: Dict[str, Any]) -> Dict[str, Any]:
        """
        $set `patch` on one row and return the row as it was BEFORE the write.
        Read and write are one operation: two concurrent swaps never see the
        same previous value.
        """
        data = dict(patch)
        data.pop("id", None)
        data["updated_at"] = now_iso()
        try:
            previous = await self.db[table].find_one_and_update(
                match,
                {"$set": data},
                projection=NO_MONGO_ID,
                return_document=ReturnDocument.BEFORE,
            )
        except PyMongoError as e:
            logger.error(f"[STORE] swap {table} {match} failed: {e}")
            raise RecordStoreError(f"Failed to update {table}") from e

        if previous is None:
            raise RecordNotFound(f"No {table} record matches {match}")
        return previous

    async def upsert(
        self,
        table: str,
        row: Dict[str, Any],
        conflict_keys: Sequence[str],
    ) -> Dict[str, Any]:
        """
        Insert or overwrite-in-place on the unique key `conflict_keys`.
        Writing the same key twice leaves exactly one row.
        """
        missing = [k for k in conflict_keys if row.get(k) is None]
        if missing:
            raise RecordStoreError(f"Upsert on {table} is missing key fields {missing}")

        key = {k: row[k] for k in conflict_keys}
        now = now_iso()
        data = {k: v for k, v in row.items() if k not in ("id", "created_at")}
        data["updated_at"] = now
        try:
            await self.db[table].update_one(
                key,
                {"$set": data, "$setOnInsert": {"id": new_id(), "created_at": now}},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"[STORE] upsert {table} {key} failed: {e}")
            raise RecordStoreError(f"Failed to save {table}") from e
        return await self.find_one(table, key)

    async def delete(self, table: str, match: Dict[str, Any]) -> int:
        try:
            result = await self.db[table].delete_one(match)
        except PyMongoError as e:
            logger.error(f"[STORE] delete {table} {match} failed: {e}")
            raise RecordStoreError(f"Failed to delete {table} record") from e
        return result.deleted_count

    async def increment(
        self,
        table: str,
        match: Dict[str, Any],
        deltas: Dict[str, float],
        guard: Optional[Dict[str, Any]] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Atomic `$inc` of numeric columns (UPDATE ... SET x = x + ?).
        `guard` adds conditions evaluated in the same operation.
        Returns the updated row, or None when match/guard selected nothing.
        """
        query = dict(match)
        if guard:
            query.update(guard)
        try:
            return await self.db[table].find_one_and_update(
                query,
                {"$inc": deltas, "$set": {"updated_at": now_iso()}},
                projection=NO_MONGO_ID,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            logger.error(f"[STORE] increment {table} {match} failed: {e}")
            raise RecordStoreError(f"Failed to update {table}") from e


@contextmanager
def store_failure(message: str):
    """
    Re-label store failures with the action-specific notification text.
    RecordNotFound keeps its own message.
    """
    try:
        yield
    except RecordNotFound:
        raise
    except RecordStoreError as e:
        raise RecordStoreError(message) from e


# ==================== SHARED INSTANCE ====================

_store: Optional[RecordStore] = None


def get_store() -> RecordStore:
    global _store
    if _store is None:
        from config import db

        _store = RecordStore(db)
    return _store


def set_store(store: Optional[RecordStore]) -> None:
    global _store
    _store = store
