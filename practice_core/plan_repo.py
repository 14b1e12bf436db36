"""
MongoDB repository for plan documents.

One document per plan in the plans collection. Grading batches run as
multi-document transactions (requires a replica set or sharded cluster);
pymongo's with_transaction retries transient errors and commit results
with unknown outcome on its own.

Saved practice sessions live in a separate collection, keyed by plan id.
"""

from __future__ import annotations

from typing import Optional

from loguru import logger
from pymongo import MongoClient
from pymongo.client_session import ClientSession
from pymongo.collection import Collection
from pymongo.errors import PyMongoError
from pymongo.read_concern import ReadConcern
from pymongo.write_concern import WriteConcern

from practice_core.config import (
    get_collection_name,
    get_db_name,
    get_mongo_uri,
    get_sessions_collection_name,
)
from practice_core.errors import PlanNotFoundError, TransactionConflictError
from practice_core.plan_store import PlanStore, TransactionBody
from practice_core.schemas import Plan, SessionProgress


# Error labels pymongo attaches to retriable transaction failures
RETRIABLE_LABELS = ("TransientTransactionError", "UnknownTransactionCommitResult")

# Global connection pool (reused across requests)
_client: Optional[MongoClient] = None
_collection: Optional[Collection] = None
_sessions_collection: Optional[Collection] = None


# ---- Connection Management ----

def get_client() -> MongoClient:
    """
    Get the shared MongoClient, creating the connection pool on first use.

    Raises:
        ValueError: If MONGO_URI is not set
    """
    global _client

    if _client is None:
        _client = MongoClient(
            get_mongo_uri(),
            maxPoolSize=10,
            minPoolSize=1,
            maxIdleTimeMS=60000,
            tz_aware=True,
        )
    return _client


def get_collection() -> Collection:
    """
    Get the MongoDB plans collection.

    Uses a persistent connection pool that's reused across requests.

    Returns:
        MongoDB collection object
    """
    global _collection

    if _collection is None:
        _collection = get_client()[get_db_name()][get_collection_name()]
    return _collection


def get_sessions_collection() -> Collection:
    """Get the collection holding saved practice sessions (one per plan)."""
    global _sessions_collection

    if _sessions_collection is None:
        _sessions_collection = get_client()[get_db_name()][get_sessions_collection_name()]
    return _sessions_collection


# ---- Store ----

class MongoPlanStore(PlanStore):
    """
    PlanStore backed by a MongoDB collection.
    """

    def __init__(
        self,
        collection: Optional[Collection] = None,
        sessions_collection: Optional[Collection] = None
    ):
        self._collection = collection
        self._sessions_collection = sessions_collection

    @property
    def collection(self) -> Collection:
        if self._collection is None:
            self._collection = get_collection()
        return self._collection

    @property
    def sessions_collection(self) -> Collection:
        if self._sessions_collection is None:
            self._sessions_collection = get_sessions_collection()
        return self._sessions_collection

    def get_plan(self, plan_id: str) -> Plan:
        document = self.collection.find_one({"_id": plan_id})
        if document is None:
            raise PlanNotFoundError(plan_id)
        return Plan.from_document(document)

    def with_transaction(self, plan_id: str, fn: TransactionBody) -> bool:
        collection = self.collection

        def callback(session: ClientSession) -> bool:
            document = collection.find_one({"_id": plan_id}, session=session)
            if document is None:
                raise PlanNotFoundError(plan_id)
            updated = fn(Plan.from_document(document))
            if updated is None:
                return False
            collection.replace_one({"_id": plan_id}, updated.to_document(), session=session)
            return True

        try:
            with collection.database.client.start_session() as session:
                return session.with_transaction(
                    callback,
                    read_concern=ReadConcern("snapshot"),
                    write_concern=WriteConcern("majority"),
                )
        except PyMongoError as exc:
            if any(exc.has_error_label(label) for label in RETRIABLE_LABELS):
                logger.warning("Plan {}: transaction gave up after driver retries: {}", plan_id, exc)
                raise TransactionConflictError(plan_id) from exc
            raise

    def find_active_plan_id(self, student_id: str) -> Optional[str]:
        document = self.collection.find_one(
            {"studentId": student_id, "status": "active"},
            projection={"_id": 1},
        )
        if document is None:
            return None
        return document["_id"]

    # ---- Session progress ----

    def save_session_progress(self, progress: SessionProgress) -> None:
        plan_id = progress.plan_id
        if self.collection.find_one({"_id": plan_id}, projection={"_id": 1}) is None:
            raise PlanNotFoundError(plan_id)
        document = {**progress.to_document(), "_id": plan_id}
        self.sessions_collection.replace_one({"_id": plan_id}, document, upsert=True)

    def get_session_progress(self, plan_id: str) -> Optional[SessionProgress]:
        document = self.sessions_collection.find_one({"_id": plan_id})
        if document is None:
            return None
        document.pop("_id", None)
        return SessionProgress.from_document(document)

    def clear_session_progress(self, plan_id: str) -> None:
        self.sessions_collection.delete_one({"_id": plan_id})
