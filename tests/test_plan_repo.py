"""Tests for the MongoDB plan store (collection mocked)."""

from unittest.mock import MagicMock

import pytest
from pymongo.errors import OperationFailure, PyMongoError

from conftest import make_plan_document

from practice_core import plan_repo
from practice_core.errors import PlanNotFoundError, TransactionConflictError
from practice_core.plan_repo import MongoPlanStore
from practice_core.schemas import SessionProgress


def _collection(document=None):
    collection = MagicMock()
    collection.find_one.return_value = document
    session = MagicMock()
    session.with_transaction.side_effect = lambda callback, **kwargs: callback(session)
    collection.database.client.start_session.return_value.__enter__.return_value = session
    return collection, session


def test_get_plan():
    collection, _ = _collection(make_plan_document())
    plan = MongoPlanStore(collection).get_plan("plan-1")
    assert plan.id == "plan-1"
    collection.find_one.assert_called_once_with({"_id": "plan-1"})


def test_get_plan_missing():
    collection, _ = _collection(None)
    with pytest.raises(PlanNotFoundError):
        MongoPlanStore(collection).get_plan("plan-1")


def test_transaction_replaces_document_in_session():
    collection, session = _collection(make_plan_document())
    store = MongoPlanStore(collection)

    committed = store.with_transaction("plan-1", lambda plan: plan.model_copy(update={"status": "paused"}))

    assert committed is True
    collection.find_one.assert_called_once_with({"_id": "plan-1"}, session=session)
    (query, document), kwargs = collection.replace_one.call_args
    assert query == {"_id": "plan-1"}
    assert document["_id"] == "plan-1"
    assert document["status"] == "paused"
    assert "reviewQueue" in document
    assert kwargs == {"session": session}


def test_transaction_without_update_skips_write():
    collection, _ = _collection(make_plan_document())
    assert MongoPlanStore(collection).with_transaction("plan-1", lambda plan: None) is False
    collection.replace_one.assert_not_called()


def test_transaction_missing_plan():
    collection, _ = _collection(None)
    with pytest.raises(PlanNotFoundError):
        MongoPlanStore(collection).with_transaction("plan-1", lambda plan: plan)
    collection.replace_one.assert_not_called()


@pytest.mark.parametrize("label", ["TransientTransactionError", "UnknownTransactionCommitResult"])
def test_transient_failures_become_conflicts(label):
    collection, session = _collection(make_plan_document())
    session.with_transaction.side_effect = PyMongoError("write conflict", error_labels=[label])

    with pytest.raises(TransactionConflictError) as excinfo:
        MongoPlanStore(collection).with_transaction("plan-1", lambda plan: plan)
    assert excinfo.value.plan_id == "plan-1"


def test_other_driver_errors_propagate():
    collection, session = _collection(make_plan_document())
    session.with_transaction.side_effect = OperationFailure("not authorized")

    with pytest.raises(OperationFailure):
        MongoPlanStore(collection).with_transaction("plan-1", lambda plan: plan)


def test_find_active_plan_id():
    collection, _ = _collection({"_id": "plan-1"})
    assert MongoPlanStore(collection).find_active_plan_id("student-1") == "plan-1"
    collection.find_one.assert_called_once_with(
        {"studentId": "student-1", "status": "active"},
        projection={"_id": 1},
    )


def test_find_active_plan_id_none():
    collection, _ = _collection(None)
    assert MongoPlanStore(collection).find_active_plan_id("student-1") is None


def test_get_collection_requires_uri(monkeypatch):
    monkeypatch.setattr(plan_repo, "_client", None)
    monkeypatch.setattr(plan_repo, "_collection", None)
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(ValueError):
        plan_repo.get_collection()


def test_get_collection_builds_pooled_client(monkeypatch):
    client = MagicMock()
    factory = MagicMock(return_value=client)
    monkeypatch.setattr(plan_repo, "MongoClient", factory)
    monkeypatch.setattr(plan_repo, "_client", None)
    monkeypatch.setattr(plan_repo, "_collection", None)
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("PRACTICE_DB_NAME", "practice_test")

    collection = plan_repo.get_collection()

    assert factory.call_args.args == ("mongodb://localhost:27017",)
    assert factory.call_args.kwargs["tz_aware"] is True
    client.__getitem__.assert_called_once_with("practice_test")
    assert plan_repo.get_collection() is collection
    factory.assert_called_once()


def test_save_session_progress_upserts_by_plan_id():
    collection, _ = _collection({"_id": "plan-1"})
    sessions = MagicMock()
    store = MongoPlanStore(collection, sessions)

    store.save_session_progress(SessionProgress(plan_id="plan-1", current_index=3))

    (query, document), kwargs = sessions.replace_one.call_args
    assert query == {"_id": "plan-1"}
    assert document["_id"] == "plan-1"
    assert document["currentIndex"] == 3
    assert kwargs == {"upsert": True}


def test_save_session_progress_requires_plan():
    collection, _ = _collection(None)
    sessions = MagicMock()
    with pytest.raises(PlanNotFoundError):
        MongoPlanStore(collection, sessions).save_session_progress(SessionProgress(plan_id="plan-1"))
    sessions.replace_one.assert_not_called()


def test_get_and_clear_session_progress():
    collection, _ = _collection()
    sessions = MagicMock()
    sessions.find_one.return_value = {"_id": "plan-1", "planId": "plan-1", "currentIndex": 2}
    store = MongoPlanStore(collection, sessions)

    assert store.get_session_progress("plan-1").current_index == 2
    sessions.find_one.return_value = None
    assert store.get_session_progress("plan-1") is None

    store.clear_session_progress("plan-1")
    sessions.delete_one.assert_called_once_with({"_id": "plan-1"})


def test_sessions_collection_shares_client(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(plan_repo, "MongoClient", MagicMock(return_value=client))
    monkeypatch.setattr(plan_repo, "_client", None)
    monkeypatch.setattr(plan_repo, "_collection", None)
    monkeypatch.setattr(plan_repo, "_sessions_collection", None)
    monkeypatch.setenv("MONGO_URI", "mongodb://localhost:27017")
    monkeypatch.setenv("SESSIONS_COLLECTION", "sessions_test")

    plan_repo.get_collection()
    plan_repo.get_sessions_collection()

    plan_repo.MongoClient.assert_called_once()
    client.__getitem__.return_value.__getitem__.assert_any_call("sessions_test")
