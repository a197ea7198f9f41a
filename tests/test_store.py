from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from rupay.models.status import InvestmentStatus
from rupay.services.store import DocumentStore
from rupay.utils.exceptions import NotFoundError, StoreUnavailableError, ValidationError

from conftest import make_pending


class _BrokenQuery:
    def filter(self, *args):
        return self

    def order_by(self, *args):
        return self

    def limit(self, n):
        return self

    def with_for_update(self):
        return self

    def all(self):
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    one_or_none = all


class _BrokenSession:
    def __init__(self):
        self.rolled_back = False

    def query(self, model):
        return _BrokenQuery()

    def add(self, record):
        pass

    def commit(self):
        raise OperationalError("INSERT", {}, Exception("connection refused"))

    def rollback(self):
        self.rolled_back = True


@pytest.fixture
def store(app):
    return DocumentStore()


def test_query_filters_ordering_and_limit(store, investor):
    small = make_pending(investor.uid, "advance", 1000)
    mid = make_pending(investor.uid, "advance", 5000)
    big = make_pending(investor.uid, "premium", 20000)

    found = store.query(
        "investments",
        [("investment_amount", ">=", Decimal("5000")), ("user_id", "==", investor.uid)],
        ordering=[("investment_amount", "desc")],
    )
    assert [i.id for i in found] == [big.id, mid.id]

    found = store.query("investments", [("plan_id", "in", ["advance"])],
                        ordering=[("investment_amount", "asc")], limit=1)
    assert [i.id for i in found] == [small.id]

    assert store.query("investments", [("plan_id", "!=", "advance")])[0].id == big.id


def test_query_with_no_match_returns_empty(store):
    assert store.query("withdrawals", [("status", "==", "pending")]) == []


def test_create_then_update_round_trips(store, investor):
    inv = make_pending(investor.uid)

    assert store.update("investments", inv.id, {"rejection_reason": "note"}) is None
    assert store.get("investments", inv.id).rejection_reason == "note"


def test_unknown_collection_field_and_operator(store):
    with pytest.raises(ValidationError) as exc:
        store.query("payments")
    assert exc.value.code == "UNKNOWN_COLLECTION"

    with pytest.raises(ValidationError) as exc:
        store.query("investments", [("nonexistent", "==", 1)])
    assert exc.value.code == "UNKNOWN_FIELD"

    with pytest.raises(ValidationError) as exc:
        store.query("investments", [("status", "~=", "pending")])
    assert exc.value.code == "UNKNOWN_OPERATOR"

    # properties are not columns
    with pytest.raises(ValidationError):
        store.query("investments", ordering=[("maturity_date", "asc")])


def test_get_missing_record_is_not_found(store):
    with pytest.raises(NotFoundError) as exc:
        store.get("investments", "inv-missing")
    assert exc.value.message == "Investment not found"
    assert exc.value.details == {"collection": "investments", "id": "inv-missing"}


def test_update_missing_record_is_not_found(store):
    with pytest.raises(NotFoundError):
        store.update("withdrawals", "wd_missing", {"transaction_id": "TRX1"})


def test_unreachable_store_raises_and_rolls_back(app):
    session = _BrokenSession()
    store = DocumentStore(session=session)

    with pytest.raises(StoreUnavailableError) as exc:
        store.query("investments", [("status", "==", InvestmentStatus.PENDING)])
    assert exc.value.status == 503
    assert session.rolled_back

    with pytest.raises(StoreUnavailableError):
        store.get("users", "usr-1")


def test_failed_write_surfaces_as_store_unavailable(app):
    session = _BrokenSession()
    store = DocumentStore(session=session)

    with pytest.raises(StoreUnavailableError) as exc:
        store.create("users", {"email": "a@example.com", "password_hash": "x"})
    assert exc.value.details == {"collection": "users", "action": "create"}
    assert session.rolled_back
