from datetime import timedelta

import pytest

from rupay.models.status import PaymentMethod, WithdrawalStatus
from rupay.services import investment_service, withdrawal_service
from rupay.services.store import DocumentStore
from rupay.utils.clock import utcnow
from rupay.utils.exceptions import InvalidStateError, NotFoundError, ValidationError

from conftest import make_pending, make_matured, PASSWORD


@pytest.fixture
def matured(investor):
    return make_matured(investor.uid, "advance", 5000)


def _request(investor, investment, amount=6000, method="easypaisa", account="03001234567", now=None):
    return withdrawal_service.request_withdrawal(
        investor.uid, investment.id, amount, method, account, now=now
    )


def test_request_on_matured_investment_creates_pending(investor, matured):
    wr = _request(investor, matured)

    assert wr.status == WithdrawalStatus.PENDING
    assert wr.payment_method == PaymentMethod.EASYPAISA
    assert wr.investment_title == "Advance Plan"
    assert wr.user_name == "Ali Raza"
    assert wr.processed_date is None
    assert wr.transaction_id is None
    assert wr.rejection_reason is None
    assert wr.is_pending


def test_request_before_maturity_fails(investor):
    running = make_matured(investor.uid, days_ago=3)

    with pytest.raises(InvalidStateError) as exc:
        _request(investor, running)
    assert exc.value.code == "NOT_MATURED"
    assert withdrawal_service.list_withdrawals_for_user(investor.uid) == []


def test_request_on_pending_investment_fails(investor):
    inv = make_pending(investor.uid)

    with pytest.raises(InvalidStateError):
        _request(investor, inv)


def test_request_on_swept_investment_is_allowed(investor, matured):
    investment_service.complete_matured_investments()
    wr = _request(investor, investment_service.get_investment(matured.id))
    assert wr.status == WithdrawalStatus.PENDING


def test_request_for_someone_elses_investment_is_not_found(identity, matured):
    other = identity.register("03009999999", PASSWORD)

    with pytest.raises(NotFoundError):
        withdrawal_service.request_withdrawal(other.uid, matured.id, 100, "jazzcash", "0300")


@pytest.mark.parametrize("amount", [0, -5, "abc"])
def test_non_positive_or_invalid_amount_fails(investor, matured, amount):
    with pytest.raises(ValidationError) as exc:
        _request(investor, matured, amount=amount)
    assert exc.value.code == "INVALID_AMOUNT"


def test_amount_is_capped_at_max_total_return(investor, matured):
    # 5000 on Advance: 5000 + 5000 * 2.0% * 25
    with pytest.raises(ValidationError) as exc:
        _request(investor, matured, amount="7500.01")
    assert exc.value.code == "AMOUNT_OUT_OF_RANGE"

    wr = _request(investor, matured, amount=7500)
    assert float(wr.withdrawal_amount) == 7500.0


def test_invalid_payment_method_fails(investor, matured):
    with pytest.raises(ValidationError) as exc:
        _request(investor, matured, method="paypal")
    assert exc.value.code == "INVALID_PAYMENT_METHOD"


def test_missing_account_number_fails(investor, matured):
    with pytest.raises(ValidationError) as exc:
        _request(investor, matured, account="  ")
    assert exc.value.code == "MISSING_ACCOUNT_NUMBER"


def test_complete_sets_transaction_and_processed_date(investor, matured):
    wr = _request(investor, matured)
    now = utcnow()

    withdrawal_service.complete_withdrawal(wr.id, "TRX123", now=now)
    wr = withdrawal_service.find_latest_for_investment(matured.id, investor.uid)

    assert wr.status == WithdrawalStatus.COMPLETED
    assert wr.transaction_id == "TRX123"
    assert wr.processed_date == now
    assert wr.rejection_reason is None
    assert wr.is_final


def test_complete_requires_transaction_id(investor, matured):
    wr = _request(investor, matured)

    with pytest.raises(ValidationError) as exc:
        withdrawal_service.complete_withdrawal(wr.id, " ")
    assert exc.value.code == "MISSING_TRANSACTION_ID"
    assert withdrawal_service.find_latest_for_investment(matured.id, investor.uid).is_pending


def test_reject_sets_reason(investor, matured):
    wr = _request(investor, matured)

    withdrawal_service.reject_withdrawal(wr.id, "wrong account number")
    wr = withdrawal_service.find_latest_for_investment(matured.id, investor.uid)

    assert wr.status == WithdrawalStatus.REJECTED
    assert wr.rejection_reason == "wrong account number"
    assert wr.transaction_id is None
    assert wr.processed_date is not None


def test_reject_requires_reason(investor, matured):
    wr = _request(investor, matured)

    with pytest.raises(ValidationError):
        withdrawal_service.reject_withdrawal(wr.id, "")


def test_terminal_withdrawals_cannot_transition(investor, matured):
    wr = _request(investor, matured)
    withdrawal_service.complete_withdrawal(wr.id, "TRX123")

    with pytest.raises(InvalidStateError):
        withdrawal_service.complete_withdrawal(wr.id, "TRX999")
    with pytest.raises(InvalidStateError):
        withdrawal_service.reject_withdrawal(wr.id, "too late")

    wr = withdrawal_service.find_latest_for_investment(matured.id, investor.uid)
    assert wr.transaction_id == "TRX123"


def test_second_outstanding_request_is_refused(investor, matured):
    _request(investor, matured)

    with pytest.raises(InvalidStateError) as exc:
        _request(investor, matured)
    assert exc.value.code == "WITHDRAWAL_EXISTS"


def test_paid_investment_cannot_be_withdrawn_again(investor, matured):
    wr = _request(investor, matured)
    withdrawal_service.complete_withdrawal(wr.id, "TRX123")

    with pytest.raises(InvalidStateError):
        _request(investor, matured)


def test_rejected_request_can_be_resubmitted(investor, matured):
    earlier = utcnow() - timedelta(hours=1)
    first = _request(investor, matured, now=earlier)
    withdrawal_service.reject_withdrawal(first.id, "wrong account number")

    second = _request(investor, matured, account="03007654321")

    latest = withdrawal_service.find_latest_for_investment(matured.id, investor.uid)
    assert latest.id == second.id
    assert latest.account_number == "03007654321"
    assert len(withdrawal_service.list_withdrawals_for_user(investor.uid)) == 2


def test_find_latest_without_requests_returns_none(investor, matured):
    assert withdrawal_service.find_latest_for_investment(matured.id, investor.uid) is None


def test_pending_queue_is_oldest_first(identity, investor, matured):
    other = identity.register("03009999999", PASSWORD)
    other_matured = make_matured(other.uid, "premium", 2000, days_ago=60)
    base = utcnow() - timedelta(hours=3)

    newer = _request(investor, matured, now=base + timedelta(hours=1))
    older = withdrawal_service.request_withdrawal(
        other.uid, other_matured.id, 1000, "jazzcash", "03009999999", now=base
    )

    assert [w.id for w in withdrawal_service.list_pending_withdrawals()] == [older.id, newer.id]

    withdrawal_service.complete_withdrawal(older.id, "TRX1")
    assert [w.id for w in withdrawal_service.list_pending_withdrawals()] == [newer.id]


def test_processing_withdrawal_blocks_a_new_request(investor, matured):
    wr = _request(investor, matured)
    DocumentStore().update("withdrawals", wr.id, {"status": WithdrawalStatus.PROCESSING})

    with pytest.raises(InvalidStateError) as exc:
        _request(investor, matured)
    assert exc.value.code == "WITHDRAWAL_EXISTS"
    assert exc.value.details["status"] == "processing"


class _RecordingStore(DocumentStore):
    def __init__(self):
        super().__init__()
        self.locked = []

    def get(self, collection, record_id, for_update=False):
        if for_update:
            self.locked.append((collection, record_id))
        return super().get(collection, record_id, for_update=for_update)


def test_request_locks_the_investment_row(investor, matured):
    store = _RecordingStore()

    withdrawal_service.request_withdrawal(
        investor.uid, matured.id, 1000, "easypaisa", "03001234567", store=store
    )

    assert store.locked[0] == ("investments", matured.id)
