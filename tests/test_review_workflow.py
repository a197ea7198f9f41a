import threading

import pytest

from rupay.models.status import InvestmentStatus, WithdrawalStatus
from rupay.services import investment_service, withdrawal_service
from rupay.services.review_service import ReviewWorkflow
from rupay.utils.exceptions import InvalidStateError, ValidationError

from conftest import make_pending, make_matured, PASSWORD


@pytest.fixture
def workflow(app):
    return app.extensions["review"]


def test_busy_record_refuses_a_second_action(workflow, investor):
    inv = make_pending(investor.uid)

    with workflow.busy(inv.id):
        assert workflow.is_busy(inv.id)
        assert workflow.busy_ids == [inv.id]
        with pytest.raises(InvalidStateError) as exc:
            workflow.approve_investment(inv.id)
        assert exc.value.code == "REVIEW_IN_PROGRESS"

    assert not workflow.is_busy(inv.id)
    assert investment_service.get_investment(inv.id).status == InvestmentStatus.PENDING


def test_busy_flag_is_cleared_when_the_action_fails(workflow, investor):
    inv = make_pending(investor.uid)

    with pytest.raises(ValidationError):
        workflow.reject_investment(inv.id, "")
    assert not workflow.is_busy(inv.id)

    workflow.reject_investment(inv.id, "duplicate submission")
    assert investment_service.get_investment(inv.id).status == InvestmentStatus.REJECTED


def test_busy_sets_are_per_workflow():
    a, b = ReviewWorkflow(), ReviewWorkflow()
    with a.busy("inv-1"):
        assert not b.is_busy("inv-1")


def test_busy_is_exclusive_across_threads():
    workflow = ReviewWorkflow()
    entered = threading.Event()
    release = threading.Event()
    errors = []

    def hold():
        with workflow.busy("wd_1"):
            entered.set()
            release.wait(5)

    t = threading.Thread(target=hold)
    t.start()
    entered.wait(5)
    try:
        with workflow.busy("wd_1"):
            pass
    except InvalidStateError as e:
        errors.append(e.code)
    finally:
        release.set()
        t.join(5)

    assert errors == ["REVIEW_IN_PROGRESS"]
    assert workflow.busy_ids == []


def test_dispatch_by_kind_and_action(workflow, investor):
    pending = make_pending(investor.uid)
    matured = make_matured(investor.uid)
    wr = withdrawal_service.request_withdrawal(investor.uid, matured.id, 1000, "jazzcash", "03001234567")

    workflow.transition("investment", pending.id, "approve")
    workflow.transition("withdrawal", wr.id, "complete", transaction_id="TRX123")

    assert investment_service.get_investment(pending.id).status == InvestmentStatus.APPROVED
    wr = withdrawal_service.find_latest_for_investment(matured.id, investor.uid)
    assert wr.status == WithdrawalStatus.COMPLETED
    assert wr.transaction_id == "TRX123"


@pytest.mark.parametrize("kind, action", [
    ("investment", "complete"),
    ("withdrawal", "approve"),
    ("user", "reject"),
])
def test_unsupported_action(workflow, kind, action):
    with pytest.raises(ValidationError) as exc:
        workflow.transition(kind, "any-id", action)
    assert exc.value.code == "UNSUPPORTED_ACTION"


def test_queues_snapshot(workflow, identity, investor):
    other = identity.register("03009999999", PASSWORD, display_name="Sana")
    first = make_pending(investor.uid)
    make_pending(other.uid)
    matured = make_matured(investor.uid)
    rejected = make_pending(investor.uid)
    workflow.reject_investment(rejected.id, "invalid proof")
    wr = withdrawal_service.request_withdrawal(investor.uid, matured.id, 1000, "easypaisa", "0300")

    snapshot = workflow.queues()

    assert [i.id for i in snapshot["pending_investments"]][0] == first.id
    assert len(snapshot["pending_investments"]) == 2
    assert [i.id for i in snapshot["active_investments"]] == [matured.id]
    assert [w.id for w in snapshot["pending_withdrawals"]] == [wr.id]
    counts = {u["user_id"]: u["investment_count"] for u in snapshot["users"]}
    assert counts == {investor.uid: 3, other.uid: 1}
    assert snapshot["busy_ids"] == []
    assert snapshot["poll_interval_seconds"] == 15
    assert snapshot["generated_at"].endswith("Z")
