"""Reviewer-side driving of the investment and withdrawal lifecycles."""
import logging
import threading
from contextlib import contextmanager

from flask import current_app

from rupay.services import investment_service, withdrawal_service
from rupay.utils.clock import utcnow, iso_z
from rupay.utils.exceptions import InvalidStateError, ValidationError

logger = logging.getLogger(__name__)


class ReviewWorkflow:
    """Dispatches reviewer actions by record kind and tracks in-flight records.

    The busy set only stops two requests for the same record overlapping in
    this process; it is not a lock across processes or clients.
    """

    ACTIONS = {
        ("investment", "approve"): lambda rid, **kw: investment_service.approve_investment(rid),
        ("investment", "reject"): lambda rid, **kw: investment_service.reject_investment(rid, kw.get("reason")),
        ("withdrawal", "complete"): lambda rid, **kw: withdrawal_service.complete_withdrawal(
            rid, kw.get("transaction_id")),
        ("withdrawal", "reject"): lambda rid, **kw: withdrawal_service.reject_withdrawal(rid, kw.get("reason")),
    }

    def __init__(self):
        self._busy = set()
        self._lock = threading.Lock()

    def is_busy(self, record_id):
        with self._lock:
            return record_id in self._busy

    @property
    def busy_ids(self):
        with self._lock:
            return sorted(self._busy)

    @contextmanager
    def busy(self, record_id):
        with self._lock:
            if record_id in self._busy:
                raise InvalidStateError(
                    "This record is already being processed",
                    code="REVIEW_IN_PROGRESS",
                    details={"id": record_id},
                )
            self._busy.add(record_id)
        try:
            yield
        finally:
            with self._lock:
                self._busy.discard(record_id)

    def transition(self, kind, record_id, action, **kwargs):
        handler = self.ACTIONS.get((kind, action))
        if handler is None:
            raise ValidationError(
                f"Unsupported action '{action}' for {kind}",
                code="UNSUPPORTED_ACTION",
            )
        with self.busy(record_id):
            logger.info("Reviewer %s %s %s", action, kind, record_id)
            return handler(record_id, **kwargs)

    def approve_investment(self, investment_id):
        return self.transition("investment", investment_id, "approve")

    def reject_investment(self, investment_id, reason):
        return self.transition("investment", investment_id, "reject", reason=reason)

    def complete_withdrawal(self, withdrawal_id, transaction_id):
        return self.transition("withdrawal", withdrawal_id, "complete", transaction_id=transaction_id)

    def reject_withdrawal(self, withdrawal_id, reason):
        return self.transition("withdrawal", withdrawal_id, "reject", reason=reason)

    def queues(self):
        """Everything a polling reviewer screen needs in one snapshot."""
        pending = investment_service.list_pending_investments()
        approved = investment_service.list_approved_and_completed()

        users = {}
        for inv in investment_service.list_all_investments():
            summary = users.setdefault(inv.user_id, {
                "user_id": inv.user_id,
                "user_name": inv.user_name,
                "user_phone": inv.user_phone,
                "investment_count": 0,
            })
            summary["investment_count"] += 1

        return {
            "pending_investments": pending,
            "active_investments": approved,
            "pending_withdrawals": withdrawal_service.list_pending_withdrawals(),
            "users": list(users.values()),
            "busy_ids": self.busy_ids,
            "poll_interval_seconds": current_app.config["REVIEW_POLL_INTERVAL"],
            "generated_at": iso_z(utcnow()),
        }
