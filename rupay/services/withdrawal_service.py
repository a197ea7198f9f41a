import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from rupay.models.status import PaymentMethod, WithdrawalStatus
from rupay.services.investment_service import max_total_return
from rupay.services.notification_service import send_notification_to_user
from rupay.services.store import DocumentStore
from rupay.utils.clock import utcnow
from rupay.utils.exceptions import InvalidStateError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

Q = Decimal("0.01")

# statuses that block a new request against the same investment
OUTSTANDING = [WithdrawalStatus.PENDING, WithdrawalStatus.PROCESSING, WithdrawalStatus.COMPLETED]


def _money(v) -> Decimal:
    return Decimal(str(v or 0)).quantize(Q, rounding=ROUND_HALF_UP)


def _parse_method(method):
    if isinstance(method, PaymentMethod):
        return method
    try:
        return PaymentMethod((method or "").strip().lower())
    except ValueError:
        raise ValidationError(
            "Payment method must be easypaisa or jazzcash",
            code="INVALID_PAYMENT_METHOD",
            details={"allowed": [m.value for m in PaymentMethod]},
        )


def _require_pending(withdrawal, action):
    if withdrawal.status != WithdrawalStatus.PENDING:
        raise InvalidStateError(
            f"Only pending withdrawals can be {action} (current: {withdrawal.status.value})",
            details={"id": withdrawal.id, "status": withdrawal.status.value},
        )


def request_withdrawal(user_id, investment_id, amount, method, account_number, now=None, store=None):
    store = store or DocumentStore()
    now = now or utcnow()

    # row lock serializes concurrent requests for the same investment
    investment = store.get("investments", investment_id, for_update=True)
    if investment.user_id != user_id:
        raise NotFoundError("Investment not found", details={"id": investment_id})

    if not investment.is_matured(now):
        raise InvalidStateError(
            "Withdrawals are only available once the investment has matured",
            code="NOT_MATURED",
            details={"maturity_date": investment.maturity_date.isoformat() + "Z"
                     if investment.maturity_date else None},
        )

    existing = store.query(
        "withdrawals",
        [("investment_id", "==", investment_id), ("status", "in", OUTSTANDING)],
        limit=1,
    )
    if existing:
        raise InvalidStateError(
            "A withdrawal for this investment already exists",
            code="WITHDRAWAL_EXISTS",
            details={"withdrawal_id": existing[0].id, "status": existing[0].status.value},
        )

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Withdrawal amount must be a number", code="INVALID_AMOUNT")
    if not value.is_finite() or value <= 0:
        raise ValidationError("Withdrawal amount must be greater than zero", code="INVALID_AMOUNT")

    ceiling = max_total_return(investment)
    if value > ceiling:
        raise ValidationError(
            f"Withdrawal amount cannot exceed PKR {ceiling:,}",
            code="AMOUNT_OUT_OF_RANGE",
            details={"max": float(ceiling)},
        )

    method = _parse_method(method)
    account_number = (account_number or "").strip()
    if not account_number:
        raise ValidationError("Account number is required", code="MISSING_ACCOUNT_NUMBER")

    withdrawal_id = store.create("withdrawals", {
        "user_id": user_id,
        "user_name": investment.user_name,
        "user_phone": investment.user_phone,
        "investment_id": investment.id,
        "investment_title": investment.plan_title,
        "withdrawal_amount": _money(value),
        "payment_method": method,
        "account_number": account_number,
        "request_date": now,
        "status": WithdrawalStatus.PENDING,
        "processed_date": None,
        "rejection_reason": None,
        "transaction_id": None,
    })
    logger.info("Withdrawal %s requested for investment %s via %s", withdrawal_id, investment_id, method.value)
    return store.get("withdrawals", withdrawal_id)


def complete_withdrawal(withdrawal_id, transaction_id, now=None, store=None):
    store = store or DocumentStore()
    transaction_id = (transaction_id or "").strip()
    if not transaction_id:
        raise ValidationError("Please enter the payment transaction ID", code="MISSING_TRANSACTION_ID")

    withdrawal = store.get("withdrawals", withdrawal_id, for_update=True)
    _require_pending(withdrawal, "completed")

    store.update("withdrawals", withdrawal_id, {
        "status": WithdrawalStatus.COMPLETED,
        "processed_date": now or utcnow(),
        "transaction_id": transaction_id,
        "rejection_reason": None,
    })
    logger.info("Withdrawal %s completed (trx %s)", withdrawal_id, transaction_id)

    send_notification_to_user(
        user_id=withdrawal.user_id,
        title="Withdrawal Paid",
        message=(
            f"Your withdrawal of PKR {withdrawal.withdrawal_amount:,} was sent to "
            f"{withdrawal.payment_method.label} {withdrawal.account_number}."
        ),
        notif_type="success",
        details={"withdrawal_id": withdrawal_id, "transaction_id": transaction_id},
    )
    return withdrawal


def reject_withdrawal(withdrawal_id, reason, now=None, store=None):
    store = store or DocumentStore()
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("Please provide a reason for rejection", code="MISSING_REASON")

    withdrawal = store.get("withdrawals", withdrawal_id, for_update=True)
    _require_pending(withdrawal, "rejected")

    store.update("withdrawals", withdrawal_id, {
        "status": WithdrawalStatus.REJECTED,
        "processed_date": now or utcnow(),
        "rejection_reason": reason,
        "transaction_id": None,
    })
    logger.info("Withdrawal %s rejected", withdrawal_id)

    send_notification_to_user(
        user_id=withdrawal.user_id,
        title="Withdrawal Rejected",
        message=f"Your withdrawal of PKR {withdrawal.withdrawal_amount:,} was rejected: {reason}",
        notif_type="error",
        details={"withdrawal_id": withdrawal_id},
    )
    return withdrawal


def list_pending_withdrawals(store=None):
    return (store or DocumentStore()).query(
        "withdrawals",
        [("status", "==", WithdrawalStatus.PENDING)],
        ordering=[("request_date", "asc")],
    )


def find_latest_for_investment(investment_id, user_id, store=None):
    found = (store or DocumentStore()).query(
        "withdrawals",
        [("investment_id", "==", investment_id), ("user_id", "==", user_id)],
        ordering=[("request_date", "desc")],
        limit=1,
    )
    return found[0] if found else None


def list_withdrawals_for_user(user_id, store=None):
    return (store or DocumentStore()).query(
        "withdrawals",
        [("user_id", "==", user_id)],
        ordering=[("request_date", "desc")],
    )
