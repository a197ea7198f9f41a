import logging
from datetime import timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from flask import current_app

from rupay.models.plan import get_plan
from rupay.models.status import InvestmentStatus
from rupay.services.notification_service import send_notification_to_user
from rupay.services.store import DocumentStore
from rupay.utils.clock import utcnow
from rupay.utils.exceptions import InvalidStateError, ValidationError

logger = logging.getLogger(__name__)

Q = Decimal("0.01")


def _money(v) -> Decimal:
    return Decimal(str(v or 0)).quantize(Q, rounding=ROUND_HALF_UP)


def _parse_amount(amount):
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Investment amount must be a number", code="INVALID_AMOUNT")
    if not value.is_finite():
        raise ValidationError("Investment amount must be a number", code="INVALID_AMOUNT")
    return value


def _require_reason(reason):
    reason = (reason or "").strip()
    if not reason:
        raise ValidationError("A rejection reason is required", code="MISSING_REASON")
    return reason


def validate_plan_amount(plan_id, amount):
    """Return (plan, amount) or raise when the amount is outside the plan's bounds."""
    plan = get_plan(plan_id)
    if plan is None:
        raise ValidationError("Invalid investment plan selected", code="UNKNOWN_PLAN",
                              details={"plan_id": plan_id})

    value = _parse_amount(amount)
    if not plan.accepts(value):
        raise ValidationError(
            f"Amount must be between PKR {plan.min_investment:,} and PKR {plan.max_investment:,}",
            code="AMOUNT_OUT_OF_RANGE",
            details={"min": float(plan.min_investment), "max": float(plan.max_investment)},
        )
    return plan, value


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def create_investment(user_id, plan_id, amount, proof_url, now=None, store=None):
    store = store or DocumentStore()
    plan, value = validate_plan_amount(plan_id, amount)

    if not (proof_url or "").strip():
        raise ValidationError("Transaction proof is required", code="MISSING_PROOF")

    user = store.get("users", user_id)

    investment_id = store.create("investments", {
        "user_id": user.id,
        "user_name": user.display_name,
        "user_phone": user.phone,
        "plan_id": plan.id,
        "plan_title": plan.title,
        "investment_amount": _money(value),
        "daily_profit_min": plan.daily_profit_min,
        "daily_profit_max": plan.daily_profit_max,
        "duration_days": plan.duration_days,
        "transaction_proof_url": proof_url.strip(),
        "submission_date": now or utcnow(),
        "status": InvestmentStatus.PENDING,
        "approval_date": None,
        "rejection_reason": None,
        "referral_bonus_percent": Decimal("0"),
    })
    logger.info("Investment %s submitted by %s for %s (%s)", investment_id, user.id, plan.id, value)
    return store.get("investments", investment_id)


def approve_investment(investment_id, now=None, store=None):
    store = store or DocumentStore()

    # re-read under a row lock; the caller's copy may be stale
    investment = store.get("investments", investment_id, for_update=True)
    if investment.status != InvestmentStatus.PENDING:
        raise InvalidStateError(
            f"Only pending investments can be approved (current: {investment.status.value})",
            details={"id": investment_id, "status": investment.status.value},
        )

    owner = investment.user
    bonus = Decimal("0")
    if owner is not None and owner.referred_by_user_id:
        bonus = Decimal(str(current_app.config.get("REFERRAL_BONUS_PERCENT", 0)))

    store.update("investments", investment_id, {
        "status": InvestmentStatus.APPROVED,
        "approval_date": now or utcnow(),
        "rejection_reason": None,
        "referral_bonus_percent": bonus,
    })
    logger.info("Investment %s approved", investment_id)

    send_notification_to_user(
        user_id=investment.user_id,
        title="Investment Approved",
        message=f"Your {investment.plan_title} investment of PKR {investment.investment_amount:,} is now active.",
        notif_type="success",
        details={"investment_id": investment_id},
    )
    return investment


def reject_investment(investment_id, reason, store=None):
    store = store or DocumentStore()
    reason = _require_reason(reason)

    investment = store.get("investments", investment_id, for_update=True)
    if investment.status != InvestmentStatus.PENDING:
        raise InvalidStateError(
            f"Only pending investments can be rejected (current: {investment.status.value})",
            details={"id": investment_id, "status": investment.status.value},
        )

    store.update("investments", investment_id, {
        "status": InvestmentStatus.REJECTED,
        "rejection_reason": reason,
        "approval_date": None,
    })
    logger.info("Investment %s rejected", investment_id)

    send_notification_to_user(
        user_id=investment.user_id,
        title="Investment Rejected",
        message=f"Your {investment.plan_title} submission was rejected: {reason}",
        notif_type="error",
        details={"investment_id": investment_id},
    )
    return investment


def complete_matured_investments(now=None, store=None):
    """Flip every approved investment past its maturity date to completed."""
    store = store or DocumentStore()
    now = now or utcnow()

    completed = 0
    for investment in store.query("investments", [("status", "==", InvestmentStatus.APPROVED)]):
        if not investment.is_matured(now):
            continue
        store.update("investments", investment.id, {
            "status": InvestmentStatus.COMPLETED,
            "completed_at": now,
        })
        send_notification_to_user(
            user_id=investment.user_id,
            title="Investment Matured",
            message=f"Your {investment.plan_title} has matured. You can now request a withdrawal.",
            notif_type="success",
            details={"investment_id": investment.id},
        )
        completed += 1

    if completed:
        logger.info("Maturity sweep completed %d investment(s)", completed)
    return completed


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def get_investment(investment_id, store=None):
    return (store or DocumentStore()).get("investments", investment_id)


def list_pending_investments(store=None):
    return (store or DocumentStore()).query(
        "investments",
        [("status", "==", InvestmentStatus.PENDING)],
        ordering=[("submission_date", "asc")],
    )


def list_approved_and_completed(store=None):
    return (store or DocumentStore()).query(
        "investments",
        [("status", "in", [InvestmentStatus.APPROVED, InvestmentStatus.COMPLETED])],
        ordering=[("approval_date", "desc")],
    )


def list_active_for_user(user_id, store=None):
    return (store or DocumentStore()).query(
        "investments",
        [
            ("user_id", "==", user_id),
            ("status", "in", [InvestmentStatus.APPROVED, InvestmentStatus.COMPLETED]),
        ],
        ordering=[("submission_date", "desc")],
    )


def list_all_investments(store=None):
    return (store or DocumentStore()).query("investments", ordering=[("submission_date", "desc")])


def list_for_user(user_id, store=None):
    return (store or DocumentStore()).query(
        "investments",
        [("user_id", "==", user_id)],
        ordering=[("submission_date", "desc")],
    )


# ---------------------------------------------------------------------------
# Returns
# ---------------------------------------------------------------------------

def _daily_rates(investment):
    bonus = Decimal(str(investment.referral_bonus_percent or 0))
    return (
        Decimal(str(investment.daily_profit_min)) + bonus,
        Decimal(str(investment.daily_profit_max)) + bonus,
    )


def max_total_return(investment):
    """Principal plus the best-case profit over the whole term."""
    amount = Decimal(str(investment.investment_amount))
    _, rate_max = _daily_rates(investment)
    return _money(amount + amount * rate_max * investment.duration_days / 100)


def profit_schedule(investment):
    amount = Decimal(str(investment.investment_amount))
    rate_min, rate_max = _daily_rates(investment)
    daily_min = _money(amount * rate_min / 100)
    daily_max = _money(amount * rate_max / 100)
    start = investment.approval_date

    rows = []
    cumulative_min = cumulative_max = Decimal("0")
    for day in range(1, investment.duration_days + 1):
        cumulative_min += daily_min
        cumulative_max += daily_max
        rows.append({
            "day": day,
            "date": (start + timedelta(days=day - 1)).date().isoformat() if start else None,
            "profit_min": float(daily_min),
            "profit_max": float(daily_max),
            "cumulative_min": float(cumulative_min),
            "cumulative_max": float(cumulative_max),
        })

    return {
        "daily_rate_min": float(rate_min),
        "daily_rate_max": float(rate_max),
        "days": rows,
        "total_return_min": float(amount + cumulative_min),
        "total_return_max": float(amount + cumulative_max),
    }
