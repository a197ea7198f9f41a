from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.extensions import db
from rupay.models.user import User
from rupay.schemas.investment_schema import InvestmentSchema, RejectionSchema
from rupay.schemas.withdrawal_schema import WithdrawalSchema, CompleteWithdrawalSchema
from rupay.services import investment_service
from rupay.utils.exceptions import ForbiddenError
from rupay.utils.response_formatter import success_response
from rupay.utils.validation import load_or_raise

bp = Blueprint("developer", __name__, url_prefix="/api/v1/developer")

investment_schema = InvestmentSchema()
withdrawal_schema = WithdrawalSchema()


def require_developer():
    uid = get_jwt_identity()
    user = db.session.get(User, uid)

    if not user or not user.is_developer:
        raise ForbiddenError()
    return user


def _workflow():
    return current_app.extensions["review"]


# ==========================================================
#  GET /developer/queues
#  Polled by the reviewer dashboard every poll_interval_seconds
# ==========================================================
@bp.route("/queues", methods=["GET"])
@jwt_required()
def queues():
    require_developer()
    snapshot = _workflow().queues()

    return success_response({
        "pending_investments": investment_schema.dump(snapshot["pending_investments"], many=True),
        "active_investments": investment_schema.dump(snapshot["active_investments"], many=True),
        "pending_withdrawals": withdrawal_schema.dump(snapshot["pending_withdrawals"], many=True),
        "users": snapshot["users"],
        "busy_ids": snapshot["busy_ids"],
        "poll_interval_seconds": snapshot["poll_interval_seconds"],
        "generated_at": snapshot["generated_at"],
    })


@bp.route("/investments/<investment_id>/approve", methods=["PATCH"])
@jwt_required()
def approve_investment(investment_id):
    reviewer = require_developer()

    investment = _workflow().approve_investment(investment_id)
    current_app.logger.info("Developer %s approved investment %s", reviewer.id, investment_id)
    return success_response({"investment": investment_schema.dump(investment)},
                            message="Investment approved")


@bp.route("/investments/<investment_id>/reject", methods=["PATCH"])
@jwt_required()
def reject_investment(investment_id):
    reviewer = require_developer()
    data = load_or_raise(RejectionSchema(), request.get_json(silent=True))

    investment = _workflow().reject_investment(investment_id, data["reason"])
    current_app.logger.info("Developer %s rejected investment %s", reviewer.id, investment_id)
    return success_response({"investment": investment_schema.dump(investment)},
                            message="Investment rejected")


@bp.route("/investments/sweep", methods=["POST"])
@jwt_required()
def sweep_matured():
    require_developer()
    completed = investment_service.complete_matured_investments()
    return success_response({"completed": completed})


@bp.route("/users/<user_id>/investments", methods=["GET"])
@jwt_required()
def user_investments(user_id):
    require_developer()
    investments = investment_service.list_for_user(user_id)
    return success_response({"investments": investment_schema.dump(investments, many=True)})


@bp.route("/withdrawals/<withdrawal_id>/complete", methods=["PATCH"])
@jwt_required()
def complete_withdrawal(withdrawal_id):
    reviewer = require_developer()
    data = load_or_raise(CompleteWithdrawalSchema(), request.get_json(silent=True))

    wr = _workflow().complete_withdrawal(withdrawal_id, data["transaction_id"])
    current_app.logger.info("Developer %s completed withdrawal %s", reviewer.id, withdrawal_id)
    return success_response({"withdrawal": withdrawal_schema.dump(wr)},
                            message="Withdrawal marked as completed")


@bp.route("/withdrawals/<withdrawal_id>/reject", methods=["PATCH"])
@jwt_required()
def reject_withdrawal(withdrawal_id):
    reviewer = require_developer()
    data = load_or_raise(RejectionSchema(), request.get_json(silent=True))

    wr = _workflow().reject_withdrawal(withdrawal_id, data["reason"])
    current_app.logger.info("Developer %s rejected withdrawal %s", reviewer.id, withdrawal_id)
    return success_response({"withdrawal": withdrawal_schema.dump(wr)},
                            message="Withdrawal rejected")
