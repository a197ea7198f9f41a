from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.schemas.withdrawal_schema import WithdrawalSchema, WithdrawalRequestSchema
from rupay.services import withdrawal_service
from rupay.utils.response_formatter import success_response
from rupay.utils.validation import load_or_raise

bp = Blueprint("withdrawals", __name__, url_prefix="/api/v1/withdrawals")

withdrawal_schema = WithdrawalSchema()


@bp.route("", methods=["POST"])
@jwt_required()
def request_withdrawal():
    uid = get_jwt_identity()
    data = load_or_raise(WithdrawalRequestSchema(), request.get_json(silent=True))

    wr = withdrawal_service.request_withdrawal(
        uid,
        data["investment_id"],
        data["amount"],
        data["payment_method"],
        data["account_number"],
    )
    current_app.logger.info("User %s requested withdrawal %s", uid, wr.id)

    return success_response({"withdrawal": withdrawal_schema.dump(wr)}, status=201)


@bp.route("", methods=["GET"])
@jwt_required()
def list_withdrawals():
    uid = get_jwt_identity()
    items = withdrawal_service.list_withdrawals_for_user(uid)
    return success_response({"withdrawals": withdrawal_schema.dump(items, many=True)})
