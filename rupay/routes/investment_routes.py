from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.extensions import db
from rupay.models.user import User
from rupay.schemas.investment_schema import InvestmentSchema, InvestmentSubmitSchema
from rupay.schemas.withdrawal_schema import WithdrawalSchema
from rupay.services import investment_service, withdrawal_service
from rupay.services.blob_service import proof_path
from rupay.utils.exceptions import NotFoundError, ServiceError
from rupay.utils.response_formatter import success_response
from rupay.utils.validation import load_or_raise

bp = Blueprint("investments", __name__, url_prefix="/api/v1/investments")

investment_schema = InvestmentSchema()
withdrawal_schema = WithdrawalSchema()


def _owned_investment(investment_id, uid):
    investment = investment_service.get_investment(investment_id)
    if investment.user_id != uid:
        user = db.session.get(User, uid)
        if not user or not user.is_developer:
            raise NotFoundError("Investment not found", details={"id": investment_id})
    return investment


# ==========================================================
#  POST /investments
#  multipart: plan_id, amount, transactionProof (image)
# ==========================================================
@bp.route("", methods=["POST"])
@jwt_required()
def submit_investment():
    uid = get_jwt_identity()
    data = load_or_raise(InvestmentSubmitSchema(), request.form.to_dict())

    # bounds are checked before anything is uploaded
    plan, amount = investment_service.validate_plan_amount(data["plan_id"], data["amount"])

    proof = request.files.get("transactionProof")
    blob_store = current_app.extensions["blob_store"]
    blob_store.validate(proof)
    path = proof_path(uid, proof.filename)
    proof_url = blob_store.upload(path, proof)

    try:
        investment = investment_service.create_investment(uid, plan.id, amount, proof_url)
    except ServiceError:
        # no record points at the proof; drop it
        blob_store.remove(path)
        raise
    current_app.logger.info("User %s submitted investment %s", uid, investment.id)

    return success_response(
        {"investment": investment_schema.dump(investment)},
        message="Your investment proof has been submitted for review.",
        status=201,
    )


@bp.route("", methods=["GET"])
@jwt_required()
def list_my_investments():
    uid = get_jwt_identity()
    investments = investment_service.list_for_user(uid)
    return success_response({"investments": investment_schema.dump(investments, many=True)})


@bp.route("/active", methods=["GET"])
@jwt_required()
def list_my_active_investments():
    uid = get_jwt_identity()
    investments = investment_service.list_active_for_user(uid)
    return success_response({"investments": investment_schema.dump(investments, many=True)})


@bp.route("/<investment_id>", methods=["GET"])
@jwt_required()
def investment_detail(investment_id):
    investment = _owned_investment(investment_id, get_jwt_identity())
    latest = withdrawal_service.find_latest_for_investment(investment.id, investment.user_id)

    return success_response({
        "investment": investment_schema.dump(investment),
        "schedule": investment_service.profit_schedule(investment),
        "max_withdrawal_amount": float(investment_service.max_total_return(investment)),
        "withdrawal": withdrawal_schema.dump(latest) if latest else None,
    })


@bp.route("/<investment_id>/withdrawal", methods=["GET"])
@jwt_required()
def latest_withdrawal(investment_id):
    investment = _owned_investment(investment_id, get_jwt_identity())
    latest = withdrawal_service.find_latest_for_investment(investment.id, investment.user_id)
    return success_response({"withdrawal": withdrawal_schema.dump(latest) if latest else None})
