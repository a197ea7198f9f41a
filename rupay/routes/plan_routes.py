from flask import Blueprint, current_app

from rupay.models.plan import PLANS, get_plan
from rupay.schemas.plan_schema import PlanSchema
from rupay.utils.response_formatter import success_response, error_response

bp = Blueprint("plans", __name__, url_prefix="/api/v1/plans")

plan_schema = PlanSchema()


@bp.route("", methods=["GET"])
def list_plans():
    return success_response({
        "plans": plan_schema.dump(PLANS, many=True),
        "payment_accounts": current_app.config["PAYMENT_ACCOUNTS"],
    })


@bp.route("/<plan_id>", methods=["GET"])
def plan_detail(plan_id):
    plan = get_plan(plan_id)
    if not plan:
        return error_response("NOT_FOUND", "Plan not found", status=404)

    return success_response({
        "plan": plan_schema.dump(plan),
        "payment_accounts": current_app.config["PAYMENT_ACCOUNTS"],
    })
