from flask import Blueprint
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.services.referral_service import referral_summary
from rupay.utils.response_formatter import success_response

bp = Blueprint("referrals", __name__, url_prefix="/api/v1/referrals")


@bp.route("", methods=["GET"])
@jwt_required()
def my_referrals():
    return success_response(referral_summary(get_jwt_identity()))
