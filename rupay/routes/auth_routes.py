from flask import Blueprint, request, current_app
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.extensions import db
from rupay.models.user import User
from rupay.schemas.user_schema import RegisterSchema, LoginSchema, IdentitySchema
from rupay.services.auth_service import generate_tokens_for_user
from rupay.utils.response_formatter import success_response, error_response
from rupay.utils.validation import load_or_raise

bp = Blueprint("auth", __name__, url_prefix="/api/v1/auth")

identity_schema = IdentitySchema()


def _identity_provider():
    return current_app.extensions["identity"]


@bp.route("/register", methods=["POST"])
def register():
    data = load_or_raise(RegisterSchema(), request.get_json(silent=True))

    identity = _identity_provider().register(
        data["email"],
        data["password"],
        display_name=data.get("display_name"),
        phone=data.get("phone"),
        referral_code=data.get("referral_code"),
    )
    access, refresh = generate_tokens_for_user(identity)
    return success_response({
        "user": identity_schema.dump(identity),
        "access_token": access,
        "refresh_token": refresh,
    }, status=201)


@bp.route("/login", methods=["POST"])
def login():
    data = load_or_raise(LoginSchema(), request.get_json(silent=True))

    identity = _identity_provider().login(data["email"], data["password"])
    access, refresh = generate_tokens_for_user(identity)
    return success_response({
        "user": identity_schema.dump(identity),
        "access_token": access,
        "refresh_token": refresh,
    })


@bp.route("/logout", methods=["POST"])
@jwt_required()
def logout():
    provider = _identity_provider()
    provider.logout(provider.current(get_jwt_identity()))
    # tokens are stateless; the client discards them
    return success_response({"message": "Successfully logged out"})


@bp.route("/me", methods=["GET"])
@jwt_required()
def me():
    user = db.session.get(User, get_jwt_identity())
    if not user:
        return error_response("NOT_FOUND", "User not found", status=404)

    return success_response({"user": user.to_dict()})
