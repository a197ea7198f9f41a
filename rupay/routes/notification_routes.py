from flask import Blueprint, request
from flask_jwt_extended import jwt_required, get_jwt_identity

from rupay.extensions import db
from rupay.models.notification import Notification
from rupay.schemas.notification_schema import NotificationSchema
from rupay.services.notification_service import (
    get_user_notifications,
    mark_notification_read,
    mark_all_read_for_user,
)
from rupay.utils.pagination import paginate_query
from rupay.utils.response_formatter import success_response, error_response

bp = Blueprint("notifications", __name__, url_prefix="/api/v1/notifications")

notification_schema = NotificationSchema()


@bp.route("", methods=["GET"])
@jwt_required()
def list_notifications():
    uid = get_jwt_identity()
    is_read = request.args.get("is_read")
    if is_read is not None:
        is_read = is_read.lower() in ("1", "true", "yes")

    items, pagination = paginate_query(
        get_user_notifications(uid, is_read=is_read),
        request.args.get("page"),
        request.args.get("limit"),
    )
    return success_response({
        "notifications": notification_schema.dump(items, many=True),
        "pagination": pagination,
    })


@bp.route("/<notification_id>/read", methods=["PATCH"])
@jwt_required()
def read_notification(notification_id):
    uid = get_jwt_identity()
    notif = db.session.get(Notification, notification_id)
    if not notif or notif.user_id != uid:
        return error_response("NOT_FOUND", "Notification not found", status=404)

    mark_notification_read(notif)
    return success_response({"notification": notification_schema.dump(notif)})


@bp.route("/read-all", methods=["PATCH"])
@jwt_required()
def read_all_notifications():
    updated = mark_all_read_for_user(get_jwt_identity())
    return success_response({"updated": updated})
