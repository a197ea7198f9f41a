from rupay.extensions import db
from rupay.utils.clock import utcnow
import uuid


def gen_notif_id():
    return f"notif-{str(uuid.uuid4())[:8]}"


class Notification(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.String(50), primary_key=True, default=gen_notif_id)
    user_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=False, index=True)

    type = db.Column(db.String(20), default="info")  # info | success | error
    title = db.Column(db.String(255), nullable=False)
    message = db.Column(db.Text, nullable=False)
    details = db.Column(db.JSON, nullable=True)
    is_read = db.Column(db.Boolean, default=False, nullable=False)

    created_at = db.Column(db.DateTime, default=utcnow)

    recipient = db.relationship("User", backref="notifications", lazy=True)
