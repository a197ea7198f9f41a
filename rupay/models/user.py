from rupay.extensions import db
from rupay.utils.clock import utcnow, iso_z
import uuid


def gen_uuid(prefix=None):
    uid = str(uuid.uuid4())
    return f"{prefix}-{uid}" if prefix else uid


class User(db.Model):
    __tablename__ = "users"

    id = db.Column(db.String(50), primary_key=True, default=lambda: gen_uuid("usr"))
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    display_name = db.Column(db.String(255))
    phone = db.Column(db.String(20), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="user")

    # the referral code is the referrer's user id
    referred_by_user_id = db.Column(db.String(50), db.ForeignKey("users.id"), nullable=True)

    created_at = db.Column(db.DateTime, default=utcnow)

    referred_by = db.relationship("User", remote_side=[id], backref="referrals", lazy=True)

    @property
    def is_developer(self):
        return self.role == "developer"

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "display_name": self.display_name,
            "phone": self.phone,
            "role": self.role,
            "referred_by_user_id": self.referred_by_user_id,
            "created_at": iso_z(self.created_at),
        }
