import logging
import re
from collections import namedtuple
from datetime import timedelta

from flask import current_app
from flask_jwt_extended import create_access_token, create_refresh_token

from rupay.services.store import DocumentStore
from rupay.utils.auth_utils import hash_password, check_password, require_strong_password
from rupay.utils.exceptions import AuthError, ValidationError

logger = logging.getLogger(__name__)

Identity = namedtuple("Identity", ["uid", "email", "display_name"])

PHONE_RE = re.compile(r"^\d{10,15}$")
EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def identity_for(user):
    return Identity(uid=user.id, email=user.email, display_name=user.display_name)


def normalize_login(identifier):
    """Map a phone number or email to (email, phone).

    Accounts are keyed by email; phone-number sign-ups are stored as
    ``<phone>@PHONE_EMAIL_DOMAIN``.
    """
    identifier = (identifier or "").strip().lower()
    if "@" not in identifier:
        if not PHONE_RE.match(identifier):
            raise AuthError(
                "Please enter a valid phone number (10-15 digits).",
                code="INVALID_PHONE",
                status=422,
            )
        return f"{identifier}@{current_app.config['PHONE_EMAIL_DOMAIN']}", identifier

    if not EMAIL_RE.match(identifier):
        raise AuthError("Please enter a valid email address.", code="INVALID_EMAIL", status=422)
    return identifier, None


class IdentityProvider:
    """Sign-up, sign-in and sign-out, plus change notifications.

    One instance lives in ``app.extensions["identity"]``; listeners registered
    with :meth:`on_change` receive the new :class:`Identity`, or ``None`` on
    sign-out.
    """

    def __init__(self, store=None):
        self.store = store or DocumentStore()
        self._listeners = []

    def on_change(self, callback):
        self._listeners.append(callback)

        def unsubscribe():
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, identity):
        for callback in list(self._listeners):
            callback(identity)

    def register(self, email, password, display_name=None, phone=None, referral_code=None):
        email, login_phone = normalize_login(email)
        phone = login_phone or (phone or "").strip() or None

        require_strong_password(password)

        if self.store.query("users", [("email", "==", email)], limit=1):
            raise AuthError(
                "An account with this email or phone number already exists",
                code="EMAIL_IN_USE",
                details={"field": "email"},
                status=409,
            )

        referred_by = None
        referral_code = (referral_code or "").strip()
        if referral_code:
            if not self.store.query("users", [("id", "==", referral_code)], limit=1):
                raise ValidationError(
                    "Referral code not recognised",
                    code="INVALID_REFERRAL_CODE",
                    details={"field": "referral_code"},
                )
            referred_by = referral_code

        developer_email = current_app.config.get("DEVELOPER_EMAIL")
        role = "developer" if developer_email and email == developer_email else "user"

        user_id = self.store.create("users", {
            "email": email,
            "password_hash": hash_password(password),
            "display_name": (display_name or "").strip() or phone or email.split("@")[0],
            "phone": phone,
            "role": role,
            "referred_by_user_id": referred_by,
        })
        user = self.store.get("users", user_id)
        logger.info("Registered %s user %s (referred_by=%s)", role, user.id, referred_by)

        identity = identity_for(user)
        self._emit(identity)
        return identity

    def login(self, email, password):
        email, _ = normalize_login(email)
        users = self.store.query("users", [("email", "==", email)], limit=1)
        if not users or not check_password(password or "", users[0].password_hash):
            raise AuthError("Invalid phone number or password.", code="INVALID_CREDENTIALS")

        identity = identity_for(users[0])
        self._emit(identity)
        return identity

    def logout(self, identity=None):
        if identity is not None:
            logger.info("User %s signed out", identity.uid)
        self._emit(None)

    def current(self, uid):
        if not uid:
            return None
        users = self.store.query("users", [("id", "==", uid)], limit=1)
        return identity_for(users[0]) if users else None


def generate_tokens_for_user(identity):
    access = create_access_token(
        identity=identity.uid,
        expires_delta=timedelta(seconds=current_app.config.get("ACCESS_EXPIRES", 86400)),
    )
    refresh = create_refresh_token(
        identity=identity.uid,
        expires_delta=timedelta(seconds=current_app.config.get("REFRESH_EXPIRES", 86400)),
    )
    return access, refresh
