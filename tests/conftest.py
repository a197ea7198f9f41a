import io
import shutil
from datetime import timedelta

import pytest

from rupay.extensions import db
from rupay.main import create_app
from rupay.services import investment_service
from rupay.utils.clock import utcnow

DEV_EMAIL = "developer@example.com"
PASSWORD = "secret123"

# 1x1 transparent PNG
PNG_BYTES = (
    b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    b"\x00\x00\x00\rIDATx\x9cc\xf8\x0f\x00\x00\x01\x01\x00\x05\x18\xd8N\x00\x00\x00\x00IEND\xaeB`\x82"
)


@pytest.fixture
def app():
    app = create_app("testing")
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    shutil.rmtree(app.config["UPLOAD_FOLDER"], ignore_errors=True)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def identity(app):
    return app.extensions["identity"]


@pytest.fixture
def investor(identity):
    return identity.register("03001234567", PASSWORD, display_name="Ali Raza")


@pytest.fixture
def developer(identity):
    return identity.register(DEV_EMAIL, PASSWORD, display_name="Developer Admin")


def png_upload(name="proof.png"):
    return io.BytesIO(PNG_BYTES), name, "image/png"


def auth_headers(client, email, password=PASSWORD):
    resp = client.post("/api/v1/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return {"Authorization": f"Bearer {resp.get_json()['access_token']}"}


def make_pending(user_id, plan_id="advance", amount=5000, now=None):
    return investment_service.create_investment(
        user_id, plan_id, amount, "http://localhost/uploads/proof.png", now=now
    )


def make_matured(user_id, plan_id="advance", amount=5000, days_ago=30):
    approved_at = utcnow() - timedelta(days=days_ago)
    inv = make_pending(user_id, plan_id, amount, now=approved_at - timedelta(hours=1))
    investment_service.approve_investment(inv.id, now=approved_at)
    return investment_service.get_investment(inv.id)
