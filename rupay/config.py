import os
import tempfile
from dotenv import load_dotenv

load_dotenv()


def _as_bool(value, default=False):
    if value is None or value == "":
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _database_uri():
    url = os.getenv("DATABASE_URL", "sqlite:///rupay.db")
    # Heroku/Render style URLs
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)

    sslrootcert = os.getenv("DB_SSLROOTCERT")
    if sslrootcert and url.startswith("postgresql"):
        url = f"{url}?sslmode=verify-full&sslrootcert={sslrootcert}"
    return url


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_DATABASE_URI = _database_uri()
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}

    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-jwt-secret-change-me")
    ACCESS_EXPIRES = int(os.getenv("ACCESS_EXPIRES", 86400))
    REFRESH_EXPIRES = int(os.getenv("REFRESH_EXPIRES", 86400))

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    AUTO_CREATE_TABLES = _as_bool(os.getenv("AUTO_CREATE_TABLES"), default=False)

    basedir = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(basedir, "uploads"))
    MAX_PROOF_BYTES = int(os.getenv("MAX_PROOF_BYTES", 5 * 1024 * 1024))
    MAX_CONTENT_LENGTH = 2 * MAX_PROOF_BYTES
    ALLOWED_PROOF_TYPES = ("image/jpeg", "image/png", "image/gif")

    # Accounts are registered with an email; a bare phone number becomes <phone>@<domain>
    PHONE_EMAIL_DOMAIN = os.getenv("PHONE_EMAIL_DOMAIN", "example.com")
    MIN_PASSWORD_LENGTH = int(os.getenv("MIN_PASSWORD_LENGTH", 6))
    DEVELOPER_EMAIL = os.getenv("DEVELOPER_EMAIL", "").strip().lower()

    REFERRAL_BONUS_PERCENT = float(os.getenv("REFERRAL_BONUS_PERCENT", 0.5))
    REVIEW_POLL_INTERVAL = int(os.getenv("REVIEW_POLL_INTERVAL", 15))

    PAYMENT_ACCOUNTS = {
        "easypaisa": {
            "account_name": os.getenv("EASYPAISA_ACCOUNT_NAME", "Rupay Growth Finance"),
            "account_number": os.getenv("EASYPAISA_ACCOUNT_NUMBER", "03123456789"),
        },
        "jazzcash": {
            "account_name": os.getenv("JAZZCASH_ACCOUNT_NAME", "Rupay Growth Investment"),
            "account_number": os.getenv("JAZZCASH_ACCOUNT_NUMBER", "03012345678"),
        },
    }


class DevelopmentConfig(Config):
    DEBUG = True
    AUTO_CREATE_TABLES = _as_bool(os.getenv("AUTO_CREATE_TABLES"), default=True)


class ProductionConfig(Config):
    DEBUG = False
    LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET_KEY = "testing-secret-key-of-sufficient-length"
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), "rupay-test-uploads")
    DEVELOPER_EMAIL = "developer@example.com"
    BCRYPT_LOG_ROUNDS = 4
    AUTO_CREATE_TABLES = False


CONFIGS = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
