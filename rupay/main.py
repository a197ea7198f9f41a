from flask import Flask
from .config import CONFIGS
from .extensions import db, migrate, jwt, ma, cors, bcrypt
import os


def create_app(config_name=None):
    app = Flask(__name__, instance_relative_config=False)
    env = config_name or os.getenv("FLASK_ENV", "development")
    app.config.from_object(CONFIGS.get(env, CONFIGS["development"]))
    app.logger.setLevel(app.config["LOG_LEVEL"])

    # initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)
    ma.init_app(app)
    origins = [o.strip() for o in app.config["CORS_ORIGINS"].split(",")]
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=True,
        allow_headers=["Content-Type", "Authorization"],
        methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )
    bcrypt.init_app(app)

    # app-scoped collaborators
    from rupay.services.auth_service import IdentityProvider
    from rupay.services.blob_service import BlobStore
    from rupay.services.review_service import ReviewWorkflow

    identity = IdentityProvider()
    identity.on_change(
        lambda ident: app.logger.info(
            "Auth state changed: %s", ident.uid if ident else "signed out"
        )
    )
    app.extensions["identity"] = identity
    app.extensions["blob_store"] = BlobStore()
    app.extensions["review"] = ReviewWorkflow()

    # register blueprints
    from rupay.routes.auth_routes import bp as auth_bp
    from rupay.routes.plan_routes import bp as plan_bp
    from rupay.routes.investment_routes import bp as investment_bp
    from rupay.routes.withdrawal_routes import bp as withdrawal_bp
    from rupay.routes.developer_routes import bp as developer_bp
    from rupay.routes.notification_routes import bp as notification_bp
    from rupay.routes.referral_routes import bp as referral_bp
    from rupay.routes.upload_routes import bp as upload_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(plan_bp)
    app.register_blueprint(investment_bp)
    app.register_blueprint(withdrawal_bp)
    app.register_blueprint(developer_bp)
    app.register_blueprint(notification_bp)
    app.register_blueprint(referral_bp)
    app.register_blueprint(upload_bp)

    # error handlers to match required error format
    from rupay.utils.exceptions import ServiceError
    from rupay.utils.response_formatter import error_response, service_error_response

    @app.errorhandler(ServiceError)
    def service_error(e):
        if e.status >= 500:
            app.logger.error("%s: %s", e.code, e.message)
        return service_error_response(e)

    @app.errorhandler(400)
    def bad_request(e):
        return error_response("BAD_REQUEST", str(e), status=400)

    @app.errorhandler(401)
    def unauthorized(e):
        return error_response("UNAUTHORIZED", str(e), status=401)

    @app.errorhandler(404)
    def not_found(e):
        return error_response("NOT_FOUND", "Resource not found", status=404)

    @app.errorhandler(405)
    def method_not_allowed(e):
        return error_response("METHOD_NOT_ALLOWED", str(e), status=405)

    @app.errorhandler(413)
    def too_large(e):
        return error_response("FILE_TOO_LARGE", "Upload is too large", status=413)

    @app.errorhandler(500)
    def server_error(e):
        return error_response("SERVER_ERROR", "Internal server error", status=500)

    @jwt.unauthorized_loader
    def missing_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.invalid_token_loader
    def invalid_token(reason):
        return error_response("UNAUTHORIZED", reason, status=401)

    @jwt.expired_token_loader
    def expired_token(jwt_header, jwt_payload):
        return error_response("TOKEN_EXPIRED", "Token has expired", status=401)

    if app.config.get("AUTO_CREATE_TABLES"):
        with app.app_context():
            db.create_all()

    return app
