import logging

from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_migrate import Migrate

from changebag.config import Config

db = SQLAlchemy()
migrate = Migrate()
login_manager = LoginManager()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)

    logging.basicConfig(
        level=app.config.get("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Initialize extensions
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)

    # Register blueprints
    from changebag.routes.auth import bp as auth_bp
    from changebag.routes.causes import bp as causes_bp
    from changebag.routes.sponsorships import bp as sponsorships_bp
    from changebag.routes.claims import bp as claims_bp
    from changebag.routes.waitlist import bp as waitlist_bp
    from changebag.routes.payments import bp as payments_bp
    from changebag.routes.otp import bp as otp_bp
    from changebag.routes.stats import bp as stats_bp
    from changebag.routes.settings import bp as settings_bp
    from changebag.routes.partner import bp as partner_bp
    from changebag.routes.distribution import bp as distribution_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(causes_bp, url_prefix="/api/causes")
    app.register_blueprint(sponsorships_bp, url_prefix="/api/sponsorships")
    app.register_blueprint(claims_bp, url_prefix="/api/claims")
    app.register_blueprint(waitlist_bp, url_prefix="/api/waitlist")
    app.register_blueprint(payments_bp, url_prefix="/api/payments")
    app.register_blueprint(otp_bp, url_prefix="/api/otp")
    app.register_blueprint(stats_bp, url_prefix="/api/stats")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")
    app.register_blueprint(partner_bp, url_prefix="/api/partner")
    app.register_blueprint(distribution_bp, url_prefix="/api/distribution")

    register_error_handlers(app)

    with app.app_context():
        from changebag import models  # noqa: F401

    # Start the magic-link expiry sweep
    if app.config.get("SCHEDULER_ENABLED"):
        from changebag.services.scheduler import init_app as init_scheduler
        init_scheduler(app)

    return app


def register_error_handlers(app):
    from werkzeug.exceptions import HTTPException

    from changebag.errors import ChangeBagError

    @app.errorhandler(ChangeBagError)
    def handle_changebag_error(error):
        db.session.rollback()
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        return jsonify(message=error.description), error.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        db.session.rollback()
        app.logger.exception("Unhandled error")
        body = {"message": "Server error"}
        if app.debug:
            body["error"] = str(error)
        return jsonify(body), 500

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify(message="Authentication required"), 401
