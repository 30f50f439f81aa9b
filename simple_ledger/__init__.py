from datetime import timedelta

from flask import Flask, jsonify

from simple_ledger.accounting_db import db, migrate
import simple_ledger.common as common

DEFAULT_CONFIG = {
    "SECRET_KEY": "dev",
    "SQLALCHEMY_DATABASE_URI": "sqlite:///ledger.db",
    "SQLALCHEMY_TRACK_MODIFICATIONS": False,
    "LOGIN_PATH": "/",
    "DASHBOARD_PATH": "/dashboard",
    "ONBOARDING_PATH": "/onboarding",
    "PROTECTED_PATHS": ["/dashboard", "/entities", "/products", "/reports", "/entry"],
    "PHONE_COUNTRY_PREFIX": "+91",
    "CURRENCY_SYMBOL": "₹",
    "AUTH_HTTP_TIMEOUT": 10,
    "SESSION_LIFETIME_DAYS": 20,
    "LOG_LEVEL": "DEBUG",
}


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env() #get config data from environment variables beginning with "FLASK_"
    if config:
        app.config.from_mapping(config)

    lifetime = timedelta(days=int(app.config["SESSION_LIFETIME_DAYS"]))
    app.config["PERMANENT_SESSION_LIFETIME"] = lifetime
    app.config["REMEMBER_COOKIE_DURATION"] = lifetime

    common.logging_initiate(app.config)

    db.init_app(app)
    migrate.init_app(app, db)

    # Import models so Alembic sees them
    from simple_ledger import models  # noqa: F401

    from simple_ledger.auth import bp as auth_bp, login_manager
    from simple_ledger.services.auth_client import AuthClient

    login_manager.init_app(app)
    app.extensions["auth_client"] = AuthClient.from_config(app.config)

    from simple_ledger.routes.catalog_api import bp as catalog_bp
    from simple_ledger.routes.dashboard_api import bp as dashboard_bp
    from simple_ledger.routes.entry_api import bp as entry_bp
    from simple_ledger.routes.reports_api import bp as reports_bp

    app.register_blueprint(auth_bp)
    app.register_blueprint(dashboard_bp)
    app.register_blueprint(entry_bp)
    app.register_blueprint(reports_bp)
    app.register_blueprint(catalog_bp)

    from simple_ledger.errors import LedgerError

    @app.errorhandler(LedgerError)
    def ledger_error(e):
        common.logger.warning(f"{type(e).__name__}: {e}")
        return jsonify({"error": str(e)}), e.status_code

    from simple_ledger.cli import init_db_command
    app.cli.add_command(init_db_command)

    common.logger.debug(f"Simple Ledger app created with database {app.config['SQLALCHEMY_DATABASE_URI']}")
    return app
