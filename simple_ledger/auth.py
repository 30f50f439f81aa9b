import secrets

import flask
import flask_login
import requests
from flask import Blueprint, current_app, jsonify, request, session
from sqlalchemy.exc import SQLAlchemyError

import simple_ledger.common as common
from simple_ledger.accounting_db import db
from simple_ledger.errors import AuthError
from simple_ledger.services.profiles import get_profile
from simple_ledger.services.users import (
    find_or_create_user_by_phone,
    find_or_create_user_by_subject,
    get_user,
)

bp = Blueprint("auth", __name__)

login_manager = flask_login.LoginManager()

OAUTH_STATE_KEY = "oauth_state"


@login_manager.user_loader
def load_user(user_id):
    return get_user(user_id)


@login_manager.unauthorized_handler
def unauthorized_handler():
    return flask.redirect(current_app.config["LOGIN_PATH"])


def _is_protected(path):
    return any(path.startswith(prefix) for prefix in current_app.config["PROTECTED_PATHS"])


def _current_user_or_none():
    try:
        if flask_login.current_user.is_authenticated:
            return flask_login.current_user
    except SQLAlchemyError as e:
        db.session.rollback()
        common.logger.warning(f"Session refresh failed, treating request as anonymous: {e}")
        flask_login.logout_user()
    return None


@bp.before_app_request
def session_gateway():
    """Refresh the session cookie and route on authentication state."""
    # permanent sessions are re-issued with a fresh expiry on every response
    session.permanent = True

    user = _current_user_or_none()
    path = request.path

    if user is not None and path == current_app.config["LOGIN_PATH"]:
        return flask.redirect(current_app.config["DASHBOARD_PATH"])

    if user is None and _is_protected(path):
        common.logger.debug(f"Anonymous request for {path}, redirecting to login")
        return flask.redirect(current_app.config["LOGIN_PATH"])

    return None


def _landing_for(user):
    if get_profile(user.id):
        return current_app.config["DASHBOARD_PATH"]
    return current_app.config["ONBOARDING_PATH"]


def _safe_next(value):
    """Only same-site absolute paths are honoured as post-login targets."""
    if value and value.startswith("/") and not value.startswith("//"):
        return value
    return current_app.config["DASHBOARD_PATH"]


@bp.route('/', methods=['GET'])
def login():
    return '''
           <h1>Simple Ledger</h1>
           <a href='/login/google'>Sign in with Google</a>
           '''


@bp.route('/login/google', methods=['GET'])
def login_google():
    state = secrets.token_urlsafe(16)
    session[OAUTH_STATE_KEY] = state
    try:
        url = common.get_auth_client().authorization_url(
            flask.url_for("auth.auth_callback", _external=True),
            state,
        )
    except AuthError as e:
        common.logger.warning(str(e))
        return flask.redirect(current_app.config["LOGIN_PATH"])
    return flask.redirect(url)


@bp.route('/auth/callback', methods=['GET'])
def auth_callback():
    code = request.args.get("code")
    state = request.args.get("state")
    next_path = _safe_next(request.args.get("next"))
    expected_state = session.pop(OAUTH_STATE_KEY, None)

    if not code or not state or state != expected_state:
        common.logger.debug("OAuth callback without a valid code/state")
        return flask.redirect(current_app.config["LOGIN_PATH"])

    try:
        userinfo = common.get_auth_client().exchange_code(
            code,
            flask.url_for("auth.auth_callback", _external=True),
        )
        user = find_or_create_user_by_subject(
            userinfo["sub"],
            email=userinfo.get("email"),
            name=userinfo.get("name"),
        )
        landing = _landing_for(user)
    except (AuthError, SQLAlchemyError) as e:
        db.session.rollback()
        common.logger.warning(f"OAuth callback failed: {e}")
        return flask.redirect(current_app.config["LOGIN_PATH"])

    flask_login.login_user(user, remember=True)
    common.logger.info(f"User {user.id} signed in with OAuth")

    if landing == current_app.config["ONBOARDING_PATH"]:
        return flask.redirect(landing)
    return flask.redirect(next_path)


@bp.route('/api/auth/phone-verify', methods=['POST'])
def phone_verify():
    payload = request.get_json(silent=True) or {}
    user_json_url = payload.get("user_json_url")
    if not user_json_url:
        return jsonify({"error": "Missing 'user_json_url'"}), 400

    prefix = current_app.config["PHONE_COUNTRY_PREFIX"]

    try:
        user_data = common.get_auth_client().fetch_phone_payload(user_json_url)
        phone_number = str(user_data.get("user_phone_number") or "")

        if not phone_number.startswith(prefix):
            return jsonify({"error": f"Only phone numbers starting with {prefix} are allowed"}), 400

        user = find_or_create_user_by_phone(phone_number)
        destination = _landing_for(user)
    except (requests.RequestException, ValueError, AttributeError, SQLAlchemyError) as e:
        db.session.rollback()
        common.logger.error(f"Phone verification error: {e}")
        return jsonify({"error": str(e) or "Internal server error"}), 500

    flask_login.login_user(user, remember=True)
    common.logger.info(f"User {user.id} signed in by phone")

    return jsonify({
        "success": True,
        "phoneNumber": phone_number,
        "redirectUrl": destination,
    })


@bp.route('/logout', methods=['GET', 'POST'])
def logout():
    flask_login.logout_user()
    session.clear()
    return flask.redirect(current_app.config["LOGIN_PATH"])
