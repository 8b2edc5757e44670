"""
Authentication Routes

Provides:
- POST /auth/signup
- POST /auth/login
- POST /auth/logout
- GET  /auth/me
- POST /auth/forgot-password
- POST /auth/reset-password

Rules:
- Only active users may log in.
- Credentials validated via password hash.
- The BOOTSTRAP_ADMIN_EMAIL address becomes admin on signup; everyone else is a plain user.
- Password reset tokens are signed (itsdangerous) and time-limited. The
  forgot-password response never reveals whether an account exists.
"""

from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify
from flask_login import current_user, login_required, login_user, logout_user
from flask_wtf.csrf import generate_csrf
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from ...extensions import db
from ...forms import ForgotPasswordForm, LoginForm, ResetPasswordForm, SignupForm, bind_form
from ...i18n import normalize_locale, text_direction
from ...models import ROLE_ADMIN, ROLE_USER, User
from ...utils import invalid_form, mutation_response, server_failure, status_response

logger = logging.getLogger(__name__)

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")

RESET_SALT = "password-reset"


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(current_app.config["SECRET_KEY"], salt=RESET_SALT)


def profile_dict(user: User) -> dict:
    locale = normalize_locale(user.locale or current_app.config.get("DEFAULT_LOCALE"))
    return {
        "id": user.id,
        "email": user.email,
        "display_name": user.display_name,
        "role": user.role,
        "photo_url": user.photo_url,
        "locale": locale,
        "direction": text_direction(locale),
        "is_active": user.is_active,
    }


# ============================================================
# SIGNUP
# ============================================================

@auth_bp.route("/signup", methods=["POST"])
def signup():
    form = bind_form(SignupForm)
    if not form.validate():
        return invalid_form(form)

    email = form.email.data.strip().lower()
    if User.query.filter_by(email=email).first():
        return mutation_response(
            "Invalid data provided.",
            errors={"email": ["An account with this email already exists."]},
            status=400,
        )

    bootstrap_email = (current_app.config.get("BOOTSTRAP_ADMIN_EMAIL") or "").strip().lower()
    user = User(
        email=email,
        display_name=(form.display_name.data or "").strip() or email.split("@")[0],
        role=ROLE_ADMIN if email == bootstrap_email else ROLE_USER,
        locale=current_app.config.get("DEFAULT_LOCALE"),
        is_active=True,
    )
    user.set_password(form.password.data)

    try:
        db.session.add(user)
        db.session.commit()
    except Exception:
        return server_failure("Failed to create account.")

    login_user(user)
    logger.info("New profile %s created with role %s", user.email, user.role)
    return mutation_response("Account created successfully.", status=201, user=profile_dict(user))


# ============================================================
# LOGIN / LOGOUT
# ============================================================

@auth_bp.route("/login", methods=["POST"])
def login():
    """
    Authenticate a user.

    - Only active users may log in
    - Credentials validated via password hash
    """
    form = bind_form(LoginForm)
    if not form.validate():
        return invalid_form(form)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()

    if not user or not user.check_password(form.password.data):
        return status_response(False, "Invalid email or password.", status=401)

    if not user.is_active:
        return status_response(False, "This account is inactive.", status=403)

    login_user(user)
    return status_response(True, "Welcome back!", user=profile_dict(user))


@auth_bp.route("/logout", methods=["POST"])
@login_required
def logout():
    """Log out the current user."""
    logout_user()
    return status_response(True, "You have been logged out.")


@auth_bp.route("/me")
@login_required
def me():
    """Current profile plus a CSRF token for subsequent mutations."""
    body = profile_dict(current_user)
    body["csrf_token"] = generate_csrf()
    return jsonify(body)


# ============================================================
# PASSWORD RESET
# ============================================================

@auth_bp.route("/forgot-password", methods=["POST"])
def forgot_password():
    form = bind_form(ForgotPasswordForm)
    if not form.validate():
        return invalid_form(form)

    user = User.query.filter_by(email=form.email.data.strip().lower()).first()
    if user and user.is_active:
        token = _serializer().dumps(user.email)
        # No mail transport: the reset link is handed to operators through the log.
        logger.info("Password reset requested for %s: token=%s", user.email, token)

    return status_response(True, "If an account exists for this email, a password reset link has been sent.")


@auth_bp.route("/reset-password", methods=["POST"])
def reset_password():
    form = bind_form(ResetPasswordForm)
    if not form.validate():
        return invalid_form(form)

    try:
        email = _serializer().loads(form.token.data, max_age=current_app.config["PASSWORD_RESET_MAX_AGE"])
    except SignatureExpired:
        return mutation_response("Invalid data provided.", errors={"token": ["This reset link has expired."]}, status=400)
    except BadSignature:
        return mutation_response("Invalid data provided.", errors={"token": ["This reset link is invalid."]}, status=400)

    user = User.query.filter_by(email=email).first()
    if user is None:
        return mutation_response("Invalid data provided.", errors={"token": ["This reset link is invalid."]}, status=400)

    user.set_password(form.password.data)
    try:
        db.session.commit()
    except Exception:
        return server_failure("Failed to reset password.")

    return mutation_response("Password updated successfully. You can now log in.")
