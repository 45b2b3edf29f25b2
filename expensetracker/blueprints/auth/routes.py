from urllib.parse import urlparse

import structlog
from flask import Blueprint, abort, current_app, render_template, request, redirect, url_for, flash
from flask_login import login_user, logout_user, login_required, current_user
from ...extensions import db
from ...models import User

auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
log = structlog.get_logger(__name__)


def upsert_user(claims) -> User:
    """Create or refresh the local record for an identity-provider subject."""
    user = db.session.get(User, claims["sub"])
    if user is None:
        user = User(id=claims["sub"])
        db.session.add(user)
    user.email = claims.get("email") or user.email
    user.first_name = claims.get("first_name") or user.first_name
    user.last_name = claims.get("last_name") or user.last_name
    user.profile_image_url = claims.get("profile_image_url") or user.profile_image_url
    db.session.commit()
    return user


def sign_in(claims) -> User:
    """Start a session for an authenticated principal."""
    user = upsert_user(claims)
    login_user(user)
    log.info("signed_in", user_id=user.id)
    return user


def safe_next(target):
    """Return ``target`` only if it is a path on this site."""
    if not target:
        return None
    parsed = urlparse(target)
    # browsers treat a backslash like a slash, so "/\host" leaves the site too
    if parsed.scheme or parsed.netloc or not target.startswith("/") or "\\" in target:
        return None
    return target


@auth_bp.route("/login", methods=["GET"])
def login():
    if current_user.is_authenticated:
        return redirect(url_for("dashboard.index"))
    return render_template(
        "auth/login.html",
        provider_url=current_app.config["IDENTITY_PROVIDER_LOGIN_URL"],
        dev_login=current_app.config["DEV_LOGIN_ENABLED"],
        next_url=safe_next(request.args.get("next")),
    )


@auth_bp.route("/dev-login", methods=["POST"])
def dev_login():
    if not current_app.config["DEV_LOGIN_ENABLED"]:
        abort(404)
    subject = (request.form.get("user_id") or "").strip()
    if not subject:
        flash("User id is required", "danger")
        return redirect(url_for("auth.login"))
    sign_in({"sub": subject, "email": (request.form.get("email") or "").strip() or None})
    flash("Logged in successfully", "success")
    return redirect(safe_next(request.form.get("next")) or url_for("dashboard.index"))


@auth_bp.route("/logout")
@login_required
def logout():
    log.info("signed_out", user_id=current_user.id)
    logout_user()
    flash("Logged out", "info")
    return redirect(url_for("auth.login"))
