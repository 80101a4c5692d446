import logging
import secrets
from urllib.parse import urlencode

import requests
from flask import Blueprint, current_app, jsonify, redirect, request, session

from auth import (
    clear_session_cookie,
    create_session,
    delete_session,
    get_session_token,
    resolve_session,
    set_session_cookie,
)
from extensions import db
from models import User

logger = logging.getLogger(__name__)

GITHUB_AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
GITHUB_TOKEN_URL = "https://github.com/login/oauth/access_token"
GITHUB_API_URL = "https://api.github.com"

auth_bp = Blueprint("github_auth", __name__)


class GitHubAuthError(Exception):
    pass


def callback_url():
    return current_app.config["APP_BASE_URL"].rstrip("/") + "/api/auth/callback/github"


def exchange_code(code):
    response = requests.post(
        GITHUB_TOKEN_URL,
        headers={"Accept": "application/json"},
        json={
            "client_id": current_app.config["GITHUB_CLIENT_ID"],
            "client_secret": current_app.config["GITHUB_CLIENT_SECRET"],
            "code": code,
        },
        timeout=current_app.config["GITHUB_TIMEOUT"],
    )
    response.raise_for_status()
    data = response.json()
    if data.get("error"):
        raise GitHubAuthError(data.get("error_description") or data["error"])
    return data["access_token"]


def _github_get(path, access_token):
    response = requests.get(
        GITHUB_API_URL + path,
        headers={
            "Authorization": f"Bearer {access_token}",
            "Accept": "application/vnd.github.v3+json",
        },
        timeout=current_app.config["GITHUB_TIMEOUT"],
    )
    response.raise_for_status()
    return response.json()


def fetch_profile(access_token):
    """GitHub profile plus the account's primary email."""
    profile = _github_get("/user", access_token)
    emails = _github_get("/user/emails", access_token)

    primary = next((e.get("email") for e in emails if e.get("primary")), None)
    profile["primary_email"] = primary or profile.get("email")
    return profile


def upsert_user(profile):
    email = profile["primary_email"]
    name = profile.get("name") or profile.get("login")
    image = profile.get("avatar_url")

    user = User.query.filter_by(email=email).first()
    if user is None:
        user = User(
            email=email,
            name=name,
            image=image,
            role=current_app.config["DEFAULT_USER_ROLE"],
        )
        db.session.add(user)
        db.session.commit()
        logger.info("New user created: %s (%s)", user.id, user.role)
    else:
        # role is left alone; only an admin changes it
        user.name = name
        user.image = image
        db.session.commit()
        logger.info("User updated: %s", user.id)
    return user


@auth_bp.route("/signin/github")
def signin_github():
    state = secrets.token_urlsafe(16)
    session["oauth_state"] = state

    query = urlencode({
        "client_id": current_app.config["GITHUB_CLIENT_ID"],
        "redirect_uri": callback_url(),
        "scope": "user:email",
        "state": state,
    })
    return redirect(f"{GITHUB_AUTHORIZE_URL}?{query}", code=302)


@auth_bp.route("/callback/github")
def callback_github():
    code = request.args.get("code")
    if not code:
        return jsonify({"error": "No authorization code provided"}), 400

    expected_state = session.pop("oauth_state", None)
    if not expected_state or request.args.get("state") != expected_state:
        return jsonify({"error": "Invalid OAuth state"}), 400

    try:
        access_token = exchange_code(code)
        profile = fetch_profile(access_token)
    except (requests.RequestException, GitHubAuthError, KeyError, ValueError):
        logger.exception("GitHub callback failed")
        return jsonify({"error": "Authentication failed"}), 500

    if not profile.get("primary_email"):
        return jsonify({"error": "GitHub account has no email address"}), 400

    try:
        user = upsert_user(profile)
        user_session = create_session(user)
    except Exception:
        logger.exception("Could not sign in GitHub user %s", profile.get("login"))
        db.session.rollback()
        return jsonify({"error": "Authentication failed"}), 500

    response = redirect("/dashboard", code=302)
    return set_session_cookie(response, user_session.session_token)


@auth_bp.route("/session")
def current_session():
    token = get_session_token()
    session_data = resolve_session(token)
    if session_data is None:
        response = jsonify({"user": None, "session": None})
        if token:
            clear_session_cookie(response)
        return response
    return jsonify(session_data.to_dict())


@auth_bp.route("/signout", methods=["GET", "POST"])
def signout():
    delete_session(get_session_token())
    response = jsonify({"success": True})
    return clear_session_cookie(response)
