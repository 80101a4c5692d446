"""
Login sessions and request guards.

A session token lives in an HTTP-only cookie and maps to a row in the
`sessions` table. Guards resolve that row on every request and hand the
resulting user to the view as an explicit argument.
"""

import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import wraps
from typing import Optional

from flask import current_app, jsonify, redirect, render_template, request, url_for
from werkzeug.exceptions import HTTPException
from werkzeug.wrappers import Response

from access_control import AccessDeniedError, can_access_page, has_role, is_authenticated
from extensions import db
from models import UserSession, utcnow

logger = logging.getLogger(__name__)


@dataclass
class AuthUser:
    id: str
    email: str
    role: str
    name: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_model(cls, user):
        return cls(id=user.id, email=user.email, role=user.role, name=user.name, image=user.image)

    def to_dict(self):
        return {
            "id": self.id,
            "email": self.email,
            "name": self.name,
            "image": self.image,
            "role": self.role,
        }


@dataclass
class SessionData:
    user: AuthUser
    session_id: str
    expires: datetime

    def to_dict(self):
        return {
            "user": self.user.to_dict(),
            "session": {"id": self.session_id, "expires": self.expires.isoformat()},
        }


def get_session_token(req=None):
    req = req or request
    return req.cookies.get(current_app.config["AUTH_COOKIE_NAME"]) or None


def resolve_session(token):
    """
    Turn a raw cookie value into SessionData, or None.

    Expired rows are deleted on sight. Lookup errors are logged and treated
    as "no session"; this function never raises.
    """
    if not token:
        return None

    try:
        row = UserSession.query.filter_by(session_token=token).first()
        if row is None:
            return None

        if row.expires <= utcnow():
            logger.info("Removing expired session %s for user %s", row.id, row.user_id)
            db.session.delete(row)
            db.session.commit()
            return None

        return SessionData(
            user=AuthUser.from_model(row.user),
            session_id=row.id,
            expires=row.expires,
        )
    except Exception:
        logger.exception("Session lookup failed")
        db.session.rollback()
        return None


def get_current_session():
    return resolve_session(get_session_token())


def create_session(user):
    days = current_app.config["AUTH_SESSION_DAYS"]
    row = UserSession(
        session_token=secrets.token_hex(32),
        user_id=user.id,
        expires=utcnow() + timedelta(days=days),
    )
    db.session.add(row)
    db.session.commit()
    return row


def delete_session(token):
    if not token:
        return 0
    deleted = UserSession.query.filter_by(session_token=token).delete()
    db.session.commit()
    return deleted


def purge_expired_sessions():
    deleted = UserSession.query.filter(UserSession.expires <= utcnow()).delete()
    db.session.commit()
    return deleted


def set_session_cookie(response, token):
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        token,
        max_age=current_app.config["AUTH_SESSION_DAYS"] * 24 * 60 * 60,
        path="/",
        httponly=True,
        samesite="Lax",
        secure=current_app.config.get("SESSION_COOKIE_SECURE", False),
    )
    return response


def clear_session_cookie(response):
    response.set_cookie(
        current_app.config["AUTH_COOKIE_NAME"],
        "",
        max_age=0,
        path="/",
        httponly=True,
        samesite="Lax",
    )
    return response


def with_auth(required_role=None):
    """
    Guard a JSON endpoint. The view is called as view(user, *args, **kwargs).

    Authentication is checked before the role, so an anonymous caller always
    gets 401, never 403.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(*args, **kwargs):
            try:
                session_data = get_current_session()
                if session_data is None:
                    return jsonify({"error": "Not authenticated"}), 401

                user = session_data.user
                if required_role and not has_role(user, required_role):
                    return jsonify({"error": "Access denied"}), 403

                return view_func(user, *args, **kwargs)
            except AccessDeniedError as e:
                return jsonify({"error": str(e)}), e.status_code
            except HTTPException:
                raise
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                db.session.rollback()
                return jsonify({"error": "Internal server error"}), 500

        return _wrapped_view
    return decorator


def page_view(template_name=None):
    """
    Guard an HTML page by its path and render what the view returns.

    The view is called as view(user, *args, **kwargs), where user may be None
    on public pages. It returns a response, a context dict, or a
    (template, context) tuple.
    """
    def decorator(view_func):
        @wraps(view_func)
        def _wrapped_view(*args, **kwargs):
            session_data = get_current_session()
            user = session_data.user if session_data else None

            if not can_access_page(user, request.path):
                if not is_authenticated(user):
                    return redirect(url_for("views.signin"))
                return redirect(url_for("views.unauthorized"))

            try:
                response = view_func(user, *args, **kwargs)
            except HTTPException:
                raise
            except Exception:
                logger.exception("Unhandled error in %s", request.path)
                db.session.rollback()
                raise

            if isinstance(response, (Response, HTTPException)):
                return response

            if isinstance(response, tuple) and len(response) == 2:
                template_override, context = response
                template_to_use = template_override or template_name
            else:
                template_to_use = template_name
                context = response if isinstance(response, dict) else {}

            context.setdefault("user", user)
            return render_template(template_to_use, **context)

        return _wrapped_view
    return decorator
