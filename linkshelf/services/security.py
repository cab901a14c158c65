from __future__ import annotations

from dataclasses import dataclass
from functools import wraps

from flask import current_app, g, request
from itsdangerous import BadData, URLSafeTimedSerializer

from linkshelf.errors import Unauthorized
from linkshelf.extensions import db, login_manager
from linkshelf.models import User


@dataclass(frozen=True)
class AuthSettings:
    secret_key: str
    max_age: int
    cookie_name: str = "token"
    cookie_secure: bool = False

    @classmethod
    def from_config(cls, config) -> "AuthSettings":
        return cls(
            secret_key=config["SECRET_KEY"],
            max_age=config["AUTH_TOKEN_MAX_AGE"],
            cookie_name=config["AUTH_COOKIE_NAME"],
            cookie_secure=config["AUTH_COOKIE_SECURE"],
        )


class AuthGate:
    """Issues and validates signed session tokens."""

    salt = "linkshelf-auth"

    def __init__(self, settings: AuthSettings):
        self.settings = settings
        self._serializer = URLSafeTimedSerializer(
            secret_key=settings.secret_key, salt=self.salt
        )

    def issue_token(self, user_id: int) -> str:
        return self._serializer.dumps({"user_id": user_id})

    def identify(self, token: str) -> int:
        try:
            payload = self._serializer.loads(token, max_age=self.settings.max_age)
        except BadData:
            raise Unauthorized("Invalid or expired token")

        user_id = payload.get("user_id") if isinstance(payload, dict) else None
        if not isinstance(user_id, int) or isinstance(user_id, bool):
            raise Unauthorized("Invalid token payload")
        return user_id

    def token_from_request(self, req) -> str | None:
        token = (req.cookies.get(self.settings.cookie_name) or "").strip()
        if token:
            return token
        auth_header = req.headers.get("Authorization", "")
        if not auth_header.startswith("Bearer "):
            return None
        return auth_header.removeprefix("Bearer ").strip() or None

    def set_cookie(self, response, token: str) -> None:
        response.set_cookie(
            self.settings.cookie_name,
            token,
            max_age=self.settings.max_age,
            httponly=True,
            secure=self.settings.cookie_secure,
            samesite="Lax",
        )

    def clear_cookie(self, response) -> None:
        response.delete_cookie(self.settings.cookie_name)


def get_auth_gate() -> AuthGate:
    return current_app.extensions["auth_gate"]


def authenticate_request() -> User:
    gate = get_auth_gate()
    token = gate.token_from_request(request)
    if not token:
        raise Unauthorized()
    user = db.session.get(User, gate.identify(token))
    if not user:
        raise Unauthorized("Invalid token payload")
    return user


@login_manager.request_loader
def load_user_from_request(req):
    try:
        return authenticate_request()
    except Unauthorized:
        return None


def api_auth_required(func):
    @wraps(func)
    def wrapped(*args, **kwargs):
        g.api_user = authenticate_request()
        return func(*args, **kwargs)

    return wrapped
