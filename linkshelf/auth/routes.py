from flask import g, jsonify, request
from sqlalchemy.exc import IntegrityError

from linkshelf.auth import auth_bp
from linkshelf.errors import Conflict, Unauthorized, ValidationError
from linkshelf.extensions import db
from linkshelf.models import User
from linkshelf.services.security import api_auth_required, get_auth_gate


def _credentials() -> tuple[str, str]:
    payload = request.get_json(silent=True) or {}
    username = str(payload.get("username") or "").strip()
    password = str(payload.get("password") or "")
    if not username or not password:
        raise ValidationError("username and password are required")
    return username, password


def _session_response(user: User, status: int = 200):
    gate = get_auth_gate()
    token = gate.issue_token(user.id)
    response = jsonify({"user": user.as_dict(), "token": token})
    response.status_code = status
    gate.set_cookie(response, token)
    return response


@auth_bp.route("/signup", methods=["POST"])
def signup():
    username, password = _credentials()
    if User.query.filter_by(username=username).first():
        raise Conflict("username already exists")

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise Conflict("username already exists") from exc
    return _session_response(user, status=201)


@auth_bp.route("/login", methods=["POST"])
def login():
    username, password = _credentials()
    user = User.query.filter_by(username=username).first()
    if not user or not user.check_password(password):
        raise Unauthorized("invalid credentials")
    return _session_response(user)


@auth_bp.route("/logout", methods=["POST"])
def logout():
    response = jsonify({"message": "Logged out"})
    get_auth_gate().clear_cookie(response)
    return response


@auth_bp.route("/me", methods=["GET"])
@api_auth_required
def me():
    return jsonify({"user": g.api_user.as_dict()})
