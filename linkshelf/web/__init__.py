from flask import Blueprint

web_bp = Blueprint("web", __name__)

from linkshelf.web import routes  # noqa: E402,F401
