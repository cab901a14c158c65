from flask import Flask, jsonify, request
from werkzeug.exceptions import HTTPException

from linkshelf.api import api_bp
from linkshelf.auth import auth_bp
from linkshelf.config import Config
from linkshelf.errors import LinkShelfError
from linkshelf.extensions import db, login_manager, migrate
from linkshelf.services.security import AuthGate, AuthSettings
from linkshelf.web import web_bp


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(LinkShelfError)
    def handle_linkshelf_error(exc: LinkShelfError):
        return jsonify({"error": exc.message}), exc.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(exc: HTTPException):
        if not request.path.startswith("/api/"):
            return exc
        return jsonify({"error": exc.description}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(exc: Exception):
        app.logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Something went wrong"}), 500


def create_app(config_object=Config):
    app = Flask(__name__, template_folder="../templates", static_folder="../static")
    app.config.from_object(config_object)
    app.logger.setLevel(app.config["LOG_LEVEL"])

    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    app.extensions["auth_gate"] = AuthGate(AuthSettings.from_config(app.config))

    app.register_blueprint(auth_bp)
    app.register_blueprint(web_bp)
    app.register_blueprint(api_bp)
    register_error_handlers(app)

    @app.cli.command("init-db")
    def init_db_command():
        db.create_all()
        print("Initialized LinkShelf database.")

    @app.context_processor
    def inject_globals():
        return {"app_name": "LinkShelf"}

    with app.app_context():
        db.create_all()

    return app
