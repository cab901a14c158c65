from flask import redirect, render_template, url_for
from flask_login import current_user

from linkshelf.web import web_bp


@web_bp.route("/")
def dashboard():
    if not current_user.is_authenticated:
        return redirect(url_for("web.login"))
    return render_template("index.html", username=current_user.username)


@web_bp.route("/login")
def login():
    if current_user.is_authenticated:
        return redirect(url_for("web.dashboard"))
    return render_template("login.html", mode="login")


@web_bp.route("/signup")
def signup():
    if current_user.is_authenticated:
        return redirect(url_for("web.dashboard"))
    return render_template("login.html", mode="signup")
