from __future__ import annotations

from flask import current_app, g, jsonify, request

from linkshelf.api import api_bp
from linkshelf.errors import ValidationError
from linkshelf.services.links import (
    create_link,
    delete_link,
    list_links,
    parse_reorder_payload,
    refresh_summary,
    reorder_links,
)
from linkshelf.services.metadata import fetch_metadata
from linkshelf.services.security import api_auth_required
from linkshelf.services.summary import SummarySettings, generate_summary


def _metadata_fetcher():
    timeout = current_app.config["CONTENT_FETCH_TIMEOUT"]
    max_bytes = current_app.config["CONTENT_MAX_BYTES"]
    text_chars = current_app.config["SUMMARY_INPUT_CHARS"]

    def fetch(url: str):
        return fetch_metadata(
            url, timeout=timeout, max_bytes=max_bytes, text_chars=text_chars
        )

    return fetch


def _summary_provider():
    settings = SummarySettings.from_config(current_app.config)

    def summarize(url: str, description: str, content: str) -> str:
        return generate_summary(url, description, settings, content=content)

    return summarize


@api_bp.route("/health")
def health():
    return jsonify({"status": "ok", "service": "LinkShelf"})


@api_bp.route("/links", methods=["GET"])
@api_auth_required
def links_list():
    user = g.api_user
    return jsonify([link.as_dict() for link in list_links(user.id)])


@api_bp.route("/links", methods=["POST"])
@api_auth_required
def links_create():
    user = g.api_user
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise ValidationError("URL is required")

    link = create_link(
        user.id,
        payload.get("url"),
        payload.get("tags"),
        fetch_metadata=_metadata_fetcher(),
        generate_summary=_summary_provider(),
    )
    return jsonify(link.as_dict()), 201


@api_bp.route("/links/reorder", methods=["POST"])
@api_auth_required
def links_reorder():
    user = g.api_user
    orders = parse_reorder_payload(request.get_json(silent=True))
    reorder_links(user.id, orders)
    return jsonify({"message": "Links reordered successfully"})


@api_bp.route("/links/<int:link_id>", methods=["DELETE"])
@api_auth_required
def links_delete(link_id: int):
    user = g.api_user
    delete_link(user.id, link_id)
    return jsonify({"message": "Link deleted successfully"})


@api_bp.route("/links/<int:link_id>/summary", methods=["POST"])
@api_auth_required
def links_refresh_summary(link_id: int):
    user = g.api_user
    link = refresh_summary(
        user.id,
        link_id,
        fetch_metadata=_metadata_fetcher(),
        generate_summary=_summary_provider(),
    )
    return jsonify(link.as_dict())
