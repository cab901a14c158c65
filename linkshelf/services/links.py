from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from linkshelf.errors import DuplicateLink, InternalError, NotFound, ValidationError
from linkshelf.extensions import db
from linkshelf.models import Link
from linkshelf.services.common import is_absolute_url, parse_tags
from linkshelf.services.metadata import PageMetadata, fallback_metadata
from linkshelf.services.summary import NO_SUMMARY


logger = logging.getLogger(__name__)

MetadataFetcher = Callable[[str], PageMetadata]
SummaryProvider = Callable[[str, str, str], str]

TITLE_MAX_LENGTH = 512
# Largest value the INTEGER columns accept.
MAX_COLUMN_INT = 2**63 - 1


def list_links(user_id: int) -> list[Link]:
    return (
        Link.query.filter_by(user_id=user_id)
        .order_by(Link.position.asc(), Link.id.asc())
        .all()
    )


def get_user_link(user_id: int, link_id: int) -> Link:
    link = Link.query.filter_by(id=link_id, user_id=user_id).first()
    if not link:
        raise NotFound("Link not found")
    return link


def _next_position(user_id: int) -> int:
    current = (
        db.session.query(func.max(Link.position))
        .filter(Link.user_id == user_id)
        .scalar()
    )
    return 0 if current is None else current + 1


def _collect_metadata(url: str, fetch_metadata: MetadataFetcher) -> PageMetadata:
    try:
        metadata = fetch_metadata(url)
    except Exception:
        logger.warning("Metadata fetch failed for %s", url, exc_info=True)
        return fallback_metadata(url)
    if metadata is None:
        return fallback_metadata(url)
    return metadata


def _collect_summary(
    url: str, metadata: PageMetadata, generate_summary: SummaryProvider
) -> str:
    description = metadata.description
    try:
        summary = generate_summary(url, description, metadata.text)
    except Exception:
        logger.warning("Summary generation failed for %s", url, exc_info=True)
        summary = ""
    return (summary or "").strip() or description or NO_SUMMARY


def _rollback_and_raise(exc: SQLAlchemyError, action: str):
    db.session.rollback()
    logger.error("Store failure while %s: %s", action, exc)
    raise InternalError() from exc


def create_link(
    user_id: int,
    url: str,
    tags=None,
    *,
    fetch_metadata: MetadataFetcher,
    generate_summary: SummaryProvider,
) -> Link:
    url = (url or "").strip() if isinstance(url, str) else ""
    if not url:
        raise ValidationError("URL is required")
    if not is_absolute_url(url):
        raise ValidationError("Invalid URL")
    if tags is not None and not isinstance(tags, (list, tuple, str)):
        raise ValidationError("tags must be a list of strings")
    tag_names = parse_tags(tags)

    if Link.query.filter_by(user_id=user_id, url=url).first():
        raise DuplicateLink("Link already saved")

    metadata = _collect_metadata(url, fetch_metadata)
    summary = _collect_summary(url, metadata, generate_summary)
    title = (metadata.title or "").strip()[:TITLE_MAX_LENGTH] or url

    try:
        link = Link(
            user_id=user_id,
            url=url,
            title=title,
            favicon=(metadata.favicon or "").strip(),
            summary=summary,
            tags=tag_names,
            position=_next_position(user_id),
        )
        db.session.add(link)
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateLink("Link already saved") from exc
    except SQLAlchemyError as exc:
        _rollback_and_raise(exc, "creating a link")

    logger.info(
        "Saved link %s for user %s at order %s", link.id, user_id, link.position
    )
    return link


def delete_link(user_id: int, link_id: int) -> None:
    link = get_user_link(user_id, link_id)
    removed_position = link.position

    try:
        db.session.delete(link)
        # Close the gap left behind so orders stay 0..n-1.
        Link.query.filter(
            Link.user_id == user_id, Link.position > removed_position
        ).update({Link.position: Link.position - 1}, synchronize_session=False)
        db.session.commit()
    except SQLAlchemyError as exc:
        _rollback_and_raise(exc, "deleting a link")

    logger.info("Deleted link %s for user %s", link_id, user_id)


def _as_int(value) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not (value.isascii() and value.isdigit()):
            return None
        value = int(value)
    if not isinstance(value, int) or abs(value) > MAX_COLUMN_INT:
        return None
    return value


def parse_reorder_payload(payload) -> list[tuple[int, int]]:
    if not isinstance(payload, dict) or not isinstance(payload.get("orders"), list):
        raise ValidationError("Invalid orders data")

    parsed: list[tuple[int, int]] = []
    seen_ids: set[int] = set()
    for item in payload["orders"]:
        if not isinstance(item, dict):
            raise ValidationError("Invalid orders data")
        link_id = _as_int(item.get("id"))
        order = _as_int(item.get("order"))
        if link_id is None or order is None or order < 0:
            raise ValidationError("Each entry needs an integer id and order")
        if link_id in seen_ids:
            raise ValidationError(f"Link {link_id} appears more than once")
        seen_ids.add(link_id)
        parsed.append((link_id, order))
    return parsed


def reorder_links(user_id: int, orders: list[tuple[int, int]]) -> None:
    """Write the client's ordering for the whole collection in one transaction.

    Every id must belong to ``user_id`` and every owned link must be listed.
    The order numbers themselves are stored as submitted.
    """
    owned = {link.id: link for link in Link.query.filter_by(user_id=user_id).all()}
    requested = {link_id for link_id, _ in orders}

    if requested - owned.keys():
        raise NotFound("Link not found")
    if owned.keys() - requested:
        raise ValidationError("orders must include every saved link")

    try:
        for link_id, order in orders:
            owned[link_id].position = order
        db.session.commit()
    except SQLAlchemyError as exc:
        _rollback_and_raise(exc, "reordering links")

    logger.info("Reordered %s links for user %s", len(orders), user_id)


def refresh_summary(
    user_id: int,
    link_id: int,
    *,
    fetch_metadata: MetadataFetcher,
    generate_summary: SummaryProvider,
) -> Link:
    link = get_user_link(user_id, link_id)
    metadata = _collect_metadata(link.url, fetch_metadata)
    link.summary = _collect_summary(link.url, metadata, generate_summary)
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        _rollback_and_raise(exc, "refreshing a summary")
    return link
