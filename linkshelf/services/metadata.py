from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning


logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {
    "User-Agent": "LinkShelfBot/1.0 (+https://linkshelf.local)",
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}

ICON_RELS = ("icon", "shortcut icon", "apple-touch-icon")


@dataclass
class PageMetadata:
    title: str
    favicon: str
    description: str
    text: str = ""


class PageFetchError(Exception):
    pass


def fallback_metadata(url: str) -> PageMetadata:
    return PageMetadata(title=url, favicon="", description="")


def fetch_html(url: str, timeout: float, max_bytes: int) -> tuple[str, str, int]:
    with httpx.Client(
        follow_redirects=True, timeout=timeout, headers=DEFAULT_HEADERS
    ) as client:
        with client.stream("GET", url) as response:
            status_code = response.status_code
            chunks = []
            total = 0
            for chunk in response.iter_bytes():
                total += len(chunk)
                if total > max_bytes:
                    break
                chunks.append(chunk)
            data = b"".join(chunks)
            encoding = response.encoding or "utf-8"
            return (
                data.decode(encoding, errors="ignore"),
                str(response.url),
                status_code,
            )


def fetch_page(url: str, timeout: float, max_bytes: int) -> tuple[str, str]:
    """Fetch ``url`` and return ``(html, final_url)``.

    Transport failures are retried once with a longer timeout. A non-2xx
    answer or a second transport failure raises :class:`PageFetchError`.
    """
    attempts = 2
    for attempt in range(1, attempts + 1):
        try:
            html, final_url, status_code = fetch_html(
                url,
                timeout=timeout * (1 + (attempt - 1) * 0.5),
                max_bytes=max_bytes,
            )
        except httpx.TransportError as exc:
            if attempt < attempts:
                continue
            raise PageFetchError(_normalize_error(exc)) from exc
        if not 200 <= status_code < 300:
            raise PageFetchError(f"Failed to fetch URL: HTTP {status_code}")
        return html, final_url

    raise PageFetchError("Unable to fetch content.")


def _normalize_error(exc: Exception) -> str:
    message = str(exc).strip()
    if message:
        return message
    return exc.__class__.__name__


def build_soup(html: str) -> BeautifulSoup:
    with warnings.catch_warnings():
        warnings.filterwarnings("ignore", category=XMLParsedAsHTMLWarning)
        return BeautifulSoup(html, "lxml")


def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if not tag:
        return ""
    return (tag.get("content") or "").strip()


def _find_icon_href(soup: BeautifulSoup) -> str:
    links = soup.find_all("link", href=True)
    for wanted in ICON_RELS:
        for link in links:
            rel = link.get("rel") or []
            if isinstance(rel, str):
                rel = rel.split()
            if " ".join(part.lower() for part in rel) == wanted:
                return link["href"].strip()
    return ""


def parse_metadata(html: str, page_url: str) -> PageMetadata:
    soup = build_soup(html)

    title = ""
    if soup.title and soup.title.string:
        title = soup.title.string.strip()
    if not title:
        title = _meta_content(soup, property="og:title")

    description = _meta_content(soup, name="description") or _meta_content(
        soup, property="og:description"
    )

    icon_href = _find_icon_href(soup) or "/favicon.ico"

    return PageMetadata(
        title=title or page_url,
        favicon=urljoin(page_url, icon_href),
        description=description,
    )


def fetch_metadata(
    url: str,
    timeout: float = 10.0,
    max_bytes: int = 2_500_000,
    text_chars: int = 4000,
) -> PageMetadata:
    """Best-effort page metadata. Never raises; falls back to the url.

    The visible page text, cut to ``text_chars``, rides along in
    ``PageMetadata.text`` so the summary step does not fetch the page again.
    """
    try:
        html, final_url = fetch_page(url, timeout=timeout, max_bytes=max_bytes)
        metadata = parse_metadata(html, final_url)
        metadata.text = extract_page_text(html, text_chars)
    except Exception as exc:
        logger.warning("Error fetching metadata for %s: %s", url, exc)
        return fallback_metadata(url)

    if metadata.title == final_url:
        metadata.title = url
    return metadata


def extract_page_text(html: str, limit: int) -> str:
    soup = build_soup(html)
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    body = soup.body or soup
    text = " ".join(body.get_text(" ").split())
    return text[:limit]
