from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from linkshelf.services.metadata import extract_page_text, fetch_page


logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available"
NO_SUMMARY = "No summary available"

SYSTEM_PROMPT = (
    "You are a helpful assistant that creates concise summaries of web content. "
    "Focus on the main points and key information."
)


@dataclass
class SummarySettings:
    api_url: str
    api_key: str
    model: str
    max_tokens: int = 150
    timeout: float = 30.0
    fetch_timeout: float = 10.0
    max_bytes: int = 2_500_000
    input_chars: int = 4000

    @classmethod
    def from_config(cls, config) -> "SummarySettings":
        return cls(
            api_url=config["SUMMARY_API_URL"],
            api_key=config["SUMMARY_API_KEY"],
            model=config["SUMMARY_MODEL"],
            max_tokens=config["SUMMARY_MAX_TOKENS"],
            timeout=config["SUMMARY_TIMEOUT"],
            fetch_timeout=config["CONTENT_FETCH_TIMEOUT"],
            max_bytes=config["CONTENT_MAX_BYTES"],
            input_chars=config["SUMMARY_INPUT_CHARS"],
        )

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)


def _page_content(url: str, settings: SummarySettings) -> str:
    try:
        html, _ = fetch_page(
            url, timeout=settings.fetch_timeout, max_bytes=settings.max_bytes
        )
    except Exception as exc:
        logger.warning("Error extracting content from %s: %s", url, exc)
        return ""
    return extract_page_text(html, settings.input_chars)


def request_completion(content: str, settings: SummarySettings) -> str:
    payload = {
        "model": settings.model,
        "max_tokens": settings.max_tokens,
        "messages": [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": "Please provide a concise summary of the following "
                f"content:\n\n{content}",
            },
        ],
    }
    headers = {
        "Authorization": f"Bearer {settings.api_key}",
        "Content-Type": "application/json",
    }
    response = httpx.post(
        settings.api_url, json=payload, headers=headers, timeout=settings.timeout
    )
    response.raise_for_status()
    data = response.json()
    return (data["choices"][0]["message"]["content"] or "").strip()


def generate_summary(
    url: str,
    description: str,
    settings: SummarySettings,
    content: str | None = None,
) -> str:
    """Short synopsis of the page at ``url``. Never raises.

    Without an API key the page description stands in for the summary.
    ``content`` is page text the caller already has; the page is only
    fetched here when it is ``None``.
    """
    description = (description or "").strip()
    if not settings.enabled:
        logger.debug("Summary API is not configured; using description for %s", url)
        return description or NO_DESCRIPTION

    try:
        if content is None:
            content = _page_content(url, settings)
        content = content[: settings.input_chars] or description
        if not content:
            return NO_DESCRIPTION
        summary = request_completion(content, settings)
    except Exception as exc:
        logger.warning("Error generating summary for %s: %s", url, exc)
        return description or NO_SUMMARY
    return summary or description or NO_SUMMARY
