from urllib.parse import urlparse


ALLOWED_SCHEMES = {"http", "https"}


def is_absolute_url(url: str) -> bool:
    if not url or any(ch.isspace() for ch in url):
        return False
    try:
        parsed = urlparse(url)
        # Accessing .port validates the netloc.
        parsed.port
    except ValueError:
        return False
    return parsed.scheme.lower() in ALLOWED_SCHEMES and bool(parsed.hostname)


def parse_tags(raw) -> list[str]:
    if not raw:
        return []
    if isinstance(raw, (list, tuple)):
        tokens = [str(item).strip() for item in raw if item is not None]
    else:
        tokens = [t.strip() for t in str(raw).replace(";", ",").split(",")]

    seen: set[str] = set()
    tags: list[str] = []
    for token in tokens:
        if not token or token in seen:
            continue
        seen.add(token)
        tags.append(token)
    return tags
