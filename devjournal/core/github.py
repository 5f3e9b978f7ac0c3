"""GitHub naming and webhook signature utilities."""

import hashlib
import hmac

SIGNATURE_PREFIX = "sha256="


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split ``owner/repo`` into ``(owner, repo)``.

    Also accepts ``https://github.com/owner/repo`` style URLs.
    Raises ValueError if the name cannot be parsed.
    """
    result = _extract_owner_repo(full_name)
    if result is None:
        raise ValueError(f"cannot parse repository name: {full_name!r}")
    owner, repo = result.split("/", 1)
    return owner, repo


def is_full_name(value: str) -> bool:
    """Return True if *value* looks like ``owner/repo``."""
    parts = value.strip().split("/")
    return len(parts) == 2 and all(p.strip() for p in parts)


def _extract_owner_repo(value: str) -> str | None:
    value = value.strip().rstrip("/")
    if value.endswith(".git"):
        value = value[:-4]
    if "://" in value:
        value = value.split("://", 1)[1]
        # drop host
        if "/" not in value:
            return None
        value = value.split("/", 1)[1]
    parts = value.split("/")
    if len(parts) != 2 or not all(parts):
        return None
    return f"{parts[0]}/{parts[1]}"


def compute_signature(secret: str, body: bytes) -> str:
    """Return the ``sha256=<hex>`` signature GitHub sends for *body*."""
    digest = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(secret: str, body: bytes, header: str | None) -> bool:
    """Constant-time comparison of *header* against the expected signature."""
    if not header:
        return False
    return hmac.compare_digest(header.strip(), compute_signature(secret, body))
