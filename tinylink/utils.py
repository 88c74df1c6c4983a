import re
import secrets
import string
from typing import Optional

from pydantic import HttpUrl, TypeAdapter, ValidationError

from .exceptions import InvalidUrlError

ALPHABET = string.ascii_letters + string.digits
CODE_LENGTH = 7
CODE_PATTERN = re.compile(r"[A-Za-z0-9]{6,8}")

# Top-level routes the app serves itself; a link under one of these names could never redirect
ROUTE_NAMES = frozenset({"healthz", "metrics", "static"})

_SCHEME_PATTERN = re.compile(r"^https?://", re.IGNORECASE)
_http_url = TypeAdapter(HttpUrl)

def generate_random_code(length: int = CODE_LENGTH) -> str:
    return "".join(secrets.choice(ALPHABET) for _ in range(length))

def is_valid_code(code) -> bool:
    if not isinstance(code, str):
        return False
    return CODE_PATTERN.fullmatch(code) is not None

def normalize_url(raw: Optional[str]) -> str:
    """Trim, default the scheme to https and check the result is an absolute http(s) URL.

    The returned string is the caller's input with at most a scheme prepended;
    pydantic is only used to validate it.
    """
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidUrlError()

    candidate = raw.strip()
    if not _SCHEME_PATTERN.match(candidate):
        candidate = "https://" + candidate

    try:
        _http_url.validate_python(candidate)
    except ValidationError as e:
        raise InvalidUrlError() from e
    return candidate
