"""Basic-auth gate for gateway routes."""
import base64
import binascii
import logging
import secrets
from typing import Mapping, Optional, Tuple

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

from browsable_sql.options import BasicAuthCredentials, BrowsableOptions

logger = logging.getLogger(__name__)

AUTH_CHALLENGE = 'Basic realm="Secure Area"'
MISSING_CONFIG_MESSAGE = (
    "Authentication configuration missing. Please pass 'basic_auth' to your BrowsableGateway."
)


def basic_authorization(username: str, password: str) -> str:
    """Builds an ``Authorization`` header value for the given credentials."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"


def parse_basic_authorization(header: Optional[str]) -> Optional[Tuple[str, str]]:
    """Decodes a ``Basic`` header into ``(username, password)``.

    Returns None for a missing or malformed header. The decoded value is split
    on the first colon only, so passwords may contain colons.
    """
    if not header or not header.startswith("Basic "):
        return None

    encoded = header[len("Basic "):].strip()
    try:
        decoded = base64.b64decode(encoded, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        return None

    username, sep, password = decoded.partition(":")
    if not sep:
        return None
    return username, password


def credentials_match(supplied: Tuple[str, str], expected: BasicAuthCredentials) -> bool:
    username, password = supplied
    # Both comparisons always run.
    user_ok = secrets.compare_digest(username.encode("utf-8"), expected.username.encode("utf-8"))
    pass_ok = secrets.compare_digest(password.encode("utf-8"), expected.password.encode("utf-8"))
    return user_ok and pass_ok


def check_basic_auth(
    request: Request,
    credentials: BasicAuthCredentials,
    extra_headers: Mapping[str, str],
) -> Optional[Response]:
    """Checks the request's Authorization header against ``credentials``.

    Returns None when the credentials match. A missing or malformed header gets
    a challenge so browsers show their native prompt; wrong credentials get a
    plain 401 without the challenge.
    """
    supplied = parse_basic_authorization(request.headers.get("Authorization"))
    if supplied is None:
        logger.warning("Rejected request to %s: authentication required", request.url.path)
        return PlainTextResponse(
            "Authentication required",
            status_code=401,
            headers={**extra_headers, "WWW-Authenticate": AUTH_CHALLENGE},
        )

    if not credentials_match(supplied, credentials):
        logger.warning("Rejected request to %s: invalid credentials", request.url.path)
        return PlainTextResponse("Invalid credentials", status_code=401, headers=dict(extra_headers))

    return None


def check_auth(request: Request, options: BrowsableOptions) -> Optional[Response]:
    """Auth gate. Returns None to proceed, or a rejection response.

    Args:
        request (Request): The incoming request.
        options (BrowsableOptions): Gateway options holding the auth policy.

    Returns:
        Optional[Response]: None when the request may proceed; a 500 response when
        auth is enabled but no credentials are configured; a 401 response otherwise.
    """
    if options.dangerously_disable_auth:
        return None

    if options.basic_auth is None:
        logger.error("Basic auth is enabled but no credentials are configured")
        return PlainTextResponse(MISSING_CONFIG_MESSAGE, status_code=500, headers=dict(options.cors_headers))

    return check_basic_auth(request, options.basic_auth, options.cors_headers)
