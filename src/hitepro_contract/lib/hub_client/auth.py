"""HTTP Basic authentication (RFC 7617)."""

import base64


def basic_auth_header(username: str, password: str) -> str:
    """Build the ``Authorization`` header value for HTTP Basic auth."""
    token = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
    return f"Basic {token}"
