"""
Bearer credential helpers.

Provides ``read_token_expiry`` which turns the credential returned by the
auth endpoint into the session's expiry time.  When an RSA public key is
configured the token is fully verified (RS256 signature, ``exp`` claim,
clock-skew leeway); without a key the token is treated as opaque and the
``exp`` claim is only read, never trusted for authorisation.  The remote
API stays the authority either way.

Key Concepts Demonstrated:
- RS256 asymmetric verification with PyJWT
- Required-claim enforcement via PyJWT ``options``
- Clock-skew tolerance (``leeway``)
"""

from __future__ import annotations

from datetime import datetime, timezone

import jwt

DEFAULT_ALLOWED_ALGORITHMS = ["RS256"]
REQUIRED_TOKEN_CLAIMS = ["exp"]


def read_token_expiry(
    token: str,
    public_key: str | None = None,
    *,
    leeway: int = 30,
    algorithms: list[str] | None = None,
) -> datetime | None:
    """
    Return the expiry of a bearer credential, if it has one.

    Args:
        token: The credential string returned by the auth endpoint.
        public_key: Optional RSA public key (PEM).  When given, the token
            must be a valid, unexpired JWT signed with the matching key.
        leeway: Clock-skew tolerance in seconds, applied when verifying.
        algorithms: Allowed signing algorithms.  Defaults to
            ``["RS256"]`` when *None*.

    Returns:
        A UTC datetime, or ``None`` when the token is not a JWT or carries
        no ``exp`` claim (only possible without a public key).

    Raises:
        jwt.InvalidTokenError: If a public key is configured and the token
            fails verification.
    """
    if public_key:
        decoded = jwt.decode(
            token,
            public_key,
            algorithms=algorithms or DEFAULT_ALLOWED_ALGORITHMS,
            options={"require": REQUIRED_TOKEN_CLAIMS},
            leeway=leeway,
        )
    else:
        try:
            decoded = jwt.decode(token, options={"verify_signature": False})
        except jwt.InvalidTokenError:
            # Opaque, non-JWT credential.
            return None

    exp = decoded.get("exp")
    if not isinstance(exp, (int, float)):
        return None
    return datetime.fromtimestamp(exp, tz=timezone.utc)
