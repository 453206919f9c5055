"""
Bearer token verification.

Tokens are issued by the identity layer; this module only checks them.  The
user is identified by the ``user_id`` claim (falling back to ``sub``), and a
``role`` claim of ``"admin"`` unlocks the admin endpoints.
"""

from __future__ import annotations

import logging
import uuid
from typing import Any

import jwt
from jwt.exceptions import (
    DecodeError,
    ExpiredSignatureError,
    ImmatureSignatureError,
    InvalidAlgorithmError,
    InvalidSignatureError,
    InvalidTokenError,
)

from core.exceptions import TokenExpiredError, TokenInvalidError

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


def _decode_token(token: str, secret: str) -> dict[str, Any]:
    """
    Low-level JWT decode.

    Raises a domain-specific exception for every failure mode so callers
    never need to import jwt themselves.
    """
    try:
        return jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError as exc:
        logger.warning("JWT expired | detail=%s", exc)
        raise TokenExpiredError("Access token has expired.") from exc
    except ImmatureSignatureError as exc:
        logger.warning("JWT not yet valid | detail=%s", exc)
        raise TokenInvalidError("Token is not yet valid (nbf).") from exc
    except InvalidSignatureError as exc:
        logger.warning("JWT signature mismatch")
        raise TokenInvalidError("Token signature is invalid.") from exc
    except InvalidAlgorithmError as exc:
        logger.warning("JWT algorithm violation | detail=%s", exc)
        raise TokenInvalidError("Token algorithm is not permitted.") from exc
    except DecodeError as exc:
        logger.warning("JWT decode error | detail=%s", exc)
        raise TokenInvalidError("Token could not be decoded.") from exc
    except InvalidTokenError as exc:
        logger.warning("JWT rejected | detail=%s", exc)
        raise TokenInvalidError("Token is invalid.") from exc


def verify_jwt(token: str, secret: str) -> dict[str, Any]:
    if not token or not isinstance(token, str):
        raise TokenInvalidError("Token must be a non-empty string.")
    if not secret:
        raise TokenInvalidError("Token verification is not configured.")
    return _decode_token(token, secret)


def user_id_from_claims(payload: dict[str, Any]) -> uuid.UUID:
    raw = payload.get("user_id") or payload.get("sub")
    if not raw:
        raise TokenInvalidError("Token is missing the user_id claim.")
    try:
        return uuid.UUID(str(raw))
    except ValueError as exc:
        raise TokenInvalidError("Invalid user ID") from exc
