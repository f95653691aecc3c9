"""HS256 bearer tokens identifying the current user.

Pure encode/decode functions. Issuing tokens for real users belongs to the
portal's identity provider; ``create_token`` exists for service accounts,
scripts and tests.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

TOKEN_ISSUER = "labshelf"


@dataclass(frozen=True)
class TokenPayload:
    """Decoded token claims."""
    sub: str
    role: str
    exp: datetime


def create_token(
    subject: str,
    role: str,
    secret: str,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Return a signed token for *subject* valid for *expires_hours*."""
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    issued_at = int(time.time())
    header = _encode_segment({"alg": "HS256", "typ": "JWT"})
    claims = _encode_segment({
        "sub": subject,
        "role": role,
        "iat": issued_at,
        "exp": issued_at + expires_hours * 3600,
        "iss": TOKEN_ISSUER,
    })
    signing_input = header + b"." + claims
    return (signing_input + b"." + _b64encode(_sign(secret, signing_input))).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Validate *token* and return its claims, or ``None`` when it is unusable.

    Bad signatures, expired tokens, foreign issuers and malformed input all
    yield ``None``; the caller decides whether absence is an error.
    """
    if algorithm != "HS256":
        return None
    try:
        header, claims, signature = token.encode().split(b".")
    except ValueError:
        return None

    try:
        if not hmac.compare_digest(_sign(secret, header + b"." + claims), _b64decode(signature)):
            return None
        payload = json.loads(_b64decode(claims))
    except (ValueError, TypeError):
        return None

    if not isinstance(payload, dict) or payload.get("iss", TOKEN_ISSUER) != TOKEN_ISSUER:
        return None

    exp = payload.get("exp", 0)
    if not isinstance(exp, (int, float)) or time.time() > exp:
        return None

    return TokenPayload(
        sub=str(payload.get("sub", "")),
        role=str(payload.get("role", "")),
        exp=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


def _sign(secret: str, data: bytes) -> bytes:
    return hmac.new(secret.encode(), data, hashlib.sha256).digest()


def _encode_segment(obj: dict) -> bytes:
    return _b64encode(json.dumps(obj, separators=(",", ":")).encode())


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
