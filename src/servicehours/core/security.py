"""Identity-provider boundary: Firebase ID token verification and mock tokens.

Auth flow:
1. The browser signs in with Google through the Firebase SDK and gets an ID token.
2. Every API call carries that token as a bearer credential.
3. The token is verified here and reduced to a ``Principal``.
4. Domain policy, role resolution and onboarding happen in the identity service.

Mock mode accepts ``mock-<email>`` tokens so the API can be exercised locally
and in tests without a Firebase project.
"""

from __future__ import annotations

import logging
import os
import uuid
from dataclasses import dataclass
from typing import Optional

from .config import get_settings

logger = logging.getLogger(__name__)

MOCK_TOKEN_PREFIX = "mock-"

_firebase_app = None


class TokenVerificationError(Exception):
    """Raised when a bearer token cannot be turned into a principal."""


@dataclass(frozen=True)
class Principal:
    """Authenticated identity as reported by the identity provider."""

    uid: str
    email: str
    display_name: Optional[str] = None
    photo_url: Optional[str] = None


def _init_firebase() -> None:
    global _firebase_app
    if _firebase_app is not None:
        return
    import firebase_admin
    from firebase_admin import credentials as fb_credentials

    cred_path = get_settings().firebase_credentials_path
    if os.path.exists(cred_path):
        cred = fb_credentials.Certificate(cred_path)
        _firebase_app = firebase_admin.initialize_app(cred)
    else:
        # Fall back to application default credentials
        _firebase_app = firebase_admin.initialize_app()
    logger.info("firebase admin initialised")


def mock_uid(email: str) -> str:
    """Stable uid for a mock principal."""

    return uuid.uuid5(uuid.NAMESPACE_URL, f"mailto:{email.lower()}").hex


def _mock_principal(token: str) -> Principal:
    if not token.startswith(MOCK_TOKEN_PREFIX):
        raise TokenVerificationError("Invalid token.")
    email = token[len(MOCK_TOKEN_PREFIX):].strip().lower()
    if "@" not in email:
        raise TokenVerificationError("Invalid token.")
    return Principal(uid=mock_uid(email), email=email, display_name=email.split("@")[0])


def _firebase_principal(token: str) -> Principal:
    _init_firebase()
    from firebase_admin import auth as fb_auth

    try:
        decoded = fb_auth.verify_id_token(token, check_revoked=True)
    except (
        ValueError,
        fb_auth.InvalidIdTokenError,
        fb_auth.RevokedIdTokenError,
        fb_auth.UserDisabledError,
    ) as exc:
        raise TokenVerificationError("Invalid or expired Firebase token.") from exc
    except fb_auth.CertificateFetchError as exc:
        raise TokenVerificationError("Could not verify Firebase token.") from exc

    email = decoded.get("email")
    if not email:
        raise TokenVerificationError("Token does not carry an email address.")
    return Principal(
        uid=decoded["uid"],
        email=email.lower(),
        display_name=decoded.get("name"),
        photo_url=decoded.get("picture"),
    )


def verify_token(token: str) -> Principal:
    """Verify a bearer token according to the configured auth mode."""

    if get_settings().auth_mode == "mock":
        return _mock_principal(token)
    return _firebase_principal(token)


def revoke_sessions(uid: str) -> None:
    """Terminate every provider session held by ``uid``.

    Mock tokens carry no server-side session, so this is a no-op in mock mode.
    """

    if get_settings().auth_mode == "mock":
        return
    _init_firebase()
    from firebase_admin import auth as fb_auth

    fb_auth.revoke_refresh_tokens(uid)
    logger.info("revoked provider sessions for uid=%s", uid)
