"""Firebase Admin SDK initialization and ID token verification."""

import json
import os

import firebase_admin
from firebase_admin import auth, credentials
from structlog import get_logger

logger = get_logger(__name__)

_firebase_app: firebase_admin.App | None = None


def initialize_firebase(
    firebase_credentials_path: str | None = None,
    firebase_config_json: str | None = None,
) -> None:
    """
    Initialize Firebase Admin SDK.

    Credentials are taken from the raw service account JSON if given, then
    from the credentials file, and finally from Application Default
    Credentials.
    """
    global _firebase_app

    if _firebase_app is not None:
        return

    cred = None
    if firebase_config_json:
        logger.info("firebase_credentials_source", source="json")
        cred = credentials.Certificate(json.loads(firebase_config_json))
    elif firebase_credentials_path and os.path.exists(firebase_credentials_path):
        logger.info("firebase_credentials_source", source="file", path=firebase_credentials_path)
        cred = credentials.Certificate(firebase_credentials_path)

    try:
        if cred:
            _firebase_app = firebase_admin.initialize_app(cred)
        else:
            _firebase_app = firebase_admin.initialize_app()
    except Exception as e:
        logger.error("firebase_initialization_error", error=str(e))
        raise


async def verify_firebase_token(id_token: str) -> dict:
    """
    Verify a Firebase ID token issued after Google sign-in.

    Args:
        id_token: Firebase ID token from the client

    Returns:
        Decoded token claims (``uid``, ``email``, ``name``, ``picture``...)

    Raises:
        ValueError: If the token is invalid, expired or cannot be checked
    """
    try:
        decoded_token = auth.verify_id_token(id_token, clock_skew_seconds=10)
    except auth.InvalidIdTokenError as e:
        logger.warning("firebase_token_invalid", error=str(e))
        raise ValueError(f"Invalid Firebase ID token: {e!s}") from e
    except Exception as e:
        logger.error("firebase_token_verification_failed", error=str(e))
        raise ValueError(f"Token verification failed: {e!s}") from e

    logger.info("firebase_token_verified", uid=decoded_token.get("uid"))
    return decoded_token
