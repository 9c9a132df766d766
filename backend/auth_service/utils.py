"""
Shared authentication helpers.
Provides token creation and verification for the auth and events blueprints.
"""

import os
import jwt
from datetime import datetime, timedelta, timezone
from typing import Tuple, Optional
from flask import jsonify, request, Response
from dotenv import load_dotenv

# Load .env only once here
load_dotenv()

# Load secrets & configs
JWT_SECRET = os.getenv("JWT_SECRET")
if not JWT_SECRET:
    raise RuntimeError("JWT_SECRET is missing. Set it in .env")

TOKEN_EXPIRATION_MINUTES = int(os.getenv("TOKEN_EXPIRATION_MINUTES", 1440))  # Default 24 hours


# --- JWT CREATION ---
def create_token(user_id: int, email: str) -> str:
    """
    Generates a new JWT for a given account.

    The subject claim must be a string for PyJWT to accept it on decode,
    so the numeric account id is encoded as text.

    Args:
        user_id (int): The opaque id of the account.
        email (str): The account's (lowercased) email.

    Returns:
        str: Encoded JWT string.
    """
    now = datetime.now(timezone.utc)

    payload = {
        "sub": str(user_id),
        "email": email,
        "exp": now + timedelta(minutes=TOKEN_EXPIRATION_MINUTES),
        "iat": now
    }

    return jwt.encode(payload, JWT_SECRET, algorithm="HS256")


def _subject_to_user_id(payload: dict) -> Optional[int]:
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        return None


# --- JWT VALIDATION ---
def verify_token_from_request(owner_id: Optional[int] = None) -> Tuple[Optional[int], Optional[Response], Optional[int]]:
    """
    Verify the JWT in the Authorization header.

    Args:
        owner_id (int, optional): When given, the token must belong to this account.

    Returns:
        tuple: (user_id, error_response, status_code)
               If successful, error_response and status_code are None.
               If failed, user_id is None.
    """
    auth = request.headers.get("Authorization", "")

    if not auth.startswith("Bearer "):
        return None, jsonify({"error": "missing token"}), 401

    token = auth.split(" ", 1)[1]

    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        return None, jsonify({"error": "token expired"}), 401
    except jwt.InvalidTokenError:
        return None, jsonify({"error": "invalid token"}), 401

    user_id = _subject_to_user_id(payload)
    if user_id is None:
        return None, jsonify({"error": "invalid token"}), 401

    if owner_id is not None and user_id != owner_id:
        return None, jsonify({"error": "permission denied"}), 403

    return user_id, None, None
