"""
Authentication service route handlers.

Provides routes for:
- Account registration
- Account login

Accounts are immutable once created. All JWT logic is delegated to
`auth_service.utils`.
"""

import logging
import re
from contextlib import closing
from typing import Tuple, Dict, Any

import psycopg2.errors
from argon2 import PasswordHasher
from argon2.exceptions import VerificationError, InvalidHashError
from flask import Blueprint, request, jsonify, Response
from backend.database.db_connection import get_db
from backend.auth_service.utils import create_token

auth_bp = Blueprint("auth", __name__)
ph = PasswordHasher()

# --- CONSTANTS FOR VALIDATION ---
PASSWORD_MIN_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")


# --- REQUEST LOGGING ---
@auth_bp.before_request
def before_request() -> None:
    """
    Log the method and path of every request reaching the auth service.
    """
    logging.info(f"[Auth] Incoming {request.method} {request.path}")


@auth_bp.after_request
def after_request(response: Response) -> Response:
    """
    Log the response status code for every request.

    Args:
        response (Response): The Flask response object.

    Returns:
        Response: The passed-through response object.
    """
    logging.info(f"[Auth] Response {response.status}")
    return response


def _read_credentials() -> Tuple[str, str]:
    data: Dict[str, Any] = request.get_json(silent=True) or {}
    email = data.get("email")
    password = data.get("password")
    email = email.strip().lower() if isinstance(email, str) else ""
    password = password if isinstance(password, str) else ""
    return email, password


# --- REGISTER ---
@auth_bp.route("/register", methods=["POST"])
def register() -> Tuple[Response, int]:
    """
    Register a new account.

    Expects a JSON body with:
    - email (str): Unique email address, stored lowercased.
    - password (str): Minimum 6 characters.

    Returns:
        201: JSON with user_id, email, and a new JWT token.
        400: Missing fields, invalid input, or email already exists.
        500: Server-side error (hashing or database).
    """
    email, password = _read_credentials()

    # Validate input
    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400
    if len(password) < PASSWORD_MIN_LENGTH:
        return jsonify({"error": f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"}), 400
    if not EMAIL_PATTERN.match(email):
        return jsonify({"error": "Please enter a valid email address"}), 400

    # Hash password using Argon2
    try:
        pw_hash = ph.hash(password)
    except Exception:
        logging.exception("[Auth] Password hashing failed")
        return jsonify({"error": "Password hashing failed"}), 500

    sql = """
        INSERT INTO users (email, password_hash)
        VALUES (%s, %s)
        RETURNING user_id, email;
    """

    try:
        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (email, pw_hash))
                user = cur.fetchone()
                conn.commit()
    except psycopg2.errors.UniqueViolation:
        return jsonify({"error": "Email already exists"}), 400
    except Exception:
        logging.exception("[Auth] Registration failed")
        return jsonify({"error": "Server error during registration"}), 500

    user_id = user["user_id"]
    logging.info(f"[Auth] New account registered: id={user_id}")

    # Generate initial token for immediate login
    token = create_token(user_id, user["email"])

    return jsonify({"user_id": user_id, "email": user["email"], "token": token}), 201


# --- LOGIN ---
@auth_bp.route("/login", methods=["POST"])
def login() -> Tuple[Response, int]:
    """
    Authenticate an account and return a JWT.

    Expects a JSON body with:
    - email (str)
    - password (str)

    Returns:
        200: JSON with user_id, email, and JWT token.
        400: Missing credentials.
        401: Invalid credentials (wrong password or email).
        500: Database error.
    """
    email, password = _read_credentials()

    if not email or not password:
        return jsonify({"error": "Email and password are required"}), 400

    sql = "SELECT user_id, email, password_hash FROM users WHERE email = %s;"

    try:
        with closing(get_db()) as conn:
            with conn.cursor() as cur:
                cur.execute(sql, (email,))
                user = cur.fetchone()
    except Exception:
        logging.exception("[Auth] Login lookup failed")
        return jsonify({"error": "Server error during login"}), 500

    if not user:
        return jsonify({"error": "Invalid credentials"}), 401

    # Verify password against hash
    try:
        ph.verify(user["password_hash"], password)
    except (VerificationError, InvalidHashError):
        return jsonify({"error": "Invalid credentials"}), 401

    logging.info(f"[Auth] Account logged in: id={user['user_id']}")
    token = create_token(user["user_id"], user["email"])

    return jsonify({
        "user_id": user["user_id"],
        "email": user["email"],
        "token": token
    }), 200
