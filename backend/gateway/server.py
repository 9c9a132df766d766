"""
API gateway: combines the auth and events blueprints under /api.
This is the local entrypoint for development.
"""

from flask import Flask, jsonify
from flask_cors import CORS
import os
import logging
from dotenv import load_dotenv

from backend.auth_service.routes import auth_bp
from backend.events_service.routes import events_bp

load_dotenv()

# Basic console logging during API requests
logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(asctime)s - %(message)s")

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",  # Local frontend dev server
    "http://localhost:5500",  # Local development (some editors)
    "http://localhost:8080",  # Local static server
]


def cors_origins() -> list:
    """
    Allowed CORS origins, from the comma-separated CORS_ORIGINS variable.
    """
    raw = os.getenv("CORS_ORIGINS", "")
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or DEFAULT_CORS_ORIGINS


def create_app() -> Flask:
    """
    Application factory for creating the Flask app.

    Returns:
        Flask: The configured Flask application.
    """
    app = Flask(__name__)
    CORS(app, resources={
        r"/api/*": {
            "origins": cors_origins(),
            "methods": ["GET", "POST", "DELETE", "OPTIONS"],
            "allow_headers": ["Content-Type", "Authorization"],
            "supports_credentials": True
        }
    })

    # --- REGISTER BLUEPRINTS ---
    app.register_blueprint(auth_bp, url_prefix="/api")
    app.register_blueprint(events_bp, url_prefix="/api/events")
    logging.info("All blueprints registered successfully.")

    # --- BASIC HEALTH CHECKPOINT ---
    @app.route("/api/health")
    def health():
        """
        Health check endpoint.
        """
        return jsonify({"status": "ok", "message": "Server is running"}), 200

    return app


if __name__ == "__main__":
    app = create_app()
    port = int(os.getenv("GATEWAY_PORT", 5000))
    app.run(host="0.0.0.0", port=port, debug=True)
