"""Application configuration loaded from environment variables."""

import json
import os
from typing import Dict, Any
from urllib.parse import quote_plus


def load_config() -> Dict[str, Any]:
    """
    Load application configuration from environment variables.
    Returns a dictionary with all configuration settings.
    """
    mongo_user = os.getenv("MONGO_USER", "admin")
    mongo_pass = os.getenv("MONGO_PASS", "password")
    mongo_host = os.getenv("MONGO_HOST", "localhost")
    mongo_port = os.getenv("MONGO_PORT", "27017")
    mongo_db = os.getenv("MONGO_DB", "pet_care_log")
    mongo_user_encoded = quote_plus(mongo_user)
    mongo_pass_encoded = quote_plus(mongo_pass)
    mongo_uri = f"mongodb://{mongo_user_encoded}:{mongo_pass_encoded}@{mongo_host}:{mongo_port}/{mongo_db}?authSource=admin"

    config = {
        # Session tokens
        "jwt": {
            "secret_key": os.getenv("JWT_SECRET_KEY", "dev-secret-key-change-in-production"),
            "algorithm": "HS256",
            "session_expire_minutes": int(os.getenv("SESSION_EXPIRE_MINUTES", "1440")),
        },
        # Blob storage (GridFS buckets exposed by carelog.storage_web)
        "storage": {
            "public_base_url": os.getenv("STORAGE_PUBLIC_BASE_URL", "http://localhost:5000").rstrip("/"),
            "pet_photos_bucket": os.getenv("PET_PHOTOS_BUCKET", "pet-photos"),
        },
        # Photo optimization before upload
        "photos": {
            "max_width": 1920,
            "max_height": 1920,
            "quality": 85,
        },
        "logging": {
            "level": os.getenv("LOG_LEVEL", "INFO").upper(),
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
        "mongodb": {
            "user": mongo_user,
            "pass": mongo_pass,
            "host": mongo_host,
            "port": mongo_port,
            "db": mongo_db,
            "uri": mongo_uri,
        },
    }

    return config


def get_config_json() -> str:
    """
    Get configuration as JSON string (for reference/documentation).
    Note: Sensitive values (passwords, secrets) are masked.
    """
    config = load_config()
    safe_config = json.loads(json.dumps(config))
    if safe_config["jwt"]["secret_key"] and safe_config["jwt"]["secret_key"] != "dev-secret-key-change-in-production":
        safe_config["jwt"]["secret_key"] = "***MASKED***"
    if safe_config["mongodb"]["pass"]:
        safe_config["mongodb"]["pass"] = "***MASKED***"
        safe_config["mongodb"]["uri"] = "***MASKED***"

    return json.dumps(safe_config, indent=2, ensure_ascii=False)


# Load configuration on module import
_config = load_config()

JWT_CONFIG = _config["jwt"]
STORAGE_CONFIG = _config["storage"]
PHOTO_CONFIG = _config["photos"]
LOGGING_CONFIG = _config["logging"]
MONGODB_CONFIG = _config["mongodb"]
