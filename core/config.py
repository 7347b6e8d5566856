"""Centralized configuration for the Smart Reader session."""

import os
import logging
from urllib.parse import urlparse

log = logging.getLogger("smartreader.config")

# =========================
# Remote article service
# =========================
API_BASE_URL: str = os.getenv("READER_API_BASE_URL", "http://localhost:8080/api/v1").rstrip("/")
HTTP_TIMEOUT: float = float(os.getenv("READER_HTTP_TIMEOUT", "20"))

# Fixed identity used when posting comments
COMMENT_USER_ID: int = int(os.getenv("READER_COMMENT_USER_ID", "1"))

# =========================
# Speech
# =========================
SPEECH_LANGUAGE: str = os.getenv("READER_SPEECH_LANGUAGE", "ar-SA")
SPEECH_RATE: float = float(os.getenv("READER_SPEECH_RATE", "0.9"))
SPEECH_VOICE: str = os.getenv("READER_SPEECH_VOICE", "")
DEFAULT_VOICE: str = os.getenv("READER_DEFAULT_VOICE", "ar-SA-HamedNeural")

# =========================
# Monitoring
# =========================
FAILURE_ALERT_THRESHOLD: int = int(os.getenv("READER_FAILURE_ALERT_THRESHOLD", "3"))

# =========================
# Display
# =========================
LOG_LEVEL: str = os.getenv("READER_LOG_LEVEL", "INFO").upper()
PLACEHOLDER_IMAGE_URL: str = "https://via.placeholder.com/400x300?text=No+Image"
ANONYMOUS_AUTHOR_LABEL: str = "User"


def validate_config() -> None:
    """Validate settings that would make the session unusable. Call at startup."""
    problems = []
    scheme = urlparse(API_BASE_URL).scheme
    if scheme not in ("http", "https"):
        problems.append(f"READER_API_BASE_URL must be http(s), got {API_BASE_URL!r}")
    if not 0 < SPEECH_RATE <= 2:
        problems.append(f"READER_SPEECH_RATE must be in (0, 2], got {SPEECH_RATE}")
    if HTTP_TIMEOUT <= 0:
        problems.append(f"READER_HTTP_TIMEOUT must be positive, got {HTTP_TIMEOUT}")
    if problems:
        raise EnvironmentError("; ".join(problems))
    if COMMENT_USER_ID <= 0:
        log.warning("READER_COMMENT_USER_ID=%s: comments may be rejected by the service.", COMMENT_USER_ID)
