"""Shared configuration for the screenshot extraction service."""

import os
from pathlib import Path

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent.parent.parent.resolve()
load_dotenv(ROOT / ".env")

# Platforms offered in the picker; "Auto-detect" sends no platform hint
AUTO_DETECT = "Auto-detect"
PLATFORMS = {
    AUTO_DETECT: "Auto-detect (自动检测)",
    "TikTok": "TikTok",
    "Instagram": "Instagram",
    "YouTube": "YouTube",
    "Xiaohongshu": "Xiaohongshu (小红书)",
    "Facebook": "Facebook",
    "Twitter": "Twitter/X",
}

IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}

# Request limits and sampling settings for the vision model
MAX_PAYLOAD_BYTES = int(float(os.getenv("EXTRACT_MAX_PAYLOAD_MB", "20")) * 1024 * 1024)
REQUEST_TIMEOUT = float(os.getenv("EXTRACT_REQUEST_TIMEOUT", "120"))
TEMPERATURE = float(os.getenv("EXTRACT_TEMPERATURE", "0.1"))
MAX_OUTPUT_TOKENS = int(os.getenv("EXTRACT_MAX_OUTPUT_TOKENS", "8192"))

# Locale used for the generic content-type label on parsed rows
ROW_LOCALE = os.getenv("EXTRACT_ROW_LOCALE", "zh")


def get_deployment() -> str:
    """Return the Azure deployment name to use for vision requests."""
    return os.getenv("AZURE_OPENAI_DEPLOYMENT_NAME", "")
