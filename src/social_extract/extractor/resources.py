"""Lazily initialised, cached OpenAI client for the vision model."""

import logging
import os

from openai import OpenAI

from social_extract.extractor.config import REQUEST_TIMEOUT, get_deployment
from social_extract.extractor.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Populated on first access
_CACHE: dict = {
    "vision_client": None,
}


def get_vision_client() -> OpenAI:
    """Return the cached client for the Azure OpenAI v1 endpoint.

    Raises ConfigurationError if the endpoint, key, or deployment is unset.
    """
    if _CACHE["vision_client"] is not None:
        return _CACHE["vision_client"]

    endpoint = os.getenv("AZURE_OPENAI_ENDPOINT", "").rstrip("/")
    api_key = os.getenv("AZURE_OPENAI_API_KEY", "")
    deployment = get_deployment()

    missing = [
        name
        for name, value in (
            ("AZURE_OPENAI_ENDPOINT", endpoint),
            ("AZURE_OPENAI_API_KEY", api_key),
            ("AZURE_OPENAI_DEPLOYMENT_NAME", deployment),
        )
        if not value
    ]
    if missing:
        logger.warning("Azure OpenAI credentials not configured: %s", ", ".join(missing))
        raise ConfigurationError(f"API credentials are missing: {', '.join(missing)}")

    base_url = f"{endpoint}/openai/v1/"
    logger.info("Connecting to Azure OpenAI at %s  (deployment=%s)", base_url, deployment)
    _CACHE["vision_client"] = OpenAI(base_url=base_url, api_key=api_key, timeout=REQUEST_TIMEOUT, max_retries=2)
    return _CACHE["vision_client"]


def reset_vision_client() -> None:
    """Drop the cached client so the next call re-reads the environment."""
    _CACHE["vision_client"] = None
