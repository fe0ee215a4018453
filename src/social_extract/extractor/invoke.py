"""Send analytics screenshots to the vision model and return its text reply.

This is the only place that talks to the model.  SDK exceptions are
translated into the small error taxonomy in errors.py so callers can tell
"fix your configuration" from "upload less" from "try again".

Usage:
    python -m social_extract.extractor.invoke shot1.png shot2.jpg --platform TikTok
"""

import argparse
import base64
import logging
import time
from collections.abc import Sequence
from pathlib import Path

import openai
from pydantic import BaseModel

from social_extract.extractor.config import (
    AUTO_DETECT,
    IMAGE_EXTENSIONS,
    MAX_OUTPUT_TOKENS,
    MAX_PAYLOAD_BYTES,
    PLATFORMS,
    ROW_LOCALE,
    TEMPERATURE,
    get_deployment,
)
from social_extract.extractor.errors import ConfigurationError, ExtractionError, PayloadTooLargeError, TransientExtractionError
from social_extract.extractor.prompts import EXTRACTION_INSTRUCTION, PLATFORM_INSTRUCTION, SYSTEM_PROMPT
from social_extract.extractor.resources import get_vision_client
from social_extract.normalizer.export import export_tsv
from social_extract.normalizer.pipeline import normalize
from social_extract.normalizer.schema import DEFAULT_SCHEMA_VERSION, SCHEMAS, get_schema

logger = logging.getLogger(__name__)


class ImageInput(BaseModel):
    """One uploaded screenshot, already read into memory."""

    name: str
    data: bytes
    mime_type: str


def mime_type_for(filename: str) -> str | None:
    """Return the image MIME type for *filename*, or None if it is not a supported image."""
    suffix = Path(filename).suffix.lower()
    if suffix not in IMAGE_EXTENSIONS:
        return None
    subtype = suffix.lstrip(".")
    return f"image/{'jpeg' if subtype == 'jpg' else subtype}"


def image_input_from_path(file_path: str | Path) -> ImageInput:
    """Read an image from disk.  Raises ValueError for missing files or unsupported formats."""
    path = Path(file_path).expanduser().resolve()
    if not path.exists():
        raise ValueError(f"Image file not found at {path}")
    mime_type = mime_type_for(path.name)
    if mime_type is None:
        raise ValueError(f"Unsupported image format '{path.suffix}'. Supported: {sorted(IMAGE_EXTENSIONS)}")
    return ImageInput(name=path.name, data=path.read_bytes(), mime_type=mime_type)


def build_user_text(platform: str = AUTO_DETECT) -> str:
    """Return the per-request instruction, with a platform hint unless auto-detecting."""
    if platform not in PLATFORMS:
        raise ConfigurationError(f"Unknown platform '{platform}'. Choose one of: {', '.join(PLATFORMS)}")
    text = EXTRACTION_INSTRUCTION
    if platform != AUTO_DETECT:
        text += "\n\n" + PLATFORM_INSTRUCTION.format(platform=platform)
    return text


def build_messages(images: Sequence[ImageInput], platform: str = AUTO_DETECT) -> list[dict]:
    """Build the chat messages: system prompt, then every image followed by the instruction."""
    content: list[dict] = []
    for image in images:
        image_b64 = base64.b64encode(image.data).decode("utf-8")
        data_uri = f"data:{image.mime_type};base64,{image_b64}"
        content.append({"type": "image_url", "image_url": {"url": data_uri, "detail": "high"}})
    content.append({"type": "text", "text": build_user_text(platform)})

    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": content},
    ]


def _check_payload(images: Sequence[ImageInput]) -> None:
    """Raise PayloadTooLargeError if the base64-encoded images exceed the request limit."""
    # Base64 inflates every 3 bytes to 4
    encoded = sum(4 * ((len(image.data) + 2) // 3) for image in images)
    if encoded > MAX_PAYLOAD_BYTES:
        raise PayloadTooLargeError(
            f"The uploaded images total {encoded / (1024 * 1024):.1f} MB encoded, "
            f"above the {MAX_PAYLOAD_BYTES / (1024 * 1024):.0f} MB limit. Upload fewer or smaller images."
        )


def extract_reply(images: Sequence[ImageInput], platform: str = AUTO_DETECT) -> str:
    """Send *images* to the vision model and return its raw text reply.

    Raises ConfigurationError, PayloadTooLargeError or TransientExtractionError.
    """
    if not images:
        raise ValueError("At least one image is required")
    messages = build_messages(images, platform)
    _check_payload(images)
    client = get_vision_client()

    logger.info(
        "Sending %d image(s) (%.1f KB) to vision model (platform=%s)",
        len(images),
        sum(len(image.data) for image in images) / 1024,
        platform,
    )

    t0 = time.time()
    try:
        response = client.chat.completions.create(
            model=get_deployment(),
            messages=messages,
            temperature=TEMPERATURE,
            max_tokens=MAX_OUTPUT_TOKENS,
        )
    except (openai.AuthenticationError, openai.PermissionDeniedError) as exc:
        logger.error("Vision request rejected credentials: %s", exc)
        raise ConfigurationError("The API credentials were rejected. Check the configured key and endpoint.") from exc
    except openai.APIStatusError as exc:
        if exc.status_code == 413 or exc.code == "context_length_exceeded":
            logger.error("Vision request too large: %s", exc)
            raise PayloadTooLargeError() from exc
        logger.error("Vision request failed with HTTP %d after %.1fs: %s", exc.status_code, time.time() - t0, exc)
        # Rate limits and server errors clear up on their own; other 4xx do not
        if exc.status_code == 429 or exc.status_code >= 500:
            raise TransientExtractionError() from exc
        raise ExtractionError() from exc
    except openai.APIError as exc:
        # Connection errors and timeouts
        logger.error("Vision request failed after %.1fs: %s", time.time() - t0, exc)
        raise TransientExtractionError() from exc

    elapsed = time.time() - t0
    if response.usage:
        logger.info(
            "Vision usage: prompt=%d, completion=%d, total=%d (%.1fs)",
            response.usage.prompt_tokens,
            response.usage.completion_tokens,
            response.usage.total_tokens,
            elapsed,
        )

    reply = response.choices[0].message.content if response.choices else None
    if not reply:
        logger.warning("Vision model returned an empty reply (%.1fs)", elapsed)
        raise TransientExtractionError("The model returned no text. Please try again.")
    return reply


def main():
    """CLI: extract a table from screenshots on disk and print it tab-separated."""
    parser = argparse.ArgumentParser(description="Extract social-media analytics tables from screenshots")
    parser.add_argument("images", nargs="+", help="Paths to screenshot files")
    parser.add_argument("--platform", choices=list(PLATFORMS), default=AUTO_DETECT, help="Platform hint for the model")
    parser.add_argument(
        "--schema",
        choices=sorted(SCHEMAS),
        default=DEFAULT_SCHEMA_VERSION,
        help=f"Row schema version (default: {DEFAULT_SCHEMA_VERSION})",
    )
    parser.add_argument("--raw", action="store_true", help="Print the model's raw reply instead of the table")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    try:
        images = [image_input_from_path(p) for p in args.images]
        reply = extract_reply(images, args.platform)
    except (ValueError, ExtractionError) as exc:
        parser.exit(1, f"Error: {exc}\n")

    if args.raw:
        print(reply)
        return

    schema = get_schema(args.schema, ROW_LOCALE)
    result = normalize(reply, schema)
    if not result.rows:
        logger.warning("No rows parsed from the reply; rerun with --raw to inspect it")
    print(export_tsv(result.rows, schema=schema))


if __name__ == "__main__":
    main()
