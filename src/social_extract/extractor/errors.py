"""Exceptions raised while obtaining a reply from the vision model.

The web layer distinguishes these from a successful reply that simply held no
table: a zero-row result is a 200, every class below is a user-visible error.
"""


class ExtractionError(Exception):
    """Base class for failures to obtain a model reply."""

    kind = "error"
    user_message = "Failed to process files. Please try again."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class ConfigurationError(ExtractionError):
    """Missing credentials or an invalid request option; retrying will not help."""

    kind = "configuration"
    user_message = "The extraction service is not configured (missing API credentials)."


class PayloadTooLargeError(ExtractionError):
    """The uploaded files exceed what a single model request can carry."""

    kind = "payload_too_large"
    user_message = "The uploaded files are too large. Upload fewer or smaller images."


class TransientExtractionError(ExtractionError):
    """Network failure, timeout, rate limit or server error; the user should retry."""

    kind = "transient"
    user_message = "The model service is temporarily unavailable. Please try again."
