"""Custom exceptions for emojify."""


class EmojifyError(Exception):
    """Base exception for all emojify errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidShortCodeError(EmojifyError):
    """Raised when text is not a valid short code."""

    def __init__(self, text: str, reason: str):
        message = f"Invalid short code {text!r}: {reason}"
        super().__init__(message, {"text": text, "reason": reason})
        self.text = text
        self.reason = reason


class ShortCodeNotFoundError(EmojifyError):
    """Raised when no reference table entry matches a description.

    This is an expected outcome, not a failure of the reference source.
    """

    def __init__(self, description: str, tables_checked: list[str] | None = None):
        message = f"No emoji found for: {description}"
        if tables_checked:
            message += f" (checked: {', '.join(tables_checked)})"
        super().__init__(
            message, {"description": description, "tables": tables_checked}
        )
        self.description = description
        self.tables_checked = tables_checked or []


class ReferenceSourceError(EmojifyError):
    """Raised when the reference table cannot be read or parsed."""

    def __init__(self, source: str, message: str):
        full_message = f"[{source}] {message}"
        super().__init__(full_message, {"source": source})
        self.source = source


class LookupServiceStoppedError(ReferenceSourceError):
    """Raised when the lookup service is gone while a lookup is pending."""

    def __init__(self, message: str = "Lookup service is not running"):
        super().__init__("lookup-service", message)


class ProvisioningError(EmojifyError):
    """Raised when the reference data cannot be fetched or unpacked."""

    def __init__(
        self,
        message: str,
        url: str | None = None,
        status_code: int | None = None,
    ):
        full_message = f"Provisioning failed: {message}"
        super().__init__(full_message, {"url": url, "status_code": status_code})
        self.url = url
        self.status_code = status_code


class ConfigurationError(EmojifyError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, config_key: str, message: str):
        full_message = f"Configuration error [{config_key}]: {message}"
        super().__init__(full_message, {"config_key": config_key})
        self.config_key = config_key
