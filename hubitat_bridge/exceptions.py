"""
Exception hierarchy for the hub bridge.

Provides explicit error types for configuration, transport and validation
failures instead of bare runtime errors.
"""


class BridgeError(Exception):
    """Base exception for all bridge errors."""

    pass


class ConfigurationError(BridgeError):
    """Raised when required hub connection parameters are missing."""

    def __init__(self, missing: list[str], subject: str = "Hubitat settings"):
        self.missing = list(missing)
        super().__init__(f"{subject} not configured. Missing: {', '.join(self.missing)}")


class TransportError(BridgeError):
    """Raised when the hub cannot be reached or returns an unusable response."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class ValidationError(BridgeError):
    """Raised when an observation or capability write carries invalid data."""

    pass


class UnrecognizedValueError(ValidationError):
    """Raised when a hub value cannot be translated into the normalized domain."""

    def __init__(self, attribute: str, value):
        self.attribute = attribute
        self.value = value
        super().__init__(f"Unrecognized value for {attribute}: {value!r}")
