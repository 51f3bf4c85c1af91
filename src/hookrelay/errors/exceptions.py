"""Custom exception classes for the webhook relay."""


class RelayError(Exception):
    """Base exception for request-scoped relay failures."""

    def __init__(self, code: str, message: str, status_code: int = 500):
        self.code = code
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidPayloadError(RelayError):
    """Request body is missing, unparsable or structurally wrong."""

    def __init__(self, message: str = "Invalid payload"):
        super().__init__("INVALID_PAYLOAD", message, status_code=400)


class InvalidSignatureError(RelayError):
    """Provider signature header missing or not matching the raw body."""

    def __init__(self, message: str = "Invalid signature"):
        super().__init__("INVALID_SIGNATURE", message, status_code=400)


class AuthenticationError(RelayError):
    """Credential missing or wrong."""

    def __init__(self, message: str = "Unauthorized"):
        super().__init__("AUTHENTICATION_ERROR", message, status_code=401)


class AuthorizationError(RelayError):
    """Caller is not allowed to reach this service."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__("AUTHORIZATION_ERROR", message, status_code=403)


class ForwardError(RelayError):
    """Forwarding to the receiver failed."""

    def __init__(self, message: str):
        super().__init__("FORWARD_FAILED", message, status_code=500)


class CommandExecutionError(RelayError):
    """Local command could not be started, failed or timed out."""

    def __init__(self, message: str):
        super().__init__("COMMAND_FAILED", message, status_code=500)


class ConfigurationError(Exception):
    """Settings are invalid; the process must not start."""
