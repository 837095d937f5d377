"""
Exceptions for the pywechaty library.

This module defines the exception hierarchy used across the library, split
between failures reported by a puppet and failures of the bot SDK itself.
"""


class WechatyBaseError(Exception):
    """
    Base exception for every error raised by pywechaty.

    All other exceptions extend this class.
    """
    pass


class PuppetError(WechatyBaseError):
    """
    Base exception for errors reported by a puppet.

    Raised by puppet implementations and propagated unchanged through the SDK.
    """
    pass


class InvalidTokenError(PuppetError):
    """
    Raised when the puppet service token cannot be resolved to an endpoint.
    """

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class PuppetNetworkError(PuppetError):
    """
    Raised when communication with the puppet service fails.

    Covers endpoint discovery, the RPC connection, the event stream and every
    failed remote call.
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Network failure, reason: {reason}")


class PuppetTimeoutError(PuppetNetworkError):
    """
    Raised when the puppet service does not answer a request in time.
    """
    pass


class UnsupportedError(PuppetError):
    """
    Raised when a puppet cannot perform the requested function.
    """

    def __init__(self, function: str):
        self.function = function
        super().__init__(f"Unsupported function: {function}")


class UnknownPayloadTypeError(PuppetError):
    """Raised when a dirty request names an unknown payload type."""

    def __init__(self, message: str = "Unknown payload type"):
        super().__init__(message)


class UnknownMessageTypeError(PuppetError):
    """Raised when a message of unknown type has to be handled."""

    def __init__(self, message: str = "Unknown message type"):
        super().__init__(message)


class WechatyError(WechatyBaseError):
    """
    Base exception for errors of the bot SDK layer.
    """
    pass


class InvalidOperationError(WechatyError):
    """
    Raised when an operation is called with arguments it cannot work with.
    """

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"Invalid operation: {operation}")


class MaybeError(WechatyError):
    """
    Raised when an operation may have succeeded on the puppet but its result
    could not be confirmed.
    """

    def __init__(self, message: str):
        super().__init__(f"Operation may have failed: {message}")


class NotLoggedInError(WechatyError):
    """Raised when an operation requires a logged-in user."""

    def __init__(self, message: str = "User is not logged in"):
        super().__init__(message)


class NoPayloadError(WechatyError):
    """Raised when an entity is used before its payload has been loaded."""

    def __init__(self, message: str = "No payload"):
        super().__init__(message)


class FileBoxError(WechatyBaseError):
    """
    Exception for errors while reading, downloading or serializing a FileBox.
    """
    pass
