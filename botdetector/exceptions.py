"""
Custom exceptions for the Bot Detector API client.

Every failure of an API call is delivered through the call's completion
handle as one of these exceptions, so callers can tell "could not reach
the server" apart from "bad token" and from "bad response".

Usage:
    from botdetector.exceptions import TransportError, UnauthorizedTokenError

    try:
        await client.verify_discord_token(token, "Zezima", "1234")
    except UnauthorizedTokenError:
        print("Invalid token")
    except TransportError as e:
        print(f"Could not reach server: {e}")
"""

from typing import Optional


class BotDetectorError(Exception):
    """
    Base exception for all Bot Detector client errors.

    All custom exceptions inherit from this, allowing:
        except BotDetectorError:
            # Catch any client error
    """
    pass


# =============================================================================
# CALL FAILURES
# =============================================================================

class TransportError(BotDetectorError):
    """
    The HTTP exchange itself failed.

    Raised when:
    - Connection is refused or DNS lookup fails
    - Connect or read timeout expires
    - The call is cancelled before a response arrives
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        msg = message
        if cause is not None:
            msg += f" (caused by: {type(cause).__name__}: {cause})"
        super().__init__(msg)


class ApiError(BotDetectorError):
    """
    The API answered with a non-2xx status.

    The message is taken from the server's ``{"error": ...}`` envelope when
    the status is a 4xx and the body carries one, else a placeholder.
    """

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(message)


class UnauthorizedTokenError(BotDetectorError):
    """
    Token verification was rejected with 401.

    Deliberately not an ``ApiError`` subclass so that a bad token is never
    handled as a generic server problem.
    """

    def __init__(self, message: str = "Invalid or unauthorized token for operation", status_code: int = 401):
        self.status_code = status_code
        super().__init__(message)


class ParseError(BotDetectorError):
    """
    A response body could not be decoded into the expected record.

    Raised when:
    - Body is not valid JSON
    - Required fields are missing or have the wrong type
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


# =============================================================================
# PROGRAMMING ERRORS
# =============================================================================

class HandleAlreadyResolvedError(BotDetectorError):
    """A completion handle was resolved a second time."""

    def __init__(self, operation: str, state: str):
        self.operation = operation
        self.state = state
        super().__init__(f"Completion handle for {operation} already resolved ({state})")


class InvalidPlayerNameError(BotDetectorError, ValueError):
    """
    A player name cannot be used in a request.

    Raised when:
    - Name is empty after sanitising
    - Name exceeds the in-game length limit
    """

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Invalid player name {name!r}: {reason}")


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================

class ConfigurationError(BotDetectorError):
    """
    Configuration or setup error.

    Raised when:
    - API base URL is not an absolute http(s) URL
    - Config file cannot be found
    """

    def __init__(self, setting: str, message: str):
        self.setting = setting
        super().__init__(f"Configuration error ({setting}): {message}")
