"""
Error taxonomy.

Services raise these; the handlers in ``league.main`` turn them into
``{"error": message}`` responses with the matching status code.
"""


class LeagueError(Exception):
    """Base exception for the league API."""
    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(LeagueError):
    status_code = 400
    default_message = "Invalid request"


class UnauthorizedError(LeagueError):
    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(LeagueError):
    status_code = 403
    default_message = "Not authorized to perform this action"


class NotFoundError(LeagueError):
    status_code = 404
    default_message = "Resource not found"


class ConflictError(LeagueError):
    status_code = 409
    default_message = "Conflict"


class ConfigurationError(LeagueError):
    status_code = 500
    default_message = "Server is not configured for this operation"


# --- Round lifecycle ---

class RoundCreationBlocked(ValidationError):
    default_message = "Close the previous round before creating the next one"


class RoundAlreadyClosed(ValidationError):
    default_message = "Round is already closed"


class RoundNotClosed(ValidationError):
    default_message = "Round is not closed"


class RoundNotLatest(ValidationError):
    default_message = "A newer round already exists; this round cannot be reopened"


class RoundClosedForMatches(ValidationError):
    default_message = "Round is closed; matches can no longer be added to it"


# --- Result workflow ---

class InputNotPermitted(ForbiddenError):
    """Raised when the input permission gate denies a team."""

    def __init__(self, reason, message: str = None):
        self.reason = reason
        super().__init__(message)


class AlreadyFinalized(ConflictError):
    default_message = "Match result is already finalized"


class LockedByOther(ConflictError):
    default_message = "Another team is currently editing this result"


class MatchFinalized(ConflictError):
    default_message = "Finalized match results cannot be changed"
