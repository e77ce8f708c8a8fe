"""Error taxonomy shared by every dashboard component."""


class DashboardError(Exception):
    """Base class for dashboard errors. The message is user-facing."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(DashboardError):
    """Bad user input: empty fields, short password, duplicates."""


class AuthError(DashboardError):
    """Wrong credentials or an action that needs a different session state."""


class CollaboratorUnavailable(DashboardError):
    """The market data API was unreachable or answered with an error."""

    def __init__(self, message: str, endpoint: str = "unknown"):
        super().__init__(message)
        self.endpoint = endpoint


class DuplicateAlert(ValidationError):
    """An identical active alert already exists."""


class AlreadyLoggedIn(AuthError):
    """A login was attempted while a session is active."""
