"""
Error taxonomy shared by the admin actions, the identity gateway and the pages.

Every error carries a message that is safe to show in a form.
"""


class SonieError(Exception):
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailed(SonieError):
    default_message = "Submitted form is invalid."


class Unauthorized(SonieError):
    default_message = "Unauthorized. Please login to continue."


class UpstreamError(SonieError):
    """A hosted provider (identity, store, media) rejected the call."""


class VerifyEmail(SonieError):
    default_message = "Please verify your email before signing in."


class NotFound(SonieError):
    default_message = "Bag not found."


class LoginRequired(Exception):
    """Raised by page dependencies; the app turns it into a redirect to /admin."""
