"""Error taxonomy shared by the repositories, the API and the client.

Every error carries a user-facing ``message``. The API turns ``AuthError``
into HTTP 401 and every other ``QuickChatError`` into a 200 response with
``{"success": false, "message": ...}``.
"""


class QuickChatError(Exception):
    default_message = "Something went wrong, please try again"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(QuickChatError):
    default_message = "Invalid request"


class AuthError(QuickChatError):
    default_message = "Not authorized, please log in"


class InvalidTokenError(AuthError):
    default_message = "Not authorized, token failed"


class ExpiredTokenError(AuthError):
    default_message = "Session expired, please log in again"


class InvalidCredentials(QuickChatError):
    default_message = "Invalid email or password"


class NotFoundOrForbidden(QuickChatError):
    default_message = "Chat not found"


class ConflictError(QuickChatError):
    default_message = "User already exists"


class InsufficientCredits(QuickChatError):
    default_message = "You don't have enough credits to use this feature"


class UpstreamError(QuickChatError):
    pass
