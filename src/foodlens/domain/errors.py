"""Error taxonomy shared by the service and the client core."""


class FoodLensError(Exception):
    """Base error for failures surfaced to a user."""

    status_code = 500
    user_message = "Something went wrong. Please try again."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.user_message)
        self.message = message or self.user_message


class ConfigurationError(FoodLensError):
    """A required credential or setting is missing. Not retryable."""

    user_message = "The service is not configured correctly."


class InvalidImageError(FoodLensError):
    """The submitted image payload is malformed."""

    status_code = 400
    user_message = "Invalid image data. Please select the image again."


class AnalysisFormatError(FoodLensError):
    """The model returned output that is not the expected JSON."""

    user_message = "Invalid response format from AI service. Please try again."


class RateLimitedError(FoodLensError):
    """The upstream provider rejected the call for rate or quota reasons."""

    status_code = 429
    user_message = "The analysis service is busy. Please try again later."


class UpstreamAuthError(FoodLensError):
    """The upstream provider rejected our credential."""

    status_code = 401
    user_message = "The analysis service rejected its credentials."


class AuthError(FoodLensError):
    """Invalid credentials or an invalid or expired token."""

    status_code = 401
    user_message = "Please sign in again."


class NotFoundError(FoodLensError):
    """Missing entry. Also used for entries owned by someone else."""

    status_code = 404
    user_message = "Food entry not found"


class InvalidEntryError(FoodLensError):
    """An entry is missing a required choice or cannot be saved."""

    status_code = 400
    user_message = "Please choose a meal type before saving."
