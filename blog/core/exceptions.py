"""Exception types shared by services and API handlers."""


class BlogError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BlogError):
    """Input rejected before any backend call is made."""

    status_code = 400


class ImageValidationError(ValidationError):
    """Unsupported, oversized or undecodable image file."""


class AttributionRequiredError(ValidationError):
    """Embedded photo submitted without a photographer name."""


class EmbedParseError(ValidationError):
    """Pasted snippet is not a recognizable Flickr embed."""

    def __init__(self, snippet: str):
        super().__init__(
            "Invalid Flickr embed code. "
            "Please paste the complete embed HTML from Flickr."
        )
        self.snippet = snippet


class AuthenticationError(BlogError):
    """Credentials rejected by the auth service."""

    status_code = 401


class BackendError(BlogError):
    """Request to the managed backend failed."""

    status_code = 502

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.backend_status = status_code
        self.code = code

    def with_context(self, operation: str) -> "BackendError":
        """Prefix the message with the operation that failed."""
        return BackendError(
            f"{operation}: {self.message}",
            status_code=self.backend_status,
            code=self.code,
        )
