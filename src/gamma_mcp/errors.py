class GammaError(Exception):
    """Base class for errors raised by gamma-mcp."""


class RequestValidationError(GammaError):
    """A generation request was rejected before any network call."""


class GammaAPIError(GammaError):
    """The Gamma API answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int, body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class PromptNotFoundError(GammaError):
    pass


class PromptArgumentError(GammaError):
    pass
