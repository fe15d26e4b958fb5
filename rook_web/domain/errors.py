######## errors.py
########


class RookError(Exception):
    """Base class for errors surfaced to the user."""


class ConfigurationError(RookError):
    pass


class ServiceError(RookError):
    """The external generative service failed or returned nothing usable."""


class ContractViolation(RookError):
    """
    The service answered, but not in the agreed shape.
    `detail` is for logs only; str(err) is the user-facing message.
    """

    USER_MESSAGE = "Analysis failed: Invalid response format."

    def __init__(self, detail: str = ""):
        super().__init__(self.USER_MESSAGE)
        self.detail = detail


class InputValidationError(RookError):
    pass


class MediaError(RookError):
    pass


class SessionBusyError(RookError):
    pass
