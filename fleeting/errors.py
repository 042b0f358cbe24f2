"""Domain errors raised by the stores, the gate and the services.

Routers never build error responses for these by hand; ``fleeting.main``
maps each class to its HTTP status.
"""


class FleetingError(Exception):
    status_code = 500

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class NotFound(FleetingError):
    status_code = 404


class Gone(FleetingError):
    """The record still exists but has already expired."""

    status_code = 410


class Conflict(FleetingError):
    status_code = 409


class Unauthorized(FleetingError):
    status_code = 401


class UpstreamError(FleetingError):
    """Blob or record store I/O failed."""

    status_code = 500
