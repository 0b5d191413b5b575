"""
Errors that reject a hit before any counter is touched.

Each error carries the HTTP status it maps to; main.py renders them
as {"code": <status>, "message": <text>}.
"""


class BeaconError(Exception):
    """Base class for hit rejections"""

    status_code = 500
    message = "Internal server error"

    def __init__(self, detail: str = ""):
        super().__init__(detail or self.message)
        self.detail = detail


class MissingCallbackError(BeaconError):
    """Callback name or referring page is empty (precondition violation)"""

    status_code = 404
    message = "Bad request"


class InvalidReferrerError(BeaconError):
    """Referring page is not a parseable absolute URL"""

    status_code = 500
    message = "Internal server error"


class InvalidCallbackError(BeaconError):
    """Callback name is not a JavaScript identifier (strict mode only)"""

    status_code = 400
    message = "Invalid callback"
