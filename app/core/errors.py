"""Service-level exceptions mapped to HTTP responses in app.main."""


class ServiceError(Exception):
    status_code = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(ServiceError):
    """Referenced test, answer sheet, result or session does not exist."""

    status_code = 404


class ValidationFailedError(ServiceError):
    status_code = 400
