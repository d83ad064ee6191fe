"""Error kinds raised by the service layer.

Routes let these propagate; the handler registered in ``create_app`` turns
them into JSON responses with the matching status code.
"""


class ChangeBagError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"message": self.message}


class ValidationError(ChangeBagError):
    """Missing or malformed input. Carries every offending field."""

    status_code = 400

    def __init__(self, message: str, missing_fields=None, invalid_fields=None):
        super().__init__(message)
        self.missing_fields = list(missing_fields or [])
        self.invalid_fields = dict(invalid_fields or {})

    @property
    def fields(self) -> list[str]:
        return self.missing_fields + [f for f in self.invalid_fields if f not in self.missing_fields]

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.missing_fields:
            body["missingFields"] = self.missing_fields
        if self.invalid_fields:
            body["invalidFields"] = self.invalid_fields
        return body


class NotFoundError(ChangeBagError):
    status_code = 404


class ConflictError(ChangeBagError):
    """Duplicate record or illegal state transition."""

    status_code = 409

    def __init__(self, message: str, current_status: str = None):
        super().__init__(message)
        self.current_status = current_status

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.current_status is not None:
            body["currentStatus"] = self.current_status
        return body


class AuthorizationError(ChangeBagError):
    status_code = 403


class DependencyFailure(ChangeBagError):
    """An outside provider (gateway, SMS, SMTP) failed or is not configured."""

    status_code = 502
