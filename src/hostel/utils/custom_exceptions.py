class HostelError(Exception):
    status_code = 500

    def __init__(self, message: str = "", status_code: int = None):
        super().__init__(message)
        if status_code is not None:
            self.status_code = status_code


class InvalidRequest(HostelError):
    status_code = 400


class InvalidDates(InvalidRequest):
    pass


class ReviewNotAllowed(InvalidRequest):
    pass


class NotFoundException(HostelError):
    def __init__(self, resource: str, identifier: str, status_code: int = 404):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} '{identifier}' not found", status_code)

    def __str__(self):
        return f"{self.resource} '{self.identifier}' not found"


class ConflictException(HostelError):
    status_code = 409


class RoomAlreadyExists(ConflictException):
    pass


class UserAlreadyExists(ConflictException):
    pass


class RoomUnavailable(HostelError):
    status_code = 400


class RoomAtCapacity(HostelError):
    status_code = 400


class InvalidStateTransition(HostelError):
    status_code = 409


class InvariantViolation(HostelError):
    status_code = 500


class IncorrectCredentials(HostelError):
    status_code = 401
