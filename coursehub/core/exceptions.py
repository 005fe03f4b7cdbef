from fastapi import status


class CourseHubError(Exception):
    """Base class for errors raised by the service layer.

    `detail` is safe to show to clients; anything sensitive belongs in the log.
    """
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail: str = "An unexpected internal server error occurred."

    def __init__(self, detail: str = None, headers: dict = None):
        self.detail = detail or self.default_detail
        self.headers = headers
        super().__init__(self.detail)


class NotFoundError(CourseHubError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Resource not found."


class ForbiddenError(CourseHubError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Not authorized to perform this action."


class ConflictError(CourseHubError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Resource already exists."


class ActivityAlreadyClosedError(ConflictError):
    default_detail = "Activity has already been closed."


class ValidationFailedError(CourseHubError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request."


class StorageError(CourseHubError):
    default_detail = "A storage error occurred. Please try again."


class MediaNotFoundError(NotFoundError):
    default_detail = "File not found."


class MediaStreamError(CourseHubError):
    default_detail = "Error streaming media."


class RangeNotSatisfiableError(CourseHubError):
    status_code = status.HTTP_416_REQUESTED_RANGE_NOT_SATISFIABLE
    default_detail = "Requested range not satisfiable."

    def __init__(self, file_size: int):
        super().__init__(headers={"Content-Range": f"bytes */{file_size}"})
        self.file_size = file_size
