class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, status_code: int) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message, status_code)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 404)


class InvalidArgumentError(DomainError):
    def __init__(self, message: str) -> None:
        super().__init__(message, 400)


class StatementBindingError(InvalidArgumentError):
    """Raised when a prepared statement is bound with the wrong number or type of values"""

    def __init__(self, message: str, *, statement: str) -> None:
        self.statement = statement
        super().__init__(f'{statement}: {message}')


class StorageUnavailableError(CustomBaseError):
    """
    The cluster could not serve the request.

    Retryable by the caller. The repository never retries on its own.
    """

    retryable = True

    def __init__(
        self, message: str, *, operation: str, key: object = None, status_code: int = 503
    ) -> None:
        self.operation = operation
        self.key = key
        super().__init__(f'{operation}({key}): {message}', status_code)


class StorageTimeoutError(StorageUnavailableError):
    """
    The cluster did not answer within the request timeout.

    For writes the outcome is unknown: the batch may or may not have been applied.
    """

    def __init__(self, message: str, *, operation: str, key: object = None) -> None:
        super().__init__(message, operation=operation, key=key, status_code=504)


class StorageRequestError(CustomBaseError):
    """
    The cluster rejected the request itself: invalid CQL, missing table or privilege.

    Retrying the same request cannot succeed.
    """

    retryable = False

    def __init__(self, message: str, *, operation: str, key: object = None) -> None:
        self.operation = operation
        self.key = key
        super().__init__(f'{operation}({key}): {message}', 500)


class SchemaConflictError(CustomBaseError):
    """Schema provisioning failed for a reason other than 'already exists'. Fatal at startup."""

    def __init__(self, message: str, *, statement: str) -> None:
        self.statement = statement
        super().__init__(message, 500)


class ConfirmationNumberExhaustedError(CustomBaseError):
    def __init__(self, *, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(
            f'No unused confirmation number found after {attempts} attempts', 503
        )
