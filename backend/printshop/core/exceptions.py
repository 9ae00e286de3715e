from fastapi import HTTPException, status


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail
        )


class Unauthenticated(HTTPException):
    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class InvalidCredentials(HTTPException):
    """Raised for unknown emails and wrong passwords alike."""

    def __init__(self, detail: str = "Invalid email or password"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail
        )


class NotFound(HTTPException):
    def __init__(self, detail: str):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=detail
        )


class Conflict(HTTPException):
    def __init__(self, detail: str, status_code: int = status.HTTP_409_CONFLICT):
        super().__init__(
            status_code=status_code,
            detail=detail
        )


class EmailAlreadyRegisteredError(Conflict):
    def __init__(self):
        # Clients already key off 400 for a taken email
        super().__init__("Email already registered", status_code=status.HTTP_400_BAD_REQUEST)


class InvalidTransition(Conflict):
    def __init__(self, current: str, requested: str):
        super().__init__(f"Invalid status transition from {current} to {requested}")


class InternalError(HTTPException):
    def __init__(self, detail: str = "Database error occurred"):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail
        )
