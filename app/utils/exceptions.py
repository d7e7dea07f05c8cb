"""커스텀 HTTP 예외 클래스 모듈.

Custom HTTP exception classes module.
Provides pre-configured HTTPException subclasses for the error taxonomy
of the issue tracker, so services and repositories raise by meaning
instead of by status code.

Usage:
    from app.utils.exceptions import NotFoundError, ValidationFailedError
    raise NotFoundError("Issue not found")
    raise ValidationFailedError("Password must be at least 6 characters")
"""

from fastapi import HTTPException, status


class NotFoundError(HTTPException):
    """404 Not Found — 요청한 리소스를 찾을 수 없을 때 사용."""

    def __init__(self, detail: str = "Resource not found") -> None:
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class DuplicateError(HTTPException):
    """409 Conflict — 이미 등록된 이메일 등 고유성 위반 시 사용."""

    def __init__(self, detail: str = "Resource already exists") -> None:
        super().__init__(status_code=status.HTTP_409_CONFLICT, detail=detail)


class ForbiddenError(HTTPException):
    """403 Forbidden 예외 — 권한 부족 시 사용.

    Raised when the access policy rejects the action for the actor's role
    or ownership (e.g. a technician trying to create an issue).
    """

    def __init__(self, detail: str = "Insufficient permissions") -> None:
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class UnauthorizedError(HTTPException):
    """401 Unauthorized 예외 — 인증 실패 시 사용.

    Raised when there is no valid session: missing/expired JWT, revoked
    refresh token, or wrong credentials. Clients redirect to sign-in.
    """

    def __init__(self, detail: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


class BadRequestError(HTTPException):
    """400 Bad Request 예외 — 잘못된 요청 데이터 시 사용.

    Raised for validation failures beyond what Pydantic catches: password
    too short, passwords mismatched, sub-category outside its category,
    oversized attachment, self role change.
    """

    def __init__(self, detail: str = "Bad request") -> None:
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class StoreUnavailableError(HTTPException):
    """503 — 데이터베이스에 연결할 수 없음 (Store unreachable).

    Deployment misconfiguration or outage. The message is shown verbatim as a
    blocking banner and is never retried automatically.
    """

    def __init__(self, detail: str = "The database is currently unavailable.") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class SchemaMissingError(HTTPException):
    """503 — 테이블/정책이 프로비저닝되지 않음 (Schema or policies not provisioned)."""

    def __init__(self, detail: str = "Database setup incomplete. Please run the database migrations.") -> None:
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)


class RemoteFunctionMissingError(HTTPException):
    """501 — 권한 프로시저 미설치 (Privileged server-side function not provisioned).

    Distinct from a generic failure so the operator knows which function to install.
    """

    def __init__(self, function_name: str) -> None:
        self.function_name: str = function_name
        super().__init__(
            status_code=status.HTTP_501_NOT_IMPLEMENTED,
            detail=(
                f"Missing SQL Function. Please provision the '{function_name}' "
                "function by running the database migrations."
            ),
        )


# 오류 분류 별칭 / Taxonomy aliases used across services
NotAuthenticatedError = UnauthorizedError
PermissionDeniedError = ForbiddenError
ValidationFailedError = BadRequestError
