# app/core/errors.py
"""
도메인 예외. 라우터에서는 그대로 raise 하고, app/main.py의 핸들러가
{"error": message} JSON + status_code로 변환한다.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    status_code = 400


class ConflictError(AppError):
    """username/email 중복"""

    status_code = 400


class AuthError(AppError):
    status_code = 401


class AuthzError(AppError):
    """소유자가 아닌 사용자의 접근"""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class StorageError(AppError):
    status_code = 500


class TransportError(AppError):
    """메일 발송 실패. 디스패처 안에서 잡아서 failed 결과로 바꾼다."""

    status_code = 500
