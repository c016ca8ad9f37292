"""
utils/exceptions.py

서비스 계층에서 발생시키는 도메인 예외.
라우터는 예외를 잡지 않고 그대로 올려보내며, middlewares/error_handler.py가
status_code/code 값을 이용해 일관된 JSON 에러 응답으로 변환한다.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """잘못된 입력값 (등급 범위 누락/중복, 점수 범위 오류 등)"""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(AppError):
    """ID 조회 실패 또는 어떤 등급 구간에도 속하지 않는 점수"""
    status_code = 404
    code = "NOT_FOUND"


class ConflictError(AppError):
    """현재 상태에서 허용되지 않는 워크플로 전이 (예: 승인된 성적표 수정)"""
    status_code = 409
    code = "CONFLICT"
