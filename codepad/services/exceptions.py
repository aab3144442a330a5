# codepad/services/exceptions.py

# --- Validation Exceptions ---
class ValidationError(Exception):
    """요청 값이 없거나 잘못되었을 때 (예: 빈 프로젝트 이름)"""
    pass

class UnsupportedLanguageError(ValidationError):
    """실행할 수 없는 언어 태그가 요청되었을 때"""
    pass

# --- Lookup / Auth Exceptions ---
class ResourceNotFoundError(Exception):
    """
    리소스가 없거나, 요청한 사용자의 소유가 아닐 때.
    두 경우를 구분하지 않습니다. (소유 여부를 외부에 노출하지 않기 위함)
    """
    pass

class AuthenticationError(Exception):
    """요청에 인증된 사용자 정보가 없을 때"""
    pass

# --- Execution Exceptions ---
class ExecutionBackendUnavailable(Exception):
    """Judge 서버 통신 실패, 타임아웃, 잘못된 응답일 때 (컴파일/런타임 오류와는 다름)"""
    pass

# --- Persistence Exceptions ---
class PartialPromotionFailure(Exception):
    """
    스크래치패드 저장 중 프로젝트는 생성되었으나 파일 생성에 실패했을 때.
    생성된 project_id로 파일 생성만 다시 시도할 수 있습니다.
    """
    def __init__(self, project_id: int, message: str = None):
        self.project_id = project_id
        super().__init__(message or f"Project {project_id} was created but the file could not be saved.")

class StorageError(Exception):
    """DB 연결 끊김, 제약 조건 위반 등 예상하지 못한 저장소 오류"""
    pass
