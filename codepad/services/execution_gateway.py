import enum
import logging
from dataclasses import dataclass
from typing import Dict, Any, Optional

from codepad.services.judge_client import JudgeClient
from codepad.services.exceptions import ExecutionBackendUnavailable
from codepad.utils.languages import LanguageRegistry, get_registry

logger = logging.getLogger(__name__)

NO_OUTPUT = "No output"
RESULT_KEYS = ("stdout", "stderr", "compile_output", "status")


class ExecutionStatus(enum.Enum):
    SUCCESS = "success"
    COMPILE_ERROR = "compile_error"
    RUNTIME_ERROR = "runtime_error"


@dataclass(frozen=True)
class ExecutionResult:
    stdout_text: str
    stderr_text: str
    compile_error_text: str
    status: ExecutionStatus
    backend_status: Optional[str] = None

    @property
    def output(self) -> str:
        """상태에 따라 사용자에게 보여줄 단일 출력."""
        if self.status is ExecutionStatus.COMPILE_ERROR:
            return self.compile_error_text
        if self.status is ExecutionStatus.RUNTIME_ERROR:
            return self.stderr_text
        return self.stdout_text or NO_OUTPUT

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stdout": self.stdout_text,
            "stderr": self.stderr_text,
            "compile_output": self.compile_error_text,
            "status": self.status.value,
            "backend_status": self.backend_status,
            "output": self.output,
        }


def _channel(raw: Dict[str, Any], key: str) -> str:
    value = raw.get(key)
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def classify(raw: Dict[str, Any]) -> ExecutionResult:
    """
    Judge 원본 응답을 ExecutionResult로 정규화합니다.

    우선순위: compile_output이 있으면 COMPILE_ERROR (stderr보다 우선, 프로그램이 실행되지 않았음),
    그 다음 stderr가 있으면 RUNTIME_ERROR, 둘 다 없으면 SUCCESS.
    비어 있거나 없는 필드는 오류가 아니라 '출력 없음'으로 취급합니다.
    단, 결과 필드(stdout, stderr, compile_output, status)가 하나도 없으면 실행 결과가 아닙니다.
    """
    if not isinstance(raw, dict):
        raise ExecutionBackendUnavailable("Judge returned a malformed reply.")
    if not any(key in raw for key in RESULT_KEYS):
        raise ExecutionBackendUnavailable("Judge reply carries no execution result.")

    stdout_text = _channel(raw, "stdout")
    stderr_text = _channel(raw, "stderr")
    compile_text = _channel(raw, "compile_output")

    if compile_text:
        status = ExecutionStatus.COMPILE_ERROR
    elif stderr_text:
        status = ExecutionStatus.RUNTIME_ERROR
    else:
        status = ExecutionStatus.SUCCESS

    backend_status = raw.get("status")
    if isinstance(backend_status, dict):
        backend_status = backend_status.get("description")
    elif backend_status is not None:
        backend_status = str(backend_status)

    return ExecutionResult(
        stdout_text=stdout_text,
        stderr_text=stderr_text,
        compile_error_text=compile_text,
        status=status,
        backend_status=backend_status,
    )


class ExecutionGateway:
    """에디터 버퍼를 Judge 실행 요청으로 바꾸고, 결과를 하나의 ExecutionResult로 정규화합니다."""

    def __init__(self, judge_client: JudgeClient, registry: LanguageRegistry = None):
        self.judge_client = judge_client
        self.registry = registry or get_registry()

    def run(self, language_tag: str, source_code: str, stdin: str = "") -> ExecutionResult:
        """
        코드를 실행합니다. 소유권 검사나 저장은 하지 않으므로 스크래치패드에서도 동일하게 동작합니다.

        Args:
            language_tag: 에디터 언어 태그 (예: 'python').
            source_code: 실행할 소스 코드.
            stdin: 프로그램 표준 입력.

        Returns:
            정규화된 ExecutionResult. 컴파일/런타임 오류도 예외가 아닌 결과로 반환됩니다.

        Raises:
            UnsupportedLanguageError: 등록되지 않은 언어일 때. (Judge를 호출하지 않음)
            ExecutionBackendUnavailable: Judge 통신 실패, 타임아웃, 잘못된 응답일 때.
        """
        language = self.registry.require(language_tag)
        source_code = source_code or ""
        logger.info("Running %s snippet (%d chars).", language.tag, len(source_code))

        raw = self.judge_client.submit(language.backend_id, source_code, stdin or "")
        result = classify(raw)

        logger.info("Run finished: %s (%s).", result.status.value, result.backend_status)
        return result
