import logging
import time
from typing import Dict, Any

import requests

from codepad.config import Settings, get_settings
from codepad.services.exceptions import ExecutionBackendUnavailable

logger = logging.getLogger(__name__)

# Judge0 status.id 값
STATUS_IN_QUEUE = 1
STATUS_PROCESSING = 2
STATUS_INTERNAL_ERROR = 13
PENDING_STATUSES = {STATUS_IN_QUEUE, STATUS_PROCESSING}


class JudgeClient:
    """
    Judge0 REST API 클라이언트입니다.

    wait=true 모드에서는 한 번의 요청으로 결과를 받고, wait=false 모드에서는 토큰을 받은 뒤
    종료 상태가 될 때까지 폴링합니다. 어느 쪽이든 호출자에게는 동기 호출로 보입니다.
    자동 재시도는 하지 않습니다. (같은 코드를 두 번 실행하게 될 수 있음)
    """

    def __init__(self, settings: Settings = None, sleep=time.sleep, clock=time.monotonic):
        self.settings = settings or get_settings()
        self.base_url = self.settings.judge_url.rstrip("/")
        self._sleep = sleep
        self._clock = clock

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.settings.judge_api_key and self.settings.judge_host:
            headers["X-RapidAPI-Key"] = self.settings.judge_api_key
            headers["X-RapidAPI-Host"] = self.settings.judge_host
        return headers

    def _parse(self, response) -> Dict[str, Any]:
        if response.status_code >= 400:
            raise ExecutionBackendUnavailable(f"Judge returned HTTP {response.status_code}.")
        try:
            body = response.json()
        except ValueError as e:
            raise ExecutionBackendUnavailable("Judge returned a non-JSON reply.") from e
        if not isinstance(body, dict):
            raise ExecutionBackendUnavailable("Judge returned a malformed reply.")
        return body

    def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.request(method, url, headers=self._headers(),
                                        timeout=self.settings.judge_timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("Judge request %s %s failed: %s", method, path, e)
            raise ExecutionBackendUnavailable("Execution backend is unavailable.") from e
        return self._parse(response)

    def submit(self, language_id: int, source_code: str, stdin: str) -> Dict[str, Any]:
        """
        코드를 제출하고 종료 상태의 원본 응답을 반환합니다.

        Returns:
            Judge0 제출 결과 딕셔너리 (stdout, stderr, compile_output, status 등).

        Raises:
            ExecutionBackendUnavailable: 통신 실패, 타임아웃, 잘못된 응답, Judge 내부 오류일 때.
        """
        payload = {"source_code": source_code, "language_id": language_id, "stdin": stdin}
        wait = "true" if self.settings.judge_wait else "false"
        body = self._request("POST", "/submissions",
                             params={"base64_encoded": "false", "wait": wait}, json=payload)

        # wait=true여도 Judge가 토큰만 돌려주면 아직 끝나지 않은 제출입니다.
        if not self.settings.judge_wait or self._is_pending(body) or self._is_token_only(body):
            token = body.get("token")
            if not token:
                raise ExecutionBackendUnavailable("Judge reply is missing a submission token.")
            body = self._poll(token)

        status = body.get("status")
        if isinstance(status, dict) and status.get("id") == STATUS_INTERNAL_ERROR:
            raise ExecutionBackendUnavailable(f"Judge internal error: {body.get('message') or status.get('description')}")
        return body

    @staticmethod
    def _is_token_only(body: Dict[str, Any]) -> bool:
        return "token" in body and "status" not in body

    @staticmethod
    def _is_pending(body: Dict[str, Any]) -> bool:
        status = body.get("status")
        return isinstance(status, dict) and status.get("id") in PENDING_STATUSES

    def _poll(self, token: str) -> Dict[str, Any]:
        deadline = self._clock() + self.settings.judge_poll_timeout
        while True:
            body = self._request("GET", f"/submissions/{token}", params={"base64_encoded": "false"})
            if not self._is_pending(body):
                return body
            if self._clock() >= deadline:
                logger.warning("Submission %s did not finish within %.1fs.", token, self.settings.judge_poll_timeout)
                raise ExecutionBackendUnavailable("Execution timed out waiting for the judge.")
            self._sleep(self.settings.judge_poll_interval)
