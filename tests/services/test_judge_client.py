# tests/services/test_judge_client.py
import pytest
import requests
from unittest.mock import MagicMock, patch

from codepad.config import Settings
from codepad.services.judge_client import JudgeClient
from codepad.services.exceptions import ExecutionBackendUnavailable


def make_response(status_code=200, body=None, json_error=False):
    """requests.Response를 흉내 내는 모의 응답을 만듭니다."""
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = body
    return response

@pytest.fixture
def mock_request():
    """requests.request를 모킹하여 실제 Judge 서버 호출을 방지합니다."""
    with patch("codepad.services.judge_client.requests.request") as mock:
        yield mock

# ===================================================================
#  wait=true (단일 요청) 모드
# ===================================================================
class TestBlockingSubmit:
    SETTINGS = Settings(judge_url="http://judge.test", judge_timeout=5.0)

    def test_submit_posts_payload_and_returns_reply(self, mock_request):
        # === Arrange ===
        reply = {"stdout": "hi\n", "status": {"id": 3, "description": "Accepted"}}
        mock_request.return_value = make_response(body=reply)
        client = JudgeClient(self.SETTINGS)

        # === Act ===
        result = client.submit(71, "print('hi')", "")

        # === Assert ===
        assert result == reply
        mock_request.assert_called_once()
        args, kwargs = mock_request.call_args
        assert args == ("POST", "http://judge.test/submissions")
        assert kwargs["json"] == {"source_code": "print('hi')", "language_id": 71, "stdin": ""}
        assert kwargs["params"] == {"base64_encoded": "false", "wait": "true"}
        assert kwargs["timeout"] == 5.0
        assert "X-RapidAPI-Key" not in kwargs["headers"]

    def test_rapidapi_headers_are_sent_when_configured(self, mock_request):
        mock_request.return_value = make_response(body={"stdout": ""})
        client = JudgeClient(Settings(judge_url="http://judge.test", judge_api_key="k", judge_host="h"))

        client.submit(63, "", "")

        headers = mock_request.call_args.kwargs["headers"]
        assert headers["X-RapidAPI-Key"] == "k"
        assert headers["X-RapidAPI-Host"] == "h"

    @pytest.mark.parametrize("response", [
        make_response(status_code=503, body={"error": "busy"}),
        make_response(json_error=True),
        make_response(body=["unexpected"]),
        make_response(body={"status": {"id": 13, "description": "Internal Error"}, "message": "boom"}),
    ])
    def test_bad_replies_raise_backend_unavailable(self, mock_request, response):
        mock_request.return_value = response
        with pytest.raises(ExecutionBackendUnavailable):
            JudgeClient(self.SETTINGS).submit(71, "print(1)", "")

    def test_token_only_reply_is_polled_to_completion(self, mock_request):
        """wait=true여도 Judge가 토큰만 돌려주면 결과가 나올 때까지 폴링합니다."""
        # === Arrange ===
        mock_request.side_effect = [
            make_response(status_code=201, body={"token": "abc-123"}),
            make_response(body={"stdout": "late\n", "status": {"id": 3, "description": "Accepted"}}),
        ]
        sleep = MagicMock()
        client = JudgeClient(self.SETTINGS, sleep=sleep, clock=lambda: 0.0)

        # === Act ===
        result = client.submit(71, "print('late')", "")

        # === Assert ===
        assert result["stdout"] == "late\n"
        assert mock_request.call_args_list[1].args == ("GET", "http://judge.test/submissions/abc-123")
        sleep.assert_not_called()

    def test_transport_errors_are_not_retried(self, mock_request):
        """통신 오류는 ExecutionBackendUnavailable로 바뀌며 자동 재시도하지 않습니다."""
        mock_request.side_effect = requests.ConnectionError("refused")
        with pytest.raises(ExecutionBackendUnavailable):
            JudgeClient(self.SETTINGS).submit(71, "print(1)", "")
        assert mock_request.call_count == 1

    def test_timeout_is_backend_unavailable(self, mock_request):
        mock_request.side_effect = requests.Timeout("slow")
        with pytest.raises(ExecutionBackendUnavailable):
            JudgeClient(self.SETTINGS).submit(71, "print(1)", "")

# ===================================================================
#  wait=false (토큰 + 폴링) 모드
# ===================================================================
class TestPollingSubmit:
    SETTINGS = Settings(judge_url="http://judge.test", judge_wait=False,
                        judge_poll_interval=0.1, judge_poll_timeout=20.0)

    def test_polls_until_terminal_status(self, mock_request):
        # === Arrange ===
        mock_request.side_effect = [
            make_response(status_code=201, body={"token": "abc"}),
            make_response(body={"status": {"id": 1, "description": "In Queue"}}),
            make_response(body={"status": {"id": 2, "description": "Processing"}}),
            make_response(body={"stdout": "done", "status": {"id": 3, "description": "Accepted"}}),
        ]
        sleep = MagicMock()
        client = JudgeClient(self.SETTINGS, sleep=sleep, clock=lambda: 0.0)

        # === Act ===
        result = client.submit(71, "print('done')", "")

        # === Assert ===
        assert result["stdout"] == "done"
        assert mock_request.call_count == 4
        assert mock_request.call_args_list[0].kwargs["params"]["wait"] == "false"
        assert mock_request.call_args_list[1].args == ("GET", "http://judge.test/submissions/abc")
        assert sleep.call_count == 2

    def test_missing_token_is_malformed(self, mock_request):
        mock_request.return_value = make_response(status_code=201, body={})
        with pytest.raises(ExecutionBackendUnavailable, match="token"):
            JudgeClient(self.SETTINGS, sleep=MagicMock(), clock=lambda: 0.0).submit(71, "", "")

    def test_polling_gives_up_after_deadline(self, mock_request):
        pending = {"status": {"id": 2, "description": "Processing"}}
        mock_request.side_effect = [
            make_response(status_code=201, body={"token": "abc"}),
            make_response(body=pending),
            make_response(body=pending),
        ]
        clock = MagicMock(side_effect=[0.0, 5.0, 25.0])
        client = JudgeClient(self.SETTINGS, sleep=MagicMock(), clock=clock)

        with pytest.raises(ExecutionBackendUnavailable, match="timed out"):
            client.submit(71, "while True: pass", "")
