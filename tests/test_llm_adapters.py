"""Tests for the LLM adapters and the LLM-backed oracle."""

import json
import subprocess
from unittest.mock import patch, MagicMock

import pytest
import requests

from prohub.adapters.claude_cli import ClaudeCLIService
from prohub.adapters.http_llm import HTTPLLMService
from prohub.adapters.llm_oracle import LLMPrioritizationOracle, extract_json, format_prompt
from prohub.core.prioritization import OracleRequestFailed, OracleTask


@pytest.fixture
def request_tasks():
    return [
        OracleTask(title="Submit report", description="Q3 numbers", deadline="2025-01-20", importance="high"),
        OracleTask(title="Plan retreat", description="", deadline="2025-02-01", importance="medium"),
    ]


class FakeLLM:
    def __init__(self, reply: str | None = None, error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.prompts = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.reply


class TestClaudeCLIService:
    @patch("prohub.adapters.claude_cli.subprocess.run")
    def test_generate_passes_prompt_on_stdin(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout="answer", stderr="")
        service = ClaudeCLIService(timeout=10)

        assert service.generate("the prompt") == "answer"
        args, kwargs = mock_run.call_args
        assert args[0] == ["claude", "-p", "-"]
        assert kwargs["input"] == "the prompt"
        assert kwargs["timeout"] == 10

    @patch("prohub.adapters.claude_cli.subprocess.run")
    def test_nonzero_exit(self, mock_run):
        mock_run.return_value = MagicMock(returncode=1, stdout="", stderr="boom")
        with pytest.raises(RuntimeError, match="boom"):
            ClaudeCLIService().generate("p")

    @patch("prohub.adapters.claude_cli.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_binary(self, mock_run):
        with pytest.raises(RuntimeError, match="not found"):
            ClaudeCLIService().generate("p")

    @patch(
        "prohub.adapters.claude_cli.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="claude", timeout=5),
    )
    def test_timeout(self, mock_run):
        with pytest.raises(RuntimeError, match="timed out after 5s"):
            ClaudeCLIService(timeout=5).generate("p")


class TestHTTPLLMService:
    def make(self, session, api_key="key"):
        return HTTPLLMService(
            api_url="https://llm.example/v1/chat/completions",
            api_key=api_key,
            model="test-model",
            timeout=30,
            session=session,
        )

    def test_generate(self):
        session = MagicMock()
        session.post.return_value = MagicMock(
            status_code=200,
            json=MagicMock(return_value={"choices": [{"message": {"content": "hello"}}]}),
        )
        assert self.make(session).generate("hi") == "hello"

        _, kwargs = session.post.call_args
        assert kwargs["headers"] == {"Authorization": "Bearer key"}
        assert kwargs["json"]["model"] == "test-model"
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "hi"}]
        assert kwargs["timeout"] == 30

    def test_missing_key(self):
        session = MagicMock()
        with pytest.raises(RuntimeError, match="llm_api_key in prohub.conf or PROHUB_LLM_API_KEY"):
            self.make(session, api_key="").generate("hi")
        session.post.assert_not_called()

    def test_http_error_status(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=500, text="server down")
        with pytest.raises(RuntimeError, match="500"):
            self.make(session).generate("hi")

    def test_connection_error(self):
        session = MagicMock()
        session.post.side_effect = requests.ConnectionError("refused")
        with pytest.raises(RuntimeError, match="refused"):
            self.make(session).generate("hi")

    def test_timeout(self):
        session = MagicMock()
        session.post.side_effect = requests.Timeout()
        with pytest.raises(RuntimeError, match="timed out"):
            self.make(session).generate("hi")

    def test_unexpected_shape(self):
        session = MagicMock()
        session.post.return_value = MagicMock(status_code=200, json=MagicMock(return_value={"choices": []}))
        with pytest.raises(RuntimeError, match="unexpected"):
            self.make(session).generate("hi")


class TestExtractJson:
    def test_plain(self):
        assert extract_json('[{"a": 1}]') == [{"a": 1}]

    def test_code_fence(self):
        assert extract_json('Here you go:\n```json\n{"a": 1}\n```\nDone.') == {"a": 1}

    def test_surrounding_chatter(self):
        assert extract_json('Sure! {"a": [1, 2]} Hope that helps.') == {"a": [1, 2]}

    def test_no_json(self):
        with pytest.raises(OracleRequestFailed):
            extract_json("I cannot help with that.")

    def test_broken_json(self):
        with pytest.raises(OracleRequestFailed):
            extract_json('{"a": ')


class TestLLMPrioritizationOracle:
    def test_prompt_lists_tasks(self, request_tasks):
        prompt = format_prompt(request_tasks)
        assert "- Title: Submit report" in prompt
        assert "  Deadline: 2025-01-20" in prompt
        assert "  Importance: medium" in prompt

    def test_prioritize(self, request_tasks):
        reply = json.dumps(
            {
                "prioritizedTasks": [
                    {"title": "Plan retreat", "priority": 1, "reason": "Venue books up"},
                    {"title": "Submit report", "priority": 2, "reason": "Due later"},
                ]
            }
        )
        llm = FakeLLM(reply=reply)
        result = LLMPrioritizationOracle(llm).prioritize(request_tasks)

        assert [r.title for r in result] == ["Plan retreat", "Submit report"]
        assert result[0].reason == "Venue books up"
        assert len(llm.prompts) == 1

    def test_llm_failure_becomes_oracle_failure(self, request_tasks):
        oracle = LLMPrioritizationOracle(FakeLLM(error=RuntimeError("Claude CLI failed: x")))
        with pytest.raises(OracleRequestFailed, match="Claude CLI failed"):
            oracle.prioritize(request_tasks)

    def test_empty_answer_is_failure(self, request_tasks):
        oracle = LLMPrioritizationOracle(FakeLLM(reply='{"prioritizedTasks": []}'))
        with pytest.raises(OracleRequestFailed):
            oracle.prioritize(request_tasks)

    def test_nan_rank_is_failure(self, request_tasks):
        reply = (
            '{"prioritizedTasks": ['
            '{"title": "Submit report", "priority": NaN, "reason": "r"},'
            '{"title": "Plan retreat", "priority": 1, "reason": "r"}]}'
        )
        oracle = LLMPrioritizationOracle(FakeLLM(reply=reply))
        with pytest.raises(OracleRequestFailed, match="invalid priority"):
            oracle.prioritize(request_tasks)
