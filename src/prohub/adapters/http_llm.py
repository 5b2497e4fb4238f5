"""HTTP LLM adapter - OpenAI-compatible chat completions over requests."""

import logging

import requests

logger = logging.getLogger(__name__)


class HTTPLLMService:
    """
    Chat-completions client.

    Implements LLMService protocol against any endpoint that speaks the
    OpenAI `/chat/completions` shape.
    """

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str,
        timeout: int = 300,
        temperature: float = 0.2,
        session: requests.Session | None = None,
    ):
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.temperature = temperature
        self._session = session or requests.Session()

    def generate(self, prompt: str) -> str:
        """Generate text from a prompt. Returns complete response."""
        if not self.api_key:
            raise RuntimeError("No LLM API key. Set llm_api_key in prohub.conf or PROHUB_LLM_API_KEY.")

        try:
            resp = self._session.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "temperature": self.temperature,
                    "messages": [{"role": "user", "content": prompt}],
                },
                timeout=self.timeout,
            )
        except requests.Timeout:
            raise RuntimeError(f"LLM request timed out after {self.timeout}s")
        except requests.RequestException as e:
            logger.error(f"LLM request failed: {e}")
            raise RuntimeError(f"LLM request failed: {e}")

        if resp.status_code != 200:
            logger.error(f"LLM API error {resp.status_code}: {resp.text}")
            raise RuntimeError(f"LLM API error {resp.status_code}: {resp.text[:200]}")

        try:
            data = resp.json()
            return data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            raise RuntimeError("LLM API returned an unexpected response shape")
