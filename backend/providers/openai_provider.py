import httpx
from providers.base import BaseProvider


DEFAULT_MODEL = "gpt-4o-mini"


class OpenAIProvider(BaseProvider):
    """Provider for OpenAI-compatible chat completion APIs using standard httpx."""

    def __init__(self, api_key: str, base_url: str = "https://api.openai.com/v1",
                 model: str = DEFAULT_MODEL, timeout: float = 30.0):
        self.api_key = api_key
        self.endpoint = f"{base_url.rstrip('/')}/chat/completions"
        self.model = model
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "openai"

    async def chat(self, messages: list[dict], model: str | None = None) -> dict:
        used_model = model or self.model
        if not self.api_key:
            return self._result(used_model, error="Grading API key is not configured")
        try:
            headers = {
                "Authorization": f"Bearer {self.api_key}",
                "Content-Type": "application/json"
            }
            body = {
                "model": used_model,
                "messages": messages,
                "response_format": {"type": "json_object"},
                "temperature": 0.3,
            }

            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.endpoint, headers=headers, json=body)
                response.raise_for_status()
                data = response.json()
                text = data["choices"][0]["message"]["content"] if "choices" in data and data["choices"] else None

            return self._result(used_model, text=text)
        except httpx.TimeoutException:
            return self._result(used_model, error="Timeout")
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            return self._result(used_model, error=str(e) or type(e).__name__)
