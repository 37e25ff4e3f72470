from abc import ABC, abstractmethod


class BaseProvider(ABC):
    """A chat-completion backend the grader can ask for a JSON verdict."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    async def chat(self, messages: list[dict], model: str | None = None) -> dict:
        """
        Ask the model for a single JSON object.

        Returns a status dict instead of raising:
            - text: str | None  (raw model output)
            - provider / model: who answered
            - status: "success" | "failed"
            - error: str | None
        """
        ...

    def _result(self, model: str, text: str | None = None, error: str | None = None) -> dict:
        return {
            "text": text,
            "provider": self.name,
            "model": model,
            "status": "failed" if error else "success",
            "error": error,
        }
