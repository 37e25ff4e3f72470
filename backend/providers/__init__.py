from providers.base import BaseProvider
from providers.openai_provider import OpenAIProvider


__all__ = [
    "BaseProvider",
    "OpenAIProvider",
]
