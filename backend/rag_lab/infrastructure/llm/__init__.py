from .chat_completions_client import ChatCompletionsClient

__all__ = ["ChatCompletionsClient"]
