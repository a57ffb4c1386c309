from .gemini import GeminiStudioClient, GenerationError

__all__ = ["GeminiStudioClient", "GenerationError"]
