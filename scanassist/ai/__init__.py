# scanassist/ai/__init__.py

"""
Rate-limited AI assist.

Exposes:
    AiAssistService.process(mode, text=None, image=None, target_language=None)
        -> AiSuccess | AiRateLimited | AiError
"""

from .groq_client import (
    AiAssistService,
    AiError,
    AiMode,
    AiRateLimited,
    AiResult,
    AiSuccess,
    get_client,
)
