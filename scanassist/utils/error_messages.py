# scanassist/utils/error_messages.py

"""
Plain-English translator for collaborator failures.
Turns raw exception text from the AI service, image decoding and storage
into one short sentence a user can act on. Never returns a stack trace.
"""

import re

MAX_MESSAGE_LENGTH = 160

# First match wins: OS-level errors come before the broader AI patterns.
FRIENDLY_MAP = [

    # ------------------ Storage ------------------
    (r".*(permission denied|read-only file system|no space left).*", lambda m:
        "Could not save to local storage."
    ),

    # ------------------ AI service ------------------
    (r".*GROQ_API_KEY is not set.*", lambda m:
        "The AI assistant is not configured on this server."
    ),
    (r".*(rate[ _]limit|429|too many requests).*", lambda m:
        "The AI service is busy right now. Please try again in a minute."
    ),
    (r".*(\b401\b|\b403\b|invalid api key|unauthorized|authentication).*", lambda m:
        "The AI assistant could not sign in to its provider."
    ),
    (r".*(timed? ?out|timeout).*", lambda m:
        "The AI service took too long to answer. Please try again."
    ),
    (r".*(connection|network|unreachable|resolve host).*", lambda m:
        "Could not reach the AI service. Check the connection and try again."
    ),

    # ------------------ Images ------------------
    (r".*(cannot identify image|decode image|unsupported image).*", lambda m:
        "The image could not be read. Try a JPEG or PNG file."
    ),
    (r"Image too large.*", lambda m:
        "The image is too large to process."
    ),
]


def friendly_error(error) -> str:
    """Return a short human-friendly message for an exception or raw message."""
    raw = str(error).strip() if error is not None else ""
    if not raw:
        return "Unknown error occurred."

    for pattern, handler in FRIENDLY_MAP:
        match = re.fullmatch(pattern, raw, flags=re.IGNORECASE | re.DOTALL)
        if match:
            return handler(match)

    # fallback: first line only, clipped
    first_line = raw.splitlines()[0]
    if len(first_line) > MAX_MESSAGE_LENGTH:
        first_line = first_line[: MAX_MESSAGE_LENGTH - 3].rstrip() + "..."
    return first_line
