"""Tests for friendly collaborator error messages."""

from scanassist.utils.error_messages import MAX_MESSAGE_LENGTH, friendly_error


def test_known_patterns():
    assert friendly_error(TimeoutError("Request timed out")) == (
        "The AI service took too long to answer. Please try again."
    )
    assert friendly_error("Error code: 429 - rate limit exceeded").startswith("The AI service is busy")


def test_empty():
    assert friendly_error(None) == "Unknown error occurred."
    assert friendly_error("") == "Unknown error occurred."


def test_fallback_is_first_line_and_clipped():
    message = friendly_error("boom\nTraceback (most recent call last):")
    assert message == "boom"
    long = friendly_error("x" * 500)
    assert len(long) == MAX_MESSAGE_LENGTH
    assert long.endswith("...")


def test_storage_errors_are_not_ai_errors():
    exc = PermissionError(13, "Permission denied", "/data/history.json")
    assert friendly_error(exc) == "Could not save to local storage."
    assert friendly_error(OSError(30, "Read-only file system")) == "Could not save to local storage."
    assert friendly_error("Error code: 401 - invalid api key") == (
        "The AI assistant could not sign in to its provider."
    )
