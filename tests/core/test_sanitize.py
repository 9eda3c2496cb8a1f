"""Unit tests for message-board input sanitation."""

from src.core.sanitize import (
    MAX_INPUT_LENGTH,
    contains_malicious_content,
    sanitize_input,
    validate_reply_content,
)


class TestSanitizeInput:
    """Tests for sanitize_input()."""

    def test_removes_angle_brackets(self):
        """'<' and '>' are stripped."""
        assert sanitize_input("<b>hi</b>") == "bhi/b"

    def test_trims(self):
        """Surrounding whitespace is removed."""
        assert sanitize_input("  hello  ") == "hello"

    def test_caps_length(self):
        """Output is truncated to the maximum length."""
        assert len(sanitize_input("x" * 2000)) == MAX_INPUT_LENGTH
        assert sanitize_input("abcdef", max_length=3) == "abc"

    def test_non_string(self):
        """Non-strings become empty strings."""
        assert sanitize_input(None) == ""
        assert sanitize_input(42) == ""


class TestContainsMaliciousContent:
    """Tests for contains_malicious_content()."""

    def test_script_tag(self):
        """Script tags are flagged regardless of case."""
        assert contains_malicious_content("<SCRIPT>alert(1)</SCRIPT>") is True

    def test_event_handler(self):
        """Inline event handlers are flagged."""
        assert contains_malicious_content('<img onerror = "x">') is True

    def test_javascript_url(self):
        """javascript: URLs are flagged."""
        assert contains_malicious_content("javascript:void(0)") is True

    def test_plain_text(self):
        """Ordinary text is fine."""
        assert contains_malicious_content("Practice at 6 @jsmith") is False

    def test_non_string(self):
        """Non-strings are never flagged."""
        assert contains_malicious_content(None) is False


class TestValidateReplyContent:
    """Tests for validate_reply_content()."""

    def test_empty(self):
        """Empty replies are rejected."""
        assert validate_reply_content("") == "Reply content cannot be empty"

    def test_too_long(self):
        """Replies over 500 characters are rejected."""
        assert validate_reply_content("x" * 501) == (
            "Reply content cannot exceed 500 characters"
        )

    def test_at_limit(self):
        """Exactly 500 characters is fine."""
        assert validate_reply_content("x" * 500) is None
