"""Tests for email tools."""

import pytest

from omnisend_lifterlms.tools.email import sanitize_email


@pytest.mark.parametrize(
    ("email", "expected"),
    [
        ("user@example.com", "user@example.com"),
        ("test.user@sub.domain.co.uk", "test.user@sub.domain.co.uk"),
        ("name+tag@gmail.com", "name+tag@gmail.com"),
        ("  user@example.com\n", "user@example.com"),
    ],
)
def test_sanitize_email_valid(email, expected):
    """Test sanitizing valid email addresses."""
    assert sanitize_email(email) == expected


@pytest.mark.parametrize(
    "invalid_email",
    [
        None,
        "",
        "invalid-email",
        "user@",
        "@domain.com",
        "user@domain@com",
        "user@@domain.com",
        "user domain.com",
        "<script>alert('XSS')</script>@example.com",
        "user@example.com;drop table users",
        f"{'a' * 65}@example.com",
    ],
)
def test_sanitize_email_invalid(invalid_email):
    """Test handling of invalid email addresses."""
    assert sanitize_email(invalid_email) == ""
