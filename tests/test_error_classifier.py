"""Unit tests for delivery error classification"""

import pytest

from reminders.error_classifier import get_error_category, is_transient_error


@pytest.mark.parametrize("error", [
    Exception("ETIMEDOUT"),
    Exception("connect ECONNREFUSED 127.0.0.1:443"),
    Exception("socket hang up"),
    Exception("429 Too Many Requests"),
    "503 Service Unavailable",
    Exception("totally novel message"),
])
def test_transient_errors(error):
    assert is_transient_error(error) is True


@pytest.mark.parametrize("error", [
    Exception("401 Unauthorized"),
    Exception("403 Forbidden"),
    Exception("User has blocked the bot"),
    Exception("404 Not Found"),
    Exception("Invalid phone number"),
    Exception("session expired"),
    None,
    "",
])
def test_permanent_or_missing_errors(error):
    assert is_transient_error(error) is False


def test_transient_markers_win_over_permanent():
    """A network failure mentioning a 400 is still retried"""
    assert is_transient_error(Exception("network error after 400 ms")) is True


@pytest.mark.parametrize("message, category", [
    ("ETIMEDOUT", "network_timeout"),
    ("Request timeout", "network_timeout"),
    ("ECONNRESET", "connection_error"),
    ("rate limit exceeded", "rate_limit"),
    ("429", "rate_limit"),
    ("user blocked", "user_blocked"),
    ("401 Unauthorized", "auth_error"),
    ("session closed", "session_expired"),
    ("invalid number", "invalid_number"),
    ("404", "user_not_found"),
    ("something else", "unknown"),
])
def test_error_categories(message, category):
    assert get_error_category(Exception(message)) == category


def test_category_of_missing_error_is_unknown():
    assert get_error_category(None) == "unknown"


@pytest.mark.parametrize("error", [TimeoutError(), ConnectionError(), Exception()])
def test_exceptions_without_text_default_to_transient(error):
    """Only a missing error is permanent; an empty exception message is not"""
    assert is_transient_error(error) is True


def test_empty_timeout_is_categorized_by_type():
    assert get_error_category(TimeoutError()) == "network_timeout"
