"""
Tests for the error taxonomy.
"""
import pytest

from shortlink_app.errors import (
    AuthError,
    ConflictError,
    ExhaustedError,
    InternalError,
    NotFoundError,
    ShortlinkError,
    ValidationError,
)


@pytest.mark.parametrize("error_class,status_code", [
    (ValidationError, 400),
    (AuthError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (InternalError, 500),
    (ExhaustedError, 503),
])
def test_status_codes(error_class, status_code):
    assert error_class.status_code == status_code
    assert issubclass(error_class, ShortlinkError)


def test_default_message_when_none_given():
    error = NotFoundError()

    assert error.message == "Short URL not found"
    assert str(error) == "Short URL not found"


def test_explicit_message_wins():
    assert ValidationError("URL cannot be empty").message == "URL cannot be empty"
