"""Tests for the filesig error taxonomy."""

import pytest

from filesig.errors import ConfigurationError, DecodeError, FileSigError, InvalidInputError


class TestFileSigError:
    """Test FileSigError base class."""

    def test_basic_error_creation(self) -> None:
        error = FileSigError(code="filesig:test/error", message="Test error message")

        assert error.code == "filesig:test/error"
        assert error.message == "Test error message"
        assert error.details == {}
        assert str(error) == "Test error message"

    def test_to_dict(self) -> None:
        error = FileSigError("filesig:test/error", "msg", {"value": 42})
        assert error.to_dict() == {
            "code": "filesig:test/error",
            "message": "msg",
            "details": {"value": 42},
        }

    def test_details_not_shared(self) -> None:
        first = FileSigError("c", "m")
        second = FileSigError("c", "m")
        first.details["x"] = 1
        assert second.details == {}


class TestSubclasses:
    def test_invalid_input_carries_field(self) -> None:
        error = InvalidInputError("fingerprint must be 64 hex characters", field="fingerprint")
        assert error.code == "filesig:input/invalid"
        assert error.field == "fingerprint"
        assert error.details == {"field": "fingerprint"}
        assert error.message.startswith("Invalid input:")

    def test_configuration_error(self) -> None:
        error = ConfigurationError("no current public key configured")
        assert error.code == "filesig:config/invalid"
        assert error.reason == "no current public key configured"

    def test_decode_error(self) -> None:
        error = DecodeError("invalid base64url", details={"length": 5})
        assert error.code == "filesig:codec/decode"
        assert error.details == {"length": 5}

    @pytest.mark.parametrize("cls", [InvalidInputError, ConfigurationError, DecodeError])
    def test_all_derive_from_base(self, cls: type) -> None:
        assert issubclass(cls, FileSigError)
