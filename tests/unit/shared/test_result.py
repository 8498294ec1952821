"""Unit tests for Result type."""

from enum import Enum

import pytest

from mux_console.shared.result import Err, ErrorInfo, Ok, ResultError


class SampleError(str, Enum):
    ASSET_NOT_FOUND = "ASSET_NOT_FOUND"
    MUX_GET_ASSET_FAILED = "MUX_GET_ASSET_FAILED"


class TestOk:
    """Tests for Ok result type."""

    def test_ok_creation(self) -> None:
        result = Ok(42)
        assert result.data == 42

    def test_ok_flag(self) -> None:
        """Ok always reports ok=True, whatever the payload."""
        for value in (42, None, "", [], {"ok": False}):
            assert Ok(value).ok is True

    def test_ok_is_ok(self) -> None:
        result = Ok("success")
        assert result.is_ok() is True
        assert result.is_err() is False

    def test_ok_unwrap(self) -> None:
        assert Ok(42).unwrap() == 42

    def test_ok_unwrap_or(self) -> None:
        """Test unwrap_or returns data (not default) for Ok."""
        assert Ok(42).unwrap_or(100) == 42

    def test_ok_map_chain(self) -> None:
        mapped = Ok(5).map(lambda x: x * 2).map(lambda x: x + 3)
        assert mapped.unwrap() == 13

    def test_ok_repr(self) -> None:
        assert repr(Ok(42)) == "Ok(42)"

    def test_ok_frozen(self) -> None:
        """Test Ok is immutable (frozen dataclass)."""
        result = Ok(42)
        with pytest.raises((AttributeError, TypeError)):  # FrozenInstanceError
            result.data = 100  # type: ignore


class TestErr:
    """Tests for Err result type."""

    def test_message_defaults_to_code(self) -> None:
        result = Err(SampleError.ASSET_NOT_FOUND)
        assert result.error == ErrorInfo(code="ASSET_NOT_FOUND", message="ASSET_NOT_FOUND")

    def test_plain_string_code(self) -> None:
        result = Err("AUTH_REQUIRED")
        assert result.error.code == "AUTH_REQUIRED"
        assert result.error.message == "AUTH_REQUIRED"

    def test_explicit_message(self) -> None:
        result = Err(SampleError.MUX_GET_ASSET_FAILED, "connection reset")
        assert result.error.code == "MUX_GET_ASSET_FAILED"
        assert result.error.message == "connection reset"

    def test_empty_message_is_kept(self) -> None:
        """Only a missing message falls back to the code."""
        assert Err("X", "").error.message == ""

    def test_err_flag(self) -> None:
        assert Err("X").ok is False
        assert Err("X").is_err() is True
        assert Err("X").is_ok() is False

    def test_err_unwrap_raises(self) -> None:
        with pytest.raises(ResultError, match=r"\[ASSET_NOT_FOUND\] gone"):
            Err(SampleError.ASSET_NOT_FOUND, "gone").unwrap()

    def test_err_unwrap_or(self) -> None:
        assert Err("X").unwrap_or(42) == 42

    def test_err_map(self) -> None:
        """Test map does nothing for Err."""
        result = Err("X", "boom")
        mapped = result.map(lambda x: x * 2)  # type: ignore
        assert mapped is result

    def test_err_repr(self) -> None:
        assert repr(Err("X", "boom")) == "Err('X', 'boom')"

    def test_err_frozen(self) -> None:
        result = Err("X")
        with pytest.raises((AttributeError, TypeError)):  # FrozenInstanceError
            result.error = ErrorInfo(code="Y", message="Y")  # type: ignore


class TestResultPatternMatching:
    """Tests for structural pattern matching on Result types."""

    @staticmethod
    def describe(result) -> str:
        match result:
            case Ok(data):
                return f"ok:{data}"
            case Err(error):
                return f"err:{error.code}:{error.message}"
        return "unreachable"

    def test_match_ok(self) -> None:
        assert self.describe(Ok(7)) == "ok:7"

    def test_match_err(self) -> None:
        assert self.describe(Err(SampleError.ASSET_NOT_FOUND)) == (
            "err:ASSET_NOT_FOUND:ASSET_NOT_FOUND"
        )
