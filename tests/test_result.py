"""Tests for the Result type."""

from __future__ import annotations

import pytest

from filedrop.utils.result import ConfigError, Err, Ok, ResultError


class TestResult:
    """Tests for Ok and Err."""

    def test_ok(self) -> None:
        result = Ok(3)

        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 3
        with pytest.raises(ResultError):
            result.unwrap_err()

    def test_err(self) -> None:
        error = ConfigError(field="parallelism", message="Must be positive")
        result = Err(error)

        assert result.is_err()
        assert result.unwrap_err() is error
        with pytest.raises(ResultError, match="parallelism"):
            result.unwrap()

    def test_surface_is_minimal(self) -> None:
        """Only the accessors the loaders use are offered."""
        for name in ("map", "and_then", "unwrap_or"):
            assert not hasattr(Ok, name)
            assert not hasattr(Err, name)
