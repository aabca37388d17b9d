"""Tests for glrel.core.result."""

from __future__ import annotations

import pytest

from glrel.core.result import Err, Ok, Result, is_err, is_ok


def _parse_port(value: str) -> Result[int, str]:
    if not value.isdigit():
        return Err(f"not a number: {value}")
    return Ok(int(value))


class TestOk:
    def test_unwrap(self) -> None:
        assert Ok(3).unwrap() == 3

    def test_map(self) -> None:
        assert Ok(2).map(lambda v: v * 10) == Ok(20)

    def test_flags(self) -> None:
        assert Ok(None).is_ok()
        assert not Ok(None).is_err()


class TestErr:
    def test_unwrap_raises(self) -> None:
        with pytest.raises(ValueError, match="boom"):
            Err("boom").unwrap()

    def test_unwrap_or(self) -> None:
        assert Err("boom").unwrap_or(7) == 7

    def test_map_is_noop(self) -> None:
        err: Err[str] = Err("boom")
        assert err.map(lambda v: v) is err


def test_type_guards() -> None:
    ok = _parse_port("8080")
    bad = _parse_port("http")
    assert is_ok(ok) and ok.value == 8080
    assert is_err(bad) and bad.error == "not a number: http"


def test_match_statement() -> None:
    match _parse_port("22"):
        case Ok(value):
            assert value == 22
        case Err():
            pytest.fail("expected Ok")
