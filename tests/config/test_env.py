from __future__ import annotations

import pytest

from trackr.config import ConfigurationError, env_bool, env_float, env_int


@pytest.mark.parametrize(("raw", "expected"), [(None, 7), ("", 7), (" 12 ", 12)])
def test_env_int_defaults_and_parses(
    monkeypatch: pytest.MonkeyPatch, raw: str | None, expected: int
) -> None:
    if raw is None:
        monkeypatch.delenv("TRACKR_TEST_INT", raising=False)
    else:
        monkeypatch.setenv("TRACKR_TEST_INT", raw)

    assert env_int("TRACKR_TEST_INT", 7) == expected


@pytest.mark.parametrize("raw", ["seven", "0"])
def test_env_int_rejects_bad_values(monkeypatch: pytest.MonkeyPatch, raw: str) -> None:
    monkeypatch.setenv("TRACKR_TEST_INT", raw)

    with pytest.raises(ConfigurationError, match="TRACKR_TEST_INT"):
        env_int("TRACKR_TEST_INT", 7, minimum=1)


def test_env_float_enforces_bounds(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACKR_TEST_FLOAT", "0.5")
    assert env_float("TRACKR_TEST_FLOAT", 0.7, minimum=0.0, maximum=1.0) == pytest.approx(0.5)

    monkeypatch.setenv("TRACKR_TEST_FLOAT", "1.5")
    with pytest.raises(ConfigurationError, match="<= 1.0"):
        env_float("TRACKR_TEST_FLOAT", 0.7, minimum=0.0, maximum=1.0)

    monkeypatch.setenv("TRACKR_TEST_FLOAT", "lots")
    with pytest.raises(ConfigurationError, match="must be a number"):
        env_float("TRACKR_TEST_FLOAT", 0.7)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, False), ("", False), ("1", True), (" Yes ", True), ("off", False)],
)
def test_env_bool_accepts_common_flags(
    monkeypatch: pytest.MonkeyPatch, raw: str | None, expected: bool
) -> None:
    if raw is None:
        monkeypatch.delenv("TRACKR_TEST_FLAG", raising=False)
    else:
        monkeypatch.setenv("TRACKR_TEST_FLAG", raw)

    assert env_bool("TRACKR_TEST_FLAG", default=False) is expected


def test_env_bool_rejects_unknown_words(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TRACKR_TEST_FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="boolean flag"):
        env_bool("TRACKR_TEST_FLAG", default=True)
