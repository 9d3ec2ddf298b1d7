from __future__ import annotations

import logging
from typing import Any

import pytest

from trackr.common import logging as trackr_logging


def test_configure_logging_passes_level_and_force(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(trackr_logging.logging, "basicConfig", lambda **kw: calls.append(kw))

    trackr_logging.configure_logging(level=logging.DEBUG, force=True)

    [call] = calls
    assert call["level"] == logging.DEBUG
    assert call["force"] is True
    assert "%(name)s" in call["format"]
