"""Injectable time source."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from trackr.domain.model import utc_now

type Clock = Callable[[], datetime]

system_clock: Clock = utc_now
