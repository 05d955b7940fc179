"""
Status and benchmark reports for periodic logging.

Components register render callbacks; the host renders the reports from its
periodic loops.
"""

import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from apphost.core.interfaces import IApplicationStats, StatsType
from apphost.utils.logging import setup_logging

logger = setup_logging(__name__)


@dataclass
class StatsRegistration:
    """A render callback and where it goes in the report."""
    render: Callable[[], str]
    stats_type: StatsType
    component_name: str
    priority: int = -1


class ApplicationStats(IApplicationStats):
    """Collects stats callbacks and renders them ordered by priority."""

    def __init__(self):
        self._registrations: list[StatsRegistration] = []
        self._lock = threading.RLock()

    def register_stats(
        self,
        render: Callable[[], str],
        stats_type: StatsType,
        component_name: str,
        priority: int = -1
    ) -> None:
        with self._lock:
            self._registrations.append(StatsRegistration(render, StatsType(stats_type), component_name, priority))
            logger.debug(f"Stats registered for {component_name} ({stats_type}, priority {priority})")

    def get_stats(self) -> str:
        lines = [f"======Application stats====== {datetime.now(timezone.utc):%Y-%m-%d %H:%M:%S}"]

        for registration in self._ordered(StatsType.INLINE):
            lines.append(self._render(registration))

        for registration in self._ordered(StatsType.COMPONENT):
            lines.append("")
            lines.append(self._render(registration))

        return "\n".join(line for line in lines if line is not None)

    def get_benchmark(self) -> str:
        lines = ["======Benchmark======"]
        for registration in self._ordered(StatsType.BENCHMARK):
            lines.append(self._render(registration))
        return "\n".join(lines)

    def _ordered(self, stats_type: StatsType) -> list[StatsRegistration]:
        with self._lock:
            selected = [r for r in self._registrations if r.stats_type == stats_type]
        return sorted(selected, key=lambda r: r.priority, reverse=True)

    @staticmethod
    def _render(registration: StatsRegistration) -> str:
        try:
            return registration.render().rstrip("\n")
        except Exception as e:
            logger.error(f"Error rendering stats of {registration.component_name}: {e}")
            return f"{registration.component_name}: stats unavailable ({e})"
