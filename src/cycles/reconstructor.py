"""Rebuild cycles from raw period logs.

Cycles are never stored as ground truth.  Every time the period log set
changes the full cycle list is recomputed from scratch, because inserting or
deleting a single day can merge or split the neighbouring period blocks.

Algorithm:
1. Sort the logs by date (input order and duplicates do not matter)
2. Merge calendar-contiguous days (gap ≤ ``max_gap_days``) into period blocks
3. Each block opens one cycle; its length is the distance to the next block's
   start, and the most recent cycle stays open (length None)
"""

from __future__ import annotations

import logging
import statistics
from dataclasses import dataclass
from datetime import date
from typing import Iterable

from src.cycles.config_loader import CycleConfig, get_cycle_config
from src.cycles.models import (
    Cycle,
    PeriodLogEntry,
    ProfileAverages,
    days_between,
    round_half_up,
)

logger = logging.getLogger("bloom.cycles.reconstructor")


@dataclass
class PeriodBlock:
    """A maximal run of calendar-contiguous period days."""

    start_date: date
    end_date: date

    @property
    def period_length(self) -> int:
        return days_between(self.start_date, self.end_date) + 1


class CycleReconstructor:
    """Convert period logs into an ordered list of cycles.

    Usage::

        reconstructor = CycleReconstructor()
        cycles = reconstructor.reconstruct(period_logs)
        averages = reconstructor.profile_averages(cycles)
    """

    def __init__(self, config: CycleConfig | None = None) -> None:
        self._config = config or get_cycle_config()

    def period_blocks(self, period_logs: Iterable[PeriodLogEntry]) -> list[PeriodBlock]:
        """Group period logs into contiguous blocks, oldest first."""
        max_gap = self._config.max_gap_days
        blocks: list[PeriodBlock] = []
        current: PeriodBlock | None = None

        for day in sorted({log.date for log in period_logs}):
            if current is not None and days_between(current.end_date, day) <= max_gap:
                current.end_date = day
                continue
            current = PeriodBlock(start_date=day, end_date=day)
            blocks.append(current)

        return blocks

    def reconstruct(self, period_logs: Iterable[PeriodLogEntry]) -> list[Cycle]:
        """Reconstruct cycles from period logs.

        Args:
            period_logs: Period log entries in any order, duplicates allowed.

        Returns:
            Cycles ordered by start date ascending.  Only the last one is open.
        """
        blocks = self.period_blocks(period_logs)
        cycles: list[Cycle] = []
        for i, block in enumerate(blocks):
            next_block = blocks[i + 1] if i + 1 < len(blocks) else None
            cycles.append(
                Cycle(
                    start_date=block.start_date,
                    end_date=block.end_date,
                    length=(
                        days_between(block.start_date, next_block.start_date)
                        if next_block
                        else None
                    ),
                    period_length=block.period_length,
                )
            )

        logger.debug("Reconstructed %d cycles from %d period blocks", len(cycles), len(blocks))
        return cycles

    @staticmethod
    def profile_averages(cycles: Iterable[Cycle]) -> ProfileAverages:
        """Recompute the profile's average cycle and period lengths.

        Uses the arithmetic mean over every cycle with a known value, rounded
        to whole days.  A field stays ``None`` when there is nothing to average
        so callers keep the stored value.
        """
        cycles = list(cycles)
        cycle_lengths = [c.length for c in cycles if c.length is not None]
        period_lengths = [c.period_length for c in cycles if c.period_length is not None]

        return ProfileAverages(
            average_cycle_length=(
                round_half_up(statistics.mean(cycle_lengths)) if cycle_lengths else None
            ),
            average_period_length=(
                round_half_up(statistics.mean(period_lengths)) if period_lengths else None
            ),
        )


def reconstruct(
    period_logs: Iterable[PeriodLogEntry], config: CycleConfig | None = None
) -> list[Cycle]:
    """Functional shortcut for ``CycleReconstructor(config).reconstruct(...)``."""
    return CycleReconstructor(config).reconstruct(period_logs)
