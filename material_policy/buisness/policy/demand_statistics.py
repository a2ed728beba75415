"""
DemandStatistics

Buckets ISSUE quantities into the 12 calendar months ending at the current
month and summarises them. Empty or all-zero history is a valid result
(mean 0, CV 0), never an error.
"""

import statistics
from dataclasses import dataclass
from datetime import date, datetime
from typing import Iterable, List, Optional, Tuple

WINDOW_MONTHS = 12
ISSUE = 'ISSUE'


@dataclass(frozen=True)
class DemandStats:
    months: Tuple[str, ...]
    buckets: Tuple[float, ...]
    monthly_mean: float
    std_dev: float
    cv: float

    @property
    def estimated_annual_usage(self) -> int:
        """Annual usage auto-fill; 0 means there is not enough history"""
        return int(round(self.monthly_mean * WINDOW_MONTHS))

    def to_dict(self):
        return {
            'months': list(self.months),
            'buckets': list(self.buckets),
            'monthly_mean': self.monthly_mean,
            'std_dev': self.std_dev,
            'cv': self.cv,
            'estimated_annual_usage': self.estimated_annual_usage,
        }


def month_keys(as_of: Optional[date] = None) -> List[str]:
    """'YYYY-MM' keys for the 12 months ending at as_of's month, oldest first"""
    as_of = as_of or datetime.utcnow().date()
    year, month = as_of.year, as_of.month
    keys = []
    for _ in range(WINDOW_MONTHS):
        keys.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return list(reversed(keys))


def window_start(as_of: Optional[date] = None) -> datetime:
    """First instant of the oldest month in the window"""
    first_key = month_keys(as_of)[0]
    year, month = first_key.split('-')
    return datetime(int(year), int(month), 1)


class DemandStatistics:

    @staticmethod
    def compute(events: Iterable, as_of: Optional[date] = None) -> DemandStats:
        """
        Args:
            events: ConsumptionEvent-like objects (movement_type, quantity, movement_date)
            as_of: Date whose month closes the window (default today)
        """
        keys = month_keys(as_of)
        totals = dict.fromkeys(keys, 0.0)
        for event in events:
            if event.movement_type != ISSUE or event.movement_date is None:
                continue
            key = f"{event.movement_date.year:04d}-{event.movement_date.month:02d}"
            if key in totals:
                totals[key] += event.quantity or 0.0

        buckets = tuple(totals[key] for key in keys)
        mean = statistics.fmean(buckets)
        std_dev = statistics.pstdev(buckets)
        cv = std_dev / mean if mean > 0 else 0.0
        return DemandStats(
            months=tuple(keys),
            buckets=buckets,
            monthly_mean=mean,
            std_dev=std_dev,
            cv=cv,
        )
