"""
ReplenishmentCalculator

Turns criticality class, annual usage, lead time and demand variability into
safety stock, reorder point, min and max. Computing a recommendation never
writes anything; see PolicyOrchestrator for applying one.

minStock is always the safety stock. The manual-entry path derives it the
same way through canonical_min_stock().
"""

import math
from dataclasses import dataclass
from typing import Optional, Union

DAYS_PER_YEAR = 365
CEIL_PRECISION = 6

# class -> (base safety factor, default target days supply)
CLASS_POLICY = {
    'A': (0.75, 90),
    'B': (0.50, 60),
    'C': (0.25, 30),
    'D': (0.10, 14),
}

MISSING_ANNUAL_USAGE = 'annual_usage'
MISSING_LEAD_TIME = 'lead_time'


def ceil_quantity(value: float) -> int:
    """ceil() after trimming binary float noise, so 100 x 0.55 stays 55"""
    return int(math.ceil(round(value, CEIL_PRECISION)))


def canonical_min_stock(safety_stock):
    return safety_stock


@dataclass(frozen=True)
class PolicyUnavailable:
    """Defined non-result: the recommendation cannot be computed without `missing`"""
    missing: str
    message: str

    available = False

    def to_dict(self):
        return {'available': False, 'missing': self.missing, 'message': self.message}


@dataclass(frozen=True)
class ReplenishmentParameters:
    criticality_class: str
    daily_usage: float
    lead_time_days: float
    lead_time_demand: float
    base_safety_factor: float
    variability_factor: float
    total_safety_factor: float
    target_days_supply: int
    safety_stock: int
    reorder_point: int
    min_stock: int
    max_stock: int

    available = True

    def to_dict(self):
        return {
            'available': True,
            'criticality_class': self.criticality_class,
            'daily_usage': self.daily_usage,
            'lead_time_days': self.lead_time_days,
            'lead_time_demand': self.lead_time_demand,
            'base_safety_factor': self.base_safety_factor,
            'variability_factor': self.variability_factor,
            'total_safety_factor': self.total_safety_factor,
            'target_days_supply': self.target_days_supply,
            'safety_stock': self.safety_stock,
            'reorder_point': self.reorder_point,
            'min_stock': self.min_stock,
            'max_stock': self.max_stock,
        }


ReplenishmentResult = Union[ReplenishmentParameters, PolicyUnavailable]


class ReplenishmentCalculator:

    @staticmethod
    def calculate(
        criticality_class: str,
        annual_usage: Optional[float],
        lead_time_days: Optional[float],
        cv: float = 0.0,
        target_days_override: Optional[int] = None,
    ) -> ReplenishmentResult:
        """
        Args:
            criticality_class: 'A' to 'D'; anything else is treated as 'D'
            annual_usage: Units consumed per year
            lead_time_days: Purchasing + delivery + goods receipt days
            cv: Coefficient of variation of monthly demand
            target_days_override: Replaces the class default when > 0

        Returns:
            ReplenishmentParameters, or PolicyUnavailable naming the missing input
        """
        if not annual_usage or annual_usage <= 0:
            return PolicyUnavailable(
                MISSING_ANNUAL_USAGE,
                "Annual usage is required to calculate stocking levels",
            )
        if not lead_time_days or lead_time_days <= 0:
            return PolicyUnavailable(
                MISSING_LEAD_TIME,
                "Lead time is required; set purchasing, delivery and goods receipt days",
            )

        base_safety_factor, default_days = CLASS_POLICY.get(criticality_class, CLASS_POLICY['D'])
        variability_factor = cv or 0.0
        total_safety_factor = base_safety_factor + variability_factor
        target_days = target_days_override if target_days_override and target_days_override > 0 else default_days

        daily_usage = annual_usage / DAYS_PER_YEAR
        lead_time_demand = daily_usage * lead_time_days

        safety_stock = ceil_quantity(lead_time_demand * total_safety_factor)
        reorder_point = ceil_quantity(lead_time_demand + safety_stock)
        max_stock = ceil_quantity(reorder_point + daily_usage * target_days)

        return ReplenishmentParameters(
            criticality_class=criticality_class if criticality_class in CLASS_POLICY else 'D',
            daily_usage=daily_usage,
            lead_time_days=lead_time_days,
            lead_time_demand=lead_time_demand,
            base_safety_factor=base_safety_factor,
            variability_factor=variability_factor,
            total_safety_factor=total_safety_factor,
            target_days_supply=target_days,
            safety_stock=safety_stock,
            reorder_point=reorder_point,
            min_stock=canonical_min_stock(safety_stock),
            max_stock=max_stock,
        )
