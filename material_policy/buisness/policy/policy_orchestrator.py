"""
PolicyOrchestrator - Domain facade for stocking policy on one warehouse stock record

recommend() is a pure read. The apply_* operations run inside run_transaction,
recompute from freshly read state, write the stock record and append an audit
entry in the same commit.
"""

from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional

from material_policy.buisness.materials.errors import RecordNotFound, ValidationError
from material_policy.buisness.materials.narrator import MaterialNarrator
from material_policy.buisness.policy.capital_impact import capital_impact
from material_policy.buisness.policy.classification import (
    ClassificationEngine,
    ClassificationResult,
    CriticalityInputs,
)
from material_policy.buisness.policy.demand_statistics import DemandStatistics, DemandStats, window_start
from material_policy.buisness.policy.price_resolver import ResolvedPrice, UnitPriceResolver
from material_policy.buisness.policy.replenishment import (
    PolicyUnavailable,
    ReplenishmentCalculator,
    ReplenishmentResult,
    canonical_min_stock,
)
from material_policy.buisness.policy.settings import CriticalitySettingsProvider
from material_policy.data.core.transaction import run_transaction
from material_policy.data.materials.audit_log import AuditLogEntry
from material_policy.data.materials.material_movement import MaterialMovement
from material_policy.data.materials.warehouse_stock import WarehouseStockRecord
from material_policy.logger import get_logger

logger = get_logger("material_policy.buisness.policy")

MISSING_CRITICALITY_CLASS = 'criticality_class'

DETERMINATION_CRITICALITY = 'Criticality'
DETERMINATION_MANUAL = 'Manual'

LEVEL_FIELDS = ('min_stock_level', 'max_stock_level', 'reorder_point_qty', 'safety_stock_qty')


@dataclass(frozen=True)
class PolicyRecommendation:
    material_id: int
    warehouse_id: str
    classification: Optional[ClassificationResult]
    classification_missing: Optional[str]
    demand: DemandStats
    annual_usage: Optional[float]
    annual_usage_source: str
    lead_time_days: int
    unit_price: ResolvedPrice
    replenishment: ReplenishmentResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            'material_id': self.material_id,
            'warehouse_id': self.warehouse_id,
            'classification': self.classification.to_dict() if self.classification else None,
            'classification_missing': self.classification_missing,
            'demand': self.demand.to_dict(),
            'annual_usage': self.annual_usage,
            'annual_usage_source': self.annual_usage_source,
            'lead_time_days': self.lead_time_days,
            'unit_price': self.unit_price.price,
            'unit_price_source': self.unit_price.source,
            'replenishment': self.replenishment.to_dict(),
        }


@dataclass(frozen=True)
class AppliedLevels:
    """Outcome of a stocking level write"""
    material_id: int
    warehouse_id: str
    levels: Dict[str, Any]
    previous_levels: Dict[str, Any]
    capital_impact: float
    changed: bool
    recommendation: Optional[PolicyRecommendation] = None
    unavailable: Optional[PolicyUnavailable] = None

    @property
    def applied(self):
        return self.unavailable is None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'applied': self.applied,
            'material_id': self.material_id,
            'warehouse_id': self.warehouse_id,
            'levels': self.levels,
            'previous_levels': self.previous_levels,
            'capital_impact': self.capital_impact,
            'changed': self.changed,
        }
        if self.unavailable is not None:
            result['unavailable'] = self.unavailable.to_dict()
        if self.recommendation is not None:
            result['recommendation'] = self.recommendation.to_dict()
        return result


def _levels(stock) -> Dict[str, Any]:
    return {key: getattr(stock, key) for key in LEVEL_FIELDS}


def _load_stock(material_id, warehouse_id) -> WarehouseStockRecord:
    stock = WarehouseStockRecord.find_for(material_id, warehouse_id)
    if stock is None:
        raise RecordNotFound(f"Material {material_id} is not extended to warehouse {warehouse_id}")
    return stock


def _non_negative(value, name):
    if value is None or isinstance(value, bool):
        raise ValidationError(f"{name} is required")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if number < 0:
        raise ValidationError(f"{name} cannot be negative")
    return number


class PolicyOrchestrator:
    """Feeds classification, demand statistics and replenishment back into stock records"""

    @staticmethod
    def _recommend_for(stock, as_of=None, unit_price=None, annual_usage=None, target_days_supply=None):
        settings = CriticalitySettingsProvider.get()
        price = UnitPriceResolver.resolve(stock, override=unit_price)

        classification = None
        classification_missing = None
        try:
            inputs = CriticalityInputs.from_stock_record(stock)
            classification = ClassificationEngine.classify(inputs, price.price, settings)
        except ValidationError as e:
            classification_missing = str(e)

        history = MaterialMovement.issues_since(stock.material_id, window_start(as_of), stock.warehouse_id)
        demand = DemandStatistics.compute(history, as_of=as_of)

        if annual_usage is not None:
            usage, usage_source = annual_usage, 'override'
        elif stock.annual_usage_quantity:
            usage, usage_source = stock.annual_usage_quantity, 'stock_record'
        else:
            usage, usage_source = demand.estimated_annual_usage, 'consumption_history'

        criticality_class = classification.criticality_class if classification else stock.criticality_class
        lead_time = stock.total_lead_time_days
        if not criticality_class:
            replenishment = PolicyUnavailable(
                MISSING_CRITICALITY_CLASS,
                "Criticality class is required; capture the criticality assessment first",
            )
        else:
            replenishment = ReplenishmentCalculator.calculate(
                criticality_class,
                usage,
                lead_time,
                cv=demand.cv,
                target_days_override=target_days_supply or stock.target_days_supply,
            )

        return PolicyRecommendation(
            material_id=stock.material_id,
            warehouse_id=stock.warehouse_id,
            classification=classification,
            classification_missing=classification_missing,
            demand=demand,
            annual_usage=usage,
            annual_usage_source=usage_source,
            lead_time_days=lead_time,
            unit_price=price,
            replenishment=replenishment,
        )

    @classmethod
    def recommend(
        cls,
        material_id: int,
        warehouse_id: str,
        as_of: Optional[date] = None,
        unit_price: Optional[float] = None,
        annual_usage: Optional[float] = None,
        target_days_supply: Optional[int] = None,
    ) -> PolicyRecommendation:
        """
        Classification, demand statistics and a replenishment recommendation.
        Nothing is written.

        Raises:
            RecordNotFound: If the material is not extended to the warehouse
        """
        stock = _load_stock(material_id, warehouse_id)
        return cls._recommend_for(stock, as_of, unit_price, annual_usage, target_days_supply)

    @classmethod
    def apply_classification(
        cls,
        material_id: int,
        warehouse_id: str,
        inputs: CriticalityInputs,
        actor: str,
        unit_price: Optional[float] = None,
    ) -> ClassificationResult:
        """
        Store criticality inputs and the resulting score, class, cost class and
        service level target.
        """
        if not isinstance(inputs, CriticalityInputs):
            inputs = CriticalityInputs.from_mapping(inputs)

        def unit():
            stock = _load_stock(material_id, warehouse_id)
            settings = CriticalitySettingsProvider.get()
            price = UnitPriceResolver.resolve(stock, override=unit_price)
            result = ClassificationEngine.classify(inputs, price.price, settings)

            for column, value in inputs.as_columns().items():
                setattr(stock, column, value)
            stock.criticality_score = result.score
            stock.criticality_class = result.criticality_class
            stock.cost_class = result.cost_class
            stock.service_level_target = result.service_level_target
            if price.price > 0:
                stock.standard_price = price.price
            stock.updated_by = actor

            AuditLogEntry.append(
                'Classification', actor,
                MaterialNarrator.classification_applied(
                    result.score, result.criticality_class, result.cost_class, result.service_level_target
                ),
                material_id=material_id, warehouse_id=warehouse_id, action='classification_applied',
            )
            return result

        result = run_transaction(unit, description=f"classify material {material_id} at {warehouse_id}")
        logger.info(
            f"Material {material_id} at {warehouse_id} classified {result.criticality_class}"
            f"{result.cost_class} (score {result.score}) by {actor}"
        )
        return result

    @classmethod
    def apply_recommendation(
        cls,
        material_id: int,
        warehouse_id: str,
        actor: str,
        annual_usage: Optional[float] = None,
        target_days_supply: Optional[int] = None,
    ) -> AppliedLevels:
        """
        Recompute the recommendation from current state and write it.

        When the recommendation is unavailable nothing is written and the
        result carries the PolicyUnavailable outcome.
        """
        def unit():
            stock = _load_stock(material_id, warehouse_id)
            recommendation = cls._recommend_for(
                stock, annual_usage=annual_usage, target_days_supply=target_days_supply
            )
            previous = _levels(stock)
            params = recommendation.replenishment
            if isinstance(params, PolicyUnavailable):
                return AppliedLevels(
                    material_id=material_id, warehouse_id=warehouse_id, levels=previous,
                    previous_levels=previous, capital_impact=0.0, changed=False,
                    recommendation=recommendation, unavailable=params,
                )

            stock.safety_stock_qty = params.safety_stock
            stock.reorder_point_qty = params.reorder_point
            stock.min_stock_level = params.min_stock
            stock.max_stock_level = params.max_stock
            stock.annual_usage_quantity = recommendation.annual_usage
            # Only a caller override is stored; the class default stays derived
            if target_days_supply:
                stock.target_days_supply = target_days_supply
            stock.stock_level_determination = DETERMINATION_CRITICALITY
            if recommendation.classification:
                stock.criticality_score = recommendation.classification.score
                stock.criticality_class = recommendation.classification.criticality_class
                stock.cost_class = recommendation.classification.cost_class
                stock.service_level_target = recommendation.classification.service_level_target
            stock.updated_by = actor

            levels = _levels(stock)
            changed = levels != previous
            impact = capital_impact(previous, levels, recommendation.unit_price.price)
            if changed:
                AuditLogEntry.append(
                    'Criticality', actor, MaterialNarrator.levels_changed(previous, levels, DETERMINATION_CRITICALITY),
                    material_id=material_id, warehouse_id=warehouse_id, action='levels_applied',
                    capital_impact=impact,
                )
            return AppliedLevels(
                material_id=material_id, warehouse_id=warehouse_id, levels=levels,
                previous_levels=previous, capital_impact=impact, changed=changed,
                recommendation=recommendation,
            )

        result = run_transaction(unit, description=f"apply recommendation to material {material_id} at {warehouse_id}")
        if result.applied:
            logger.info(
                f"Criticality levels applied to material {material_id} at {warehouse_id} by {actor}; "
                f"capital impact {result.capital_impact:.2f}"
            )
        else:
            logger.info(
                f"Recommendation for material {material_id} at {warehouse_id} unavailable: "
                f"missing {result.unavailable.missing}"
            )
        return result

    @classmethod
    def apply_manual_parameters(
        cls,
        material_id: int,
        warehouse_id: str,
        actor: str,
        reorder_point,
        safety_stock,
        max_stock,
    ) -> AppliedLevels:
        """
        Manual entry of reorder point, safety stock and max.

        Min is derived the same way as in the criticality path.

        Raises:
            ValidationError: If a level is missing or negative, or max is below the reorder point
        """
        reorder_point = _non_negative(reorder_point, 'reorder_point')
        safety_stock = _non_negative(safety_stock, 'safety_stock')
        max_stock = _non_negative(max_stock, 'max_stock')
        if max_stock < reorder_point:
            raise ValidationError("max_stock cannot be below reorder_point")

        def unit():
            stock = _load_stock(material_id, warehouse_id)
            previous = _levels(stock)

            stock.reorder_point_qty = reorder_point
            stock.safety_stock_qty = safety_stock
            stock.max_stock_level = max_stock
            stock.min_stock_level = canonical_min_stock(safety_stock)
            stock.stock_level_determination = DETERMINATION_MANUAL
            stock.updated_by = actor

            levels = _levels(stock)
            changed = levels != previous
            impact = 0.0
            if changed:
                price = UnitPriceResolver.resolve(stock)
                impact = capital_impact(previous, levels, price.price)
                AuditLogEntry.append(
                    'Manual', actor, MaterialNarrator.levels_changed(previous, levels, DETERMINATION_MANUAL),
                    material_id=material_id, warehouse_id=warehouse_id, action='levels_applied',
                    capital_impact=impact,
                )
            return AppliedLevels(
                material_id=material_id, warehouse_id=warehouse_id, levels=levels,
                previous_levels=previous, capital_impact=impact, changed=changed,
            )

        result = run_transaction(unit, description=f"manual levels for material {material_id} at {warehouse_id}")
        logger.info(f"Manual levels applied to material {material_id} at {warehouse_id} by {actor}")
        return result
