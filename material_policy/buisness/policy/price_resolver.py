"""
UnitPriceResolver

Unit price used for cost classification and capital impact:
explicit override, else an active vendor agreement, else the standard price, else 0.
"""

from dataclasses import dataclass

from material_policy.data.materials.vendor_agreement import VendorAgreement

SOURCE_OVERRIDE = 'override'
SOURCE_AGREEMENT = 'vendor_agreement'
SOURCE_STANDARD = 'standard_price'
SOURCE_NONE = 'none'


@dataclass(frozen=True)
class ResolvedPrice:
    price: float
    source: str


class UnitPriceResolver:

    @staticmethod
    def resolve(stock, override=None) -> ResolvedPrice:
        if override is not None and override > 0:
            return ResolvedPrice(float(override), SOURCE_OVERRIDE)

        agreement = VendorAgreement.active_for(stock.material_id, stock.warehouse_id)
        if agreement is not None and agreement.price and agreement.price > 0:
            return ResolvedPrice(float(agreement.price), SOURCE_AGREEMENT)

        if stock.standard_price and stock.standard_price > 0:
            return ResolvedPrice(float(stock.standard_price), SOURCE_STANDARD)

        return ResolvedPrice(0.0, SOURCE_NONE)
