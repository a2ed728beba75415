"""Working capital effect of changing stocking levels"""


def average_inventory(safety_stock, max_stock, reorder_point):
    """Safety stock plus half the replenishment cycle stock"""
    safety = safety_stock or 0
    cycle = max(0, (max_stock or 0) - (reorder_point or 0))
    return safety + cycle / 2


def capital_impact(old_levels, new_levels, unit_price):
    """
    (new average inventory - old average inventory) x unit price

    Args:
        old_levels, new_levels: dicts with safety_stock_qty, max_stock_level, reorder_point_qty
        unit_price: Price per unit used to value the difference
    """
    old_avg = average_inventory(
        old_levels.get('safety_stock_qty'), old_levels.get('max_stock_level'), old_levels.get('reorder_point_qty')
    )
    new_avg = average_inventory(
        new_levels.get('safety_stock_qty'), new_levels.get('max_stock_level'), new_levels.get('reorder_point_qty')
    )
    return (new_avg - old_avg) * (unit_price or 0)
