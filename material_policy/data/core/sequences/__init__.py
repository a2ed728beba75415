"""
Sequence managers
Keyed counters used to issue human-readable identifiers
"""

from material_policy.data.core.sequences.material_counter import MaterialTypeCounter, format_material_code

__all__ = [
    'MaterialTypeCounter',
    'format_material_code',
]
