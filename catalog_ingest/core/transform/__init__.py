"""
Synchronous transformation stages: rows -> items -> items with families.
"""

from .family_resolver import FamilyResolver, synthesize_family, unique_by_federated_id
from .transformer import ItemTransformer

__all__ = ["FamilyResolver", "ItemTransformer", "synthesize_family", "unique_by_federated_id"]
