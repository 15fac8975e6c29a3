"""
Family integrity resolution.

Every option must have a parent family in the catalog. Families that are
referenced by option rows but never declared by a family row of their own
are synthesized and appended to the item list.
"""

from collections.abc import Sequence

from catalog_ingest.core.models import ItemRole, ItemUpsertRequest, Row
from catalog_ingest.observability.logger import get_logger

logger = get_logger(__name__)


def synthesize_family(federated_id: str) -> ItemUpsertRequest:
    return ItemUpsertRequest(
        name=f"Family {federated_id}",
        description=f"Auto-generated family for {federated_id}",
        federated_id=federated_id,
        roles=frozenset({ItemRole.FAMILY}),
    )


class FamilyResolver:
    """
    Backfills missing family records.

    The returned items are unique by federated id: repeated items (family or
    option) collapse to their first occurrence, so no id is split across
    chunks.
    """

    def ensure_families_exist(
        self,
        items: Sequence[ItemUpsertRequest],
        rows: Sequence[Row],
    ) -> list[ItemUpsertRequest]:
        """
        Return items extended with synthesized families.

        An id already present among the items (for instance a family that
        a previous call synthesized) is never synthesized again, so running
        the resolver over its own output adds nothing.

        Args:
            items: Transformed items, in row order
            rows: The rows the items were produced from

        Returns:
            The items unique by federated id (first occurrence kept, in
            order) followed by one synthesized family per
            referenced-but-undeclared family key, in first-seen order
        """
        result = unique_by_federated_id(items)

        declared = {row.family_key for row in rows if not row.is_option}
        declared.update(item.federated_id for item in result)

        # dict keeps first-seen order
        missing: dict[str, None] = {}
        for row in rows:
            if row.is_option and row.family_key not in declared:
                missing.setdefault(row.family_key, None)

        synthesized = [synthesize_family(family_id) for family_id in missing]

        if synthesized:
            logger.info(
                f"Synthesized {len(synthesized)} missing families",
                extra={"family_ids": list(missing)},
            )

        return result + synthesized


def unique_by_federated_id(items: Sequence[ItemUpsertRequest]) -> list[ItemUpsertRequest]:
    """Keep the first item per federated id, preserving order."""
    first: dict[str, ItemUpsertRequest] = {}
    for item in items:
        first.setdefault(item.federated_id, item)
    if len(first) < len(items):
        logger.warning(
            f"Dropped {len(items) - len(first)} items with repeated federated ids",
            extra={"dropped": len(items) - len(first)},
        )
    return list(first.values())
