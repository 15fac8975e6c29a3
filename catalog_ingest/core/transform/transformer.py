"""
Row to item transformation.

Maps validated rows onto catalog upsert requests and infers each item's
role from the presence of an option key.
"""

from collections.abc import Iterable

from catalog_ingest.core.models import ItemRole, ItemUpsertRequest, Row


class ItemTransformer:
    """
    Pure transformation of rows into ItemUpsertRequests.

    Rules:
    - title -> name, details -> description
    - federated_id is the option key when present, otherwise the family key
    - roles is {option} when an option key is present, otherwise {family}
    """

    def transform(self, row: Row) -> ItemUpsertRequest:
        if row.option_key:
            federated_id = row.option_key
            role = ItemRole.OPTION
        else:
            federated_id = row.family_key
            role = ItemRole.FAMILY

        return ItemUpsertRequest(
            name=row.title,
            description=row.details,
            federated_id=federated_id,
            roles=frozenset({role}),
        )

    def transform_all(self, rows: Iterable[Row]) -> list[ItemUpsertRequest]:
        """Transform rows, preserving their order."""
        return [self.transform(row) for row in rows]
