""" Map condition fields to the collection that owns them. """
from typing import Dict, FrozenSet, Iterable, Mapping, Optional

# Checked in insertion order: the first table holding a field wins.
DEFAULT_FIELD_TABLES: Dict[str, FrozenSet[str]] = {
    "contacts": frozenset({
        "user_id", "first_name", "last_name", "email", "phone",
        "point_balance", "points_balance", "status", "created_date",
        "gender", "id_card", "id",
    }),
    "orders": frozenset({
        "net_amount", "grand_total", "order_date", "order_status",
        "quantity", "discount_amount", "id",
    }),
    "point_histories": frozenset({
        "point", "points", "transaction_date", "transaction_type",
        "expire_date", "expiring_points",
    }),
}

DEFAULT_COLLECTION = "contacts"


class FieldClassifier:
    """
    Resolves the owning collection of a field from fixed membership tables.

    Unknown fields are not an error: they fall through to the explicit
    collection, then to the default collection.
    """

    def __init__(self, tables: Optional[Mapping[str, Iterable[str]]] = None,
                 default_collection: str = DEFAULT_COLLECTION):
        source = DEFAULT_FIELD_TABLES if tables is None else tables
        self.tables: Dict[str, FrozenSet[str]] = {name: frozenset(fields) for name, fields in source.items()}
        self.default_collection = default_collection

    def owns(self, collection: str, field: str) -> bool:
        return field in self.tables.get(collection, ())

    def classify(self, field: str, collection: Optional[str] = None) -> str:
        for name, fields in self.tables.items():
            if field in fields:
                return name
        return collection or self.default_collection

    def resolve(self, condition) -> str:
        """ Explicit collection first, otherwise classify the field. """
        return condition.collection or self.classify(condition.field)


default_classifier = FieldClassifier()


def classify(field: str, collection: Optional[str] = None) -> str:
    return default_classifier.classify(field, collection)
