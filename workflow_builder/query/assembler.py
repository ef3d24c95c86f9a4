"""
Query assembler: turns the ordered condition list of a condition node into the
nested query document consumed by the data store.

Contacts-level conditions become the base WHERE. Conditions on other
collections are promoted to aggregates: a HAVING clause on the contacts
document plus a join entry describing how the aggregate is pulled in.
"""
from typing import Any, Dict, List, Optional, Sequence

import structlog

from ..config import get_settings
from .classifier import FieldClassifier, default_classifier
from .operators import compile_clauses, compile_operator

logger = structlog.stdlib.get_logger(__name__)

QueryDocument = Dict[str, Any]

JOIN_ON_USER = "user_id:user_id"
# Not taken from the condition yet, the expiring-points subquery always uses it.
EXPIRING_POINTS_THRESHOLD = 1000

_ROUTES = ("contacts", "orders", "point_histories")


class _Parts:
    """ Clause lists collected while walking the conditions. """

    def __init__(self):
        self.contacts: List[Dict[str, Any]] = []
        self.having: List[Dict[str, Any]] = []
        self.joins: Dict[str, Dict[str, Any]] = {}
        self.needs_aggregation = False

    def register_join(self, name: str, entry: Dict[str, Any]) -> None:
        if name in self.joins:
            logger.debug("join_entry_kept", collection=name)
            return
        self.joins[name] = entry


class QueryAssembler:
    """
    Compiles Condition[] into a QueryDocument.

    Stateless between calls: every call builds new clause objects and never
    touches the conditions it is given.
    """

    def __init__(self, classifier: Optional[FieldClassifier] = None, merchant_id: Optional[str] = None):
        self.classifier = classifier or default_classifier
        self.merchant_id = merchant_id or get_settings().default_merchant_id

    def assemble(self, conditions: Optional[Sequence[Any]]) -> QueryDocument:
        if not conditions:
            return {"contacts": {"select": ["user_id"], "where": self._merchant_clause()}}

        parts = _Parts()
        for condition in conditions:
            route = self._route(condition)
            if route == "contacts":
                parts.contacts.extend(compile_clauses(condition.field, condition))
            elif route == "orders":
                self._add_order_aggregate(parts, condition)
            elif route == "point_histories":
                self._add_point_history(parts, condition)
            else:
                logger.warning(
                    "condition_not_routed",
                    condition_id=condition.id,
                    field=condition.field,
                    collection=condition.collection,
                )

        parts.contacts.append(self._merchant_clause())

        contacts: Dict[str, Any] = {"select": ["user_id"]}
        contacts["where"] = self._build_where(parts, conditions)
        if parts.needs_aggregation:
            contacts["group_by"] = ["user_id"]
        if parts.having:
            contacts["having"] = parts.having[0] if len(parts.having) == 1 else {"and": parts.having}
        for name, entry in parts.joins.items():
            contacts[name] = entry

        document = {"contacts": contacts}
        logger.debug("query_assembled", condition_count=len(conditions), query=document)
        return document

    def _route(self, condition) -> Optional[str]:
        resolved = self.classifier.resolve(condition)
        for name in _ROUTES:
            if resolved == name or self.classifier.owns(name, condition.field):
                return name
        return None

    def _merchant_clause(self) -> Dict[str, Any]:
        return {"merchant_id": self.merchant_id}

    def _add_order_aggregate(self, parts: _Parts, condition) -> None:
        field = condition.field
        parts.needs_aggregation = True
        parts.having.append(compile_operator(f"SUM(orders.{field})", condition.operator, condition.value, condition))
        parts.register_join("orders", {
            "select": [f"SUM({field}) as {field}"],
            "join": JOIN_ON_USER,
        })

    def _add_point_history(self, parts: _Parts, condition) -> None:
        field = condition.field
        if field == "expire_date":
            clause = compile_operator(field, condition.operator, condition.value, condition)
            parts.register_join("point_histories", {
                "select": ["SUM(point_histories.point) as expiring_points"],
                "where": {"and": [clause]},
                "group_by": ["user_id"],
                "having": {"sum": {">": EXPIRING_POINTS_THRESHOLD}},
                "join": JOIN_ON_USER,
            })
            return

        aggregate = f"SUM(point_histories.{field})"
        parts.needs_aggregation = True
        parts.having.append(compile_operator(aggregate, condition.operator, condition.value, condition))
        parts.register_join("point_histories", {
            "select": [f"{aggregate} as {field}s"],
            "join": JOIN_ON_USER,
        })

    def _build_where(self, parts: _Parts, conditions: Sequence[Any]) -> Dict[str, Any]:
        clauses = parts.contacts
        if len(clauses) == 1:
            return clauses[0]
        if len(clauses) == 2 and self._is_flat_merge_shape(parts, conditions):
            merged: Dict[str, Any] = {}
            for clause in clauses:
                merged.update(clause)
            return merged
        return {"and": clauses}

    @staticmethod
    def _is_flat_merge_shape(parts: _Parts, conditions: Sequence[Any]) -> bool:
        # A gender filter next to the expiring-points join is emitted as flat keys.
        has_gender = any(c.field == "gender" for c in conditions)
        return has_gender and "point_histories" in parts.joins


def assemble(conditions: Optional[Sequence[Any]], *, classifier: Optional[FieldClassifier] = None,
             merchant_id: Optional[str] = None) -> QueryDocument:
    """Compile conditions with a one-off assembler."""
    return QueryAssembler(classifier=classifier, merchant_id=merchant_id).assemble(conditions)
