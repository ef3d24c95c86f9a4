"""
Connection rules for the canvas.

Workflows flow strictly left to right. A proposed edge is checked against the
current graph snapshot; the graph itself is never modified here.
"""
from typing import Optional

from .models import Connection, ConnectionCheck

VALID_SOURCE_HANDLES = ("output", "yes", "no")
VALID_TARGET_HANDLES = ("input",)

# Minimum horizontal gap between two connected nodes
COLUMN_BUFFER = 50
# Vertical distance within which a node counts as being on the source's row
ROW_BAND = 200

START_FAN_OUT = "Start node can only connect to one condition node"
START_TARGET = "Start node can only connect to condition nodes"
SKIP_OVER = "Cannot skip over intermediate nodes"


def _find(graph, node_id: str):
    return next((n for n in graph.nodes if n.id == node_id), None)


def _reject(reason: Optional[str] = None) -> ConnectionCheck:
    return ConnectionCheck(valid=False, reason=reason)


def check_connection(graph, connection: Connection) -> ConnectionCheck:
    """
    Check a proposed edge against `graph` (anything with `nodes` and `edges`).
    The first failing rule decides the outcome.
    """
    source_handle = connection.source_handle
    target_handle = connection.target_handle
    if source_handle and source_handle not in VALID_SOURCE_HANDLES:
        return _reject()
    if target_handle and target_handle not in VALID_TARGET_HANDLES:
        return _reject()

    source = _find(graph, connection.source)
    target = _find(graph, connection.target)
    if source is None or target is None:
        return _reject()

    if source.type == "start":
        # Re-drawing the existing start edge is fine, a second target is not.
        if any(e.source == source.id and e.target != target.id for e in graph.edges):
            return _reject(START_FAN_OUT)
        if target.type != "condition":
            return _reject(START_TARGET)

    source_x, source_y = source.position.x, source.position.y
    target_x = target.position.x
    if target_x <= source_x + COLUMN_BUFFER:
        return _reject()

    for node in graph.nodes:
        if node.id in (source.id, target.id):
            continue
        between = source_x + COLUMN_BUFFER < node.position.x < target_x - COLUMN_BUFFER
        same_row = abs(node.position.y - source_y) < ROW_BAND
        if between and same_row:
            return _reject(SKIP_OVER)

    return ConnectionCheck(valid=True)


def is_valid_connection(graph, connection: Connection) -> bool:
    return check_connection(graph, connection).valid
