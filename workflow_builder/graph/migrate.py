"""
Load-boundary migration for stored workflows.

Older documents keep the graph under `actions`/`peers` and use camelCase keys
(`sourceHandle`, `fieldType`, `dataSource`, ...). They are rewritten once here,
so the rest of the package only ever sees the current shape.
"""
import re
from typing import Any, Dict, Mapping

_CAMEL = re.compile(r"(?<=[a-z0-9])([A-Z])")

_RENAMED_COLLECTIONS = {"actions": "nodes", "peers": "edges"}


def to_snake(key: str) -> str:
    return _CAMEL.sub(r"_\1", key).lower()


def _snake_keys(raw: Any) -> Any:
    # anything that isn't a mapping is left for schema validation to reject
    if not isinstance(raw, Mapping):
        return raw
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        new_key = to_snake(str(key))
        # when both spellings are present the current one wins
        if new_key in out and new_key != key:
            continue
        out[new_key] = value
    return out


def _migrate_node(raw: Any) -> Any:
    if not isinstance(raw, Mapping):
        return raw
    node = _snake_keys(raw)
    data = _snake_keys(node.get("data") or {})
    if isinstance(data, dict):
        if "config" in data:
            data["config"] = _snake_keys(data["config"])
        if isinstance(data.get("conditions"), list):
            data["conditions"] = [_snake_keys(c) for c in data["conditions"]]
        if not data.get("type") and node.get("type"):
            data["type"] = node["type"]
    node["data"] = data
    if isinstance(node.get("position"), Mapping):
        node["position"] = dict(node["position"])
    return node


def migrate_workflow(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a migrated copy of `raw`; the input is left untouched."""
    workflow = _snake_keys(raw)
    for old, new in _RENAMED_COLLECTIONS.items():
        if old in workflow:
            legacy = workflow.pop(old)
            workflow.setdefault(new, legacy)

    nodes = workflow.get("nodes") or []
    edges = workflow.get("edges") or []
    workflow["nodes"] = [_migrate_node(n) for n in nodes] if isinstance(nodes, list) else nodes
    workflow["edges"] = [_snake_keys(e) for e in edges] if isinstance(edges, list) else edges
    return workflow
