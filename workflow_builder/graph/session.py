""" Editing state for one workflow on the canvas. """
from dataclasses import dataclass, field
from typing import Any, List, Optional

import structlog
from pydantic import ValidationError

from .connections import check_connection
from .models import Connection, ValidationIssue
from .schema import EdgeSpec, NodeData, NodeSpec, WorkflowSpec
from .validation import has_errors, validate_workflow_structure

logger = structlog.stdlib.get_logger(__name__)

_BRANCH_LABELS = {"yes": "Yes", "no": "No"}


@dataclass
class WorkflowSession:
    """
    The nodes and edges being edited, plus the flags the editor reacts to.
    Handlers get the session passed in; there is no module-level store.
    """
    name: str = "Untitled workflow"
    workflow_id: Optional[str] = None
    nodes: List[NodeSpec] = field(default_factory=list)
    edges: List[EdgeSpec] = field(default_factory=list)
    is_dirty: bool = False
    validation_issues: List[ValidationIssue] = field(default_factory=list)
    message: Optional[str] = None

    @classmethod
    def from_workflow(cls, workflow: WorkflowSpec) -> "WorkflowSession":
        return cls(
            name=workflow.name,
            workflow_id=workflow.id,
            nodes=list(workflow.nodes),
            edges=list(workflow.edges),
        )

    def add_node(self, node: NodeSpec) -> bool:
        if any(n.id == node.id for n in self.nodes):
            logger.warning("duplicate_node_skipped", node_id=node.id)
            return False
        self.nodes.append(node)
        self.is_dirty = True
        return True

    def update_node(self, node_id: str, **data: Any) -> bool:
        """
        Merge `data` into the node's data (label, config, conditions, ...).
        The merged data is validated again, so bad conditions raise ValueError.
        """
        index = next((i for i, n in enumerate(self.nodes) if n.id == node_id), None)
        if index is None:
            return False
        node = self.nodes[index]
        try:
            new_data = NodeData.model_validate({**node.data.model_dump(), **data})
        except ValidationError as e:
            raise ValueError(f"Node validation error: {e}")
        self.nodes[index] = node.model_copy(update={"data": new_data})
        self.is_dirty = True
        return True

    def delete_node(self, node_id: str) -> bool:
        node = next((n for n in self.nodes if n.id == node_id), None)
        if node is None:
            return False
        if node.type == "start":
            logger.warning("start_node_not_deleted", node_id=node_id)
            return False
        self.nodes = [n for n in self.nodes if n.id != node_id]
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        self.is_dirty = True
        return True

    def connect(self, connection: Connection) -> Optional[EdgeSpec]:
        """
        Add an edge if the connection rules allow it. On rejection the
        user-facing reason (if any) is left in `message`.
        """
        check = check_connection(self, connection)
        if not check:
            self.message = check.reason
            logger.info(
                "connection_rejected",
                source=connection.source,
                target=connection.target,
                reason=check.reason,
            )
            return None

        self.message = None
        edge = EdgeSpec(
            id=self._edge_id(connection),
            source=connection.source,
            target=connection.target,
            source_handle=connection.source_handle or None,
            target_handle=connection.target_handle or None,
            label=_BRANCH_LABELS.get(connection.source_handle or ""),
            animated=True,
        )
        self.edges.append(edge)
        self.is_dirty = True
        return edge

    def _edge_id(self, connection: Connection) -> str:
        suffix = f"-{connection.source_handle}" if connection.source_handle else ""
        base = f"p{connection.source}-{connection.target}{suffix}"
        taken = {e.id for e in self.edges}
        candidate, counter = base, 1
        while candidate in taken:
            candidate = f"{base}-{counter}"
            counter += 1
        return candidate

    def update_edge(self, edge_id: str, **fields: Any) -> bool:
        index = next((i for i, e in enumerate(self.edges) if e.id == edge_id), None)
        if index is None:
            return False
        try:
            self.edges[index] = EdgeSpec.model_validate({**self.edges[index].model_dump(), **fields})
        except ValidationError as e:
            raise ValueError(f"Edge validation error: {e}")
        self.is_dirty = True
        return True

    def delete_edge(self, edge_id: str) -> bool:
        remaining = [e for e in self.edges if e.id != edge_id]
        if len(remaining) == len(self.edges):
            return False
        self.edges = remaining
        self.is_dirty = True
        return True

    def validate(self) -> bool:
        """Refresh validation_issues; True when nothing blocks saving."""
        self.validation_issues = validate_workflow_structure(self)
        return not has_errors(self.validation_issues)

    def to_workflow(self, **metadata) -> WorkflowSpec:
        return WorkflowSpec(
            id=self.workflow_id,
            name=self.name,
            nodes=list(self.nodes),
            edges=list(self.edges),
            **metadata,
        )
