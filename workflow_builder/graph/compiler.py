""" Load workflows from YAML/JSON and compile their condition nodes into queries. """
from typing import Any, Dict, Optional

import structlog
import yaml

from ..query.assembler import QueryAssembler
from .migrate import migrate_workflow
from .schema import WorkflowSpec, validate_workflow

logger = structlog.stdlib.get_logger(__name__)


def load_workflow(text: str) -> WorkflowSpec:
    """
    Load a Workflow from a YAML (or JSON) string.
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ValueError(f"Workflow is not valid YAML: {e}")
    if not isinstance(data, dict):
        raise ValueError("Workflow document must be a mapping")

    workflow, _ = validate_workflow(migrate_workflow(data))
    _validate_graph(workflow)
    return workflow


def _validate_graph(workflow: WorkflowSpec) -> None:
    """
    Edge endpoint check, then cycle check on the DAG (Kahn)
    """
    node_ids = {node.id for node in workflow.nodes}
    indegree = {node.id: 0 for node in workflow.nodes}

    for edge in workflow.edges:
        if edge.source not in node_ids or edge.target not in node_ids:
            raise ValueError(f"Edge references unknown node: {edge.source} -> {edge.target}")
        indegree[edge.target] += 1

    adjacency = {node.id: [] for node in workflow.nodes}
    for edge in workflow.edges:
        adjacency[edge.source].append(edge.target)

    queue = [node_id for node_id, deg in indegree.items() if deg == 0]
    visited = 0
    while queue:
        current = queue.pop(0)
        visited += 1
        for neighbor in adjacency[current]:
            indegree[neighbor] -= 1
            if indegree[neighbor] == 0:
                queue.append(neighbor)

    if visited != len(workflow.nodes):
        raise ValueError("Cycle detected in Workflow DAG.")


def compile_workflow(workflow: WorkflowSpec, assembler: Optional[QueryAssembler] = None) -> Dict[str, Any]:
    """
    Serialize `workflow` for persistence, attaching the compiled query of each
    condition node under data.query.
    """
    assembler = assembler or QueryAssembler()
    payload = workflow.model_dump(mode="json")

    compiled = 0
    for node, node_payload in zip(workflow.nodes, payload["nodes"]):
        if node.type != "condition":
            continue
        node_payload["data"]["query"] = assembler.assemble(node.data.conditions)
        compiled += 1

    logger.info(
        "workflow_compiled",
        workflow_id=workflow.id,
        node_count=len(workflow.nodes),
        edge_count=len(workflow.edges),
        query_count=compiled,
    )
    return payload
