""" Workflow-level structural checks run before saving. """
from typing import List, Sequence

from ..conditions.models import EMPTY_OPERATORS
from .models import ValidationIssue


def validate_workflow_structure(graph) -> List[ValidationIssue]:
    """
    Collect structural problems of `graph` (anything with `nodes` and `edges`).

    Errors block saving, warnings are advisory (e.g. orphaned nodes).
    """
    issues: List[ValidationIssue] = []
    nodes, edges = graph.nodes, graph.edges

    start_nodes = [n for n in nodes if n.type == "start"]
    if not start_nodes:
        issues.append(ValidationIssue("Workflow must have a start node", "error"))
    elif len(start_nodes) > 1:
        issues.append(ValidationIssue("Workflow should have only one start node", "warning"))

    for node in start_nodes:
        config = node.data.config
        if not config:
            issues.append(ValidationIssue(
                f'Start node "{node.data.label}" is missing configuration', "error", node_id=node.id))
        elif not config.get("data_source"):
            issues.append(ValidationIssue(
                f'Start node "{node.data.label}" must specify a data source', "error", node_id=node.id))

    for node in nodes:
        label = node.data.label
        if node.type != "start" and not any(e.target == node.id for e in edges):
            issues.append(ValidationIssue(
                f'Node "{label}" has no incoming connections', "warning", node_id=node.id))

        if node.type == "condition":
            issues.extend(_condition_node_issues(node, edges))

    return issues


def _condition_node_issues(node, edges: Sequence) -> List[ValidationIssue]:
    issues: List[ValidationIssue] = []
    label = node.data.label
    handles = {e.source_handle for e in edges if e.source == node.id}

    if "yes" not in handles:
        issues.append(ValidationIssue(
            f'Condition node "{label}" must have a Yes branch connected', "error", node_id=node.id))
    if "no" not in handles:
        issues.append(ValidationIssue(
            f'Condition node "{label}" has no No branch connected', "warning", node_id=node.id))

    conditions = node.data.conditions
    if not conditions:
        issues.append(ValidationIssue(
            f'Condition node "{label}" must have at least one condition', "error", node_id=node.id))

    for index, condition in enumerate(conditions, start=1):
        if not condition.data_source:
            issues.append(ValidationIssue(
                f'Condition {index} in "{label}" must specify a data source', "error", node_id=node.id))
        if not condition.field:
            issues.append(ValidationIssue(
                f'Condition {index} in "{label}" must specify a field', "error", node_id=node.id))
        if condition.operator not in EMPTY_OPERATORS and condition.value in (None, ""):
            issues.append(ValidationIssue(
                f'Condition {index} in "{label}" must specify a value for operator "{condition.operator}"',
                "error", node_id=node.id))

    return issues


def has_errors(issues: Sequence[ValidationIssue]) -> bool:
    return any(issue.severity == "error" for issue in issues)
