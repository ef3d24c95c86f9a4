"""Tests for workflow loading, migration and compilation."""

import copy
import json

import pytest
from workflow_builder.config import DEFAULT_MERCHANT_ID
from workflow_builder.graph.compiler import compile_workflow, load_workflow
from workflow_builder.graph.migrate import migrate_workflow, to_snake
from workflow_builder.query.assembler import QueryAssembler

POINTS_WORKFLOW = """
id: sample-7
name: Simple Points Milestone Notification
description: Send LINE notification when customer points exceed 1000
trigger_type: event-based
status: active

nodes:
  - id: start-7
    type: start
    position: { x: 100, y: 300 }
    data:
      label: Points Update Trigger
      config: { data_source: CRM, merchant_id: SHOP001 }

  - id: condition-7
    type: condition
    position: { x: 700, y: 300 }
    data:
      label: Points > 1000
      conditions:
        - id: cond-7
          data_source: CRM
          collection: contacts
          field: point_balance
          field_type: number
          operator: greater_than
          value: 1000

  - id: action-26
    type: action
    position: { x: 1300, y: 200 }
    data: { label: Send LINE notification, config: { message: Congratulations! } }

edges:
  - { id: e45, source: start-7, target: condition-7 }
  - { id: e46-yes, source: condition-7, target: action-26, source_handle: "yes", label: "Yes" }
"""


def test_load_workflow_from_valid_yaml():
    """Test loading a valid workflow from YAML."""
    workflow = load_workflow(POINTS_WORKFLOW)

    assert workflow.id == "sample-7"
    assert workflow.status == "active"
    assert [n.id for n in workflow.nodes] == ["start-7", "condition-7", "action-26"]
    assert workflow.nodes[1].data.conditions[0].field == "point_balance"
    assert workflow.edges[1].source_handle == "yes"
    # node type is mirrored into data
    assert workflow.nodes[0].data.type == "start"


def test_load_legacy_camel_case_document():
    """Older documents with actions/peers and camelCase keys still load."""
    legacy = {
        "id": "sample-1",
        "name": "High Value Customer Follow-up",
        "triggerType": "event-based",
        "createdAt": "2024-01-15T10:00:00Z",
        "actions": [
            {"id": "start-1", "type": "start", "position": {"x": 100, "y": 300},
             "data": {"label": "Start", "config": {"merchantId": "SHOP001", "dataSource": "CRM"}}},
            {"id": "condition-1", "type": "condition", "position": {"x": 700, "y": 300},
             "data": {"label": "Order value > $500", "conditions": [
                 {"id": "cond-1", "dataSource": "CRM", "collection": "orders", "field": "grand_total",
                  "fieldType": "number", "operator": "greater_than", "value": 500}]}},
        ],
        "peers": [{"id": "e1", "source": "start-1", "target": "condition-1", "sourceHandle": "output"}],
    }

    workflow = load_workflow(json.dumps(legacy))

    assert workflow.created_at == "2024-01-15T10:00:00Z"
    assert workflow.nodes[0].data.config["data_source"] == "CRM"
    assert workflow.nodes[1].data.conditions[0].field_type == "number"
    assert workflow.edges[0].source_handle == "output"


def test_migrate_does_not_touch_input():
    raw = {"name": "w", "peers": [{"id": "e", "source": "a", "target": "b", "targetHandle": "input"}], "nodes": []}
    snapshot = copy.deepcopy(raw)

    migrated = migrate_workflow(raw)

    assert raw == snapshot
    assert migrated["edges"] == [{"id": "e", "source": "a", "target": "b", "target_handle": "input"}]
    assert "peers" not in migrated


def test_migrate_prefers_current_spelling():
    migrated = migrate_workflow({"name": "w", "nodes": [{"id": "n", "type": "condition", "data": {
        "conditions": [{"field_type": "text", "fieldType": "date"}]}}]})

    assert migrated["nodes"][0]["data"]["conditions"][0] == {"field_type": "text"}


def test_to_snake():
    assert to_snake("sourceHandle") == "source_handle"
    assert to_snake("periodNumber") == "period_number"
    assert to_snake("already_snake") == "already_snake"


def test_unknown_top_level_key_is_rejected():
    with pytest.raises(ValueError, match="Workflow validation error"):
        load_workflow("name: w\nnodez: []\n")


def test_non_mapping_document_is_rejected():
    with pytest.raises(ValueError, match="must be a mapping"):
        load_workflow("- just\n- a list\n")


@pytest.mark.parametrize("yaml_text", [
    "name: x\nnodes:\n  - id: c\n    type: condition\n    data: {conditions: [\"oops\"]}\n",
    "name: x\nnodes:\n  - id: c\n    type: condition\n    data: oops\n",
    "name: x\nnodes:\n  - just-a-string\n",
    "name: x\nnodes: not-a-list\n",
    "name: x\nedges:\n  - 42\n",
    "name: x\nactions:\n  - id: s\n    type: start\n    data: {config: [1, 2]}\n",
])
def test_malformed_entries_are_rejected_with_value_error(yaml_text):
    """Non-mapping nodes, data, conditions or edges fail validation, not migration."""
    with pytest.raises(ValueError, match="Workflow validation error"):
        load_workflow(yaml_text)


def test_invalid_yaml_is_rejected():
    with pytest.raises(ValueError, match="not valid YAML"):
        load_workflow("name: [unterminated\n")


def test_edge_to_unknown_node_is_rejected():
    yaml_text = """
name: invalid_edge_workflow
nodes:
  - { id: start, type: start }
edges:
  - { id: e1, source: start, target: nonexistent }
"""
    with pytest.raises(ValueError, match="Edge references unknown node"):
        load_workflow(yaml_text)


def test_cycle_is_rejected():
    yaml_text = """
name: cyclic_workflow
nodes:
  - { id: a, type: condition }
  - { id: b, type: action }
  - { id: c, type: step }
edges:
  - { id: e1, source: a, target: b }
  - { id: e2, source: b, target: c }
  - { id: e3, source: c, target: a }
"""
    with pytest.raises(ValueError, match="Cycle detected"):
        load_workflow(yaml_text)


def test_compile_attaches_query_to_condition_nodes():
    """Each condition node carries its compiled query; other nodes don't."""
    payload = compile_workflow(load_workflow(POINTS_WORKFLOW))

    condition = payload["nodes"][1]
    assert condition["data"]["query"] == {
        "contacts": {
            "select": ["user_id"],
            "where": {"and": [{"point_balance": {">": 1000}}, {"merchant_id": DEFAULT_MERCHANT_ID}]},
        }
    }
    assert "query" not in payload["nodes"][0]["data"]
    assert "query" not in payload["nodes"][2]["data"]
    # the payload is ready for persistence
    assert json.loads(json.dumps(payload)) == payload


def test_compile_uses_given_assembler():
    payload = compile_workflow(load_workflow(POINTS_WORKFLOW), assembler=QueryAssembler(merchant_id="SHOP001"))

    where = payload["nodes"][1]["data"]["query"]["contacts"]["where"]
    assert where["and"][-1] == {"merchant_id": "SHOP001"}
