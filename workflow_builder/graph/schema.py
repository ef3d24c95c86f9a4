from typing import Any, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..conditions.models import Condition

NodeType = Literal["start", "condition", "action", "step", "trigger"]


class Position(BaseModel):
    x: float = 0
    y: float = 0


class NodeData(BaseModel):
    # Node templates carry their own keys (icons, branch flags, ...)
    model_config = ConfigDict(extra="allow")

    label: str = ""
    type: Optional[NodeType] = None
    description: Optional[str] = None
    status: Optional[Literal["active", "review", "error", "disabled"]] = None
    config: Optional[Dict[str, Any]] = None
    conditions: List[Condition] = Field(default_factory=list)


class NodeSpec(BaseModel):
    id: str
    type: NodeType
    position: Position = Field(default_factory=Position)
    data: NodeData = Field(default_factory=NodeData)


class EdgeSpec(BaseModel):
    id: str
    source: str
    target: str
    source_handle: Optional[str] = None
    target_handle: Optional[str] = None
    label: Optional[str] = None
    animated: bool = False


class WorkflowSpec(BaseModel):
    id: Optional[str] = None
    name: str
    description: Optional[str] = None
    trigger_type: Literal["event-based", "schedule-based"] = "event-based"
    status: Literal["draft", "active", "paused"] = "draft"
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    last_triggered: Optional[str] = None

    nodes: List[NodeSpec] = Field(default_factory=list)
    edges: List[EdgeSpec] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")  # unknown top-level keys are a typo, not data


def validate_workflow(raw: Dict[str, Any]) -> Tuple[WorkflowSpec, Dict[str, Any]]:
    """Validate a migrated workflow dict against WorkflowSpec."""
    try:
        spec = WorkflowSpec.model_validate(raw)
        return spec, spec.model_dump(mode="json")
    except ValidationError as e:
        raise ValueError(f"Workflow validation error: {e}")
