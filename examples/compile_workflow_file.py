""" Example: validate a workflow file and write the compiled payload as JSON. """
import json
import sys
from pathlib import Path

from workflow_builder.graph.compiler import compile_workflow, load_workflow
from workflow_builder.graph.session import WorkflowSession
from workflow_builder.telemetry import configure_logging


def main(path: str = "examples/workflows/points_milestone.yaml"):
    configure_logging()
    workflow = load_workflow(Path(path).read_text())

    session = WorkflowSession.from_workflow(workflow)
    ok = session.validate()
    for issue in session.validation_issues:
        print(f"[{issue.severity.upper()}] {issue.message}")
    if not ok:
        sys.exit(1)

    out_path = Path(path).with_suffix(".compiled.json")
    out_path.write_text(json.dumps(compile_workflow(workflow), indent=2))
    print(f"Wrote compiled workflow to: {out_path}")


if __name__ == '__main__':
    main(*sys.argv[1:])
