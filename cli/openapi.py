"""Generate the OpenAPI document from the FastAPI app.

Usage:
    uv run openapi [output-path]
"""

import json
import sys
from datetime import UTC, datetime
from pathlib import Path

DEFAULT_OUTPUT = "docs/openapi.json"


def generate_openapi(output_path: str = DEFAULT_OUTPUT) -> dict:
    """Generate and save the OpenAPI document."""
    from transit_fraud.main import create_app

    app = create_app()
    openapi_doc = app.openapi()
    openapi_doc["info"]["x-generated-at"] = datetime.now(UTC).isoformat()

    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        json.dump(openapi_doc, f, indent=2)

    print(f"OpenAPI document written to: {output}")
    return openapi_doc


def main() -> None:
    """Generate OpenAPI document."""
    generate_openapi(sys.argv[1] if len(sys.argv) > 1 else DEFAULT_OUTPUT)
