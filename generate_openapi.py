"""Write the operator API schema of the notifier to ``openapi.json``."""

from pathlib import Path
import json
import os

from strava_notifier.main import app


def generate_openapi(server_url: str | None = None) -> Path:
    """Dump the schema, optionally pinned to the deployed ``APP_URL``."""
    schema = app.openapi()
    if server_url:
        schema["servers"] = [{"url": server_url.rstrip("/")}]

    output_path = Path(__file__).resolve().parent / "openapi.json"
    output_path.write_text(json.dumps(schema, indent=2))
    return output_path


if __name__ == "__main__":
    print(generate_openapi(os.getenv("APP_URL")))
