"""CLI tool for working with gSnake level files and the running editor API.

File commands run locally; upload/fetch/health talk to the server, which must
be running for them to work.

Usage:
    python manage_levels.py new-id
    python manage_levels.py validate level.json
    python manage_levels.py upload level.json
    python manage_levels.py fetch --out current.json
    python manage_levels.py health

Environment variables:
    EDITOR_API_URL   Server URL (default: http://localhost:3001)
"""

import argparse
import json
import os
import sys
from pathlib import Path

import httpx

from engine.export import build_level_export, export_level_json
from engine.level_file import LevelFileError, load_level_file, project_level
from engine.level_id import generate_level_id
from engine.validation import validate_level_payload

DEFAULT_URL = os.environ.get("EDITOR_API_URL", "http://localhost:3001")


def _request(method: str, url: str, **kwargs) -> httpx.Response:
    """Make an HTTP request, handling connection errors."""
    kwargs.setdefault("timeout", 10.0)
    try:
        return httpx.request(method, url, **kwargs)
    except httpx.ConnectError:
        print(f"Error: Could not connect to server at {url}", file=sys.stderr)
        print("Is the server running?", file=sys.stderr)
        sys.exit(1)


def _print_details(details: list[dict]) -> None:
    for detail in details:
        print(f"  {detail['field']}: {detail['message']} ({detail['keyword']})", file=sys.stderr)


def _handle_error(resp: httpx.Response) -> None:
    """Handle common error status codes."""
    if resp.status_code == 200:
        return
    try:
        body = resp.json()
    except ValueError:
        body = {}
    error = body.get("error", resp.text) if isinstance(body, dict) else resp.text
    print(f"Error: {resp.status_code}: {error}", file=sys.stderr)
    if isinstance(body, dict) and body.get("details"):
        _print_details(body["details"])
    sys.exit(1)


def _load(path: str):
    """Load a level file through the editor's load path, exiting on failure."""
    try:
        return load_level_file(path)
    except (LevelFileError, OSError) as e:
        print(f"Failed to load level: {e}", file=sys.stderr)
        sys.exit(1)


def new_id() -> None:
    """Print a freshly generated level id."""
    print(generate_level_id())


def validate_file(path: str) -> None:
    """Check a level file with both the editor load path and the server rules."""
    level = _load(path)
    print(f"Loaded:   {level.name} ({level.grid_size.width}x{level.grid_size.height})")

    # Re-export so totalFood and key order are canonical before the strict check.
    payload = build_level_export(project_level(level)).to_wire()
    details = [d.model_dump() for d in validate_level_payload(payload)]
    if details:
        print("Invalid:", file=sys.stderr)
        _print_details(details)
        sys.exit(1)
    print(f"Valid:    id={payload['id']} totalFood={payload['totalFood']}")


def normalize_file(path: str, out: str | None) -> None:
    """Rewrite a level file in canonical form (key order, derived totalFood)."""
    level = _load(path)
    text = export_level_json(build_level_export(project_level(level)))
    if out:
        Path(out).write_text(text, encoding="utf-8")
        print(f"Wrote {out}")
    else:
        sys.stdout.write(text)


def upload_level(url: str, path: str) -> None:
    """POST a level file to the server's test slot."""
    try:
        payload = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        print(f"Failed to read {path}: {e}", file=sys.stderr)
        sys.exit(1)
    resp = _request("POST", f"{url}/api/test-level", json=payload)
    _handle_error(resp)
    print(resp.json()["message"])


def fetch_level(url: str, out: str | None) -> None:
    """GET the current test level from the server."""
    resp = _request("GET", f"{url}/api/test-level")
    _handle_error(resp)
    text = json.dumps(resp.json(), indent=2) + "\n"
    if out:
        Path(out).write_text(text, encoding="utf-8")
        print(f"Wrote {out}")
    else:
        sys.stdout.write(text)


def check_health(url: str) -> None:
    """Print the server's health status."""
    resp = _request("GET", f"{url}/health")
    _handle_error(resp)
    data = resp.json()
    print(f"{data['service']}: {data['status']}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Work with gSnake level files and the editor API",
    )

    url_kwargs = dict(
        default=DEFAULT_URL,
        help=f"Server URL (default: {DEFAULT_URL}, or set EDITOR_API_URL env var)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("new-id", help="Generate a new level id")

    validate_parser = subparsers.add_parser("validate", help="Validate a level file")
    validate_parser.add_argument("path", help="Level JSON file")

    normalize_parser = subparsers.add_parser("normalize", help="Rewrite a level file in canonical form")
    normalize_parser.add_argument("path", help="Level JSON file")
    normalize_parser.add_argument("--out", help="Output file (default: stdout)")

    upload_parser = subparsers.add_parser("upload", help="Upload a level file for testing")
    upload_parser.add_argument("path", help="Level JSON file")
    upload_parser.add_argument("--url", **url_kwargs)

    fetch_parser = subparsers.add_parser("fetch", help="Download the current test level")
    fetch_parser.add_argument("--out", help="Output file (default: stdout)")
    fetch_parser.add_argument("--url", **url_kwargs)

    health_parser = subparsers.add_parser("health", help="Check the server is up")
    health_parser.add_argument("--url", **url_kwargs)

    args = parser.parse_args()

    if args.command == "new-id":
        new_id()
    elif args.command == "validate":
        validate_file(args.path)
    elif args.command == "normalize":
        normalize_file(args.path, args.out)
    elif args.command == "upload":
        upload_level(args.url, args.path)
    elif args.command == "fetch":
        fetch_level(args.url, args.out)
    elif args.command == "health":
        check_health(args.url)


if __name__ == "__main__":
    main()
