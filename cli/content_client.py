"""CLI client for editing site content as a local TOML file."""

from __future__ import annotations

import argparse
import os
import sys
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import httpx
import tomli_w

from backend.content.keys import make_key, parse_key
from backend.content.tracker import EditorSession

DEFAULT_FILE = "content.toml"
TOKEN_ENV = "SITE_CONTENT_TOKEN"
_LOCALHOST_HOSTS = {"localhost", "127.0.0.1", "::1"}


def validate_server_url(server_url: str, allow_insecure_http: bool = False) -> str:
    """Validate server URL and enforce HTTPS for non-localhost hosts by default."""
    normalized = server_url.strip().rstrip("/")
    parsed = urlparse(normalized)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError("Server URL must include scheme and host (e.g. https://example.com)")

    insecure = parsed.scheme == "http" and parsed.hostname not in _LOCALHOST_HOSTS
    if insecure and not allow_insecure_http:
        raise ValueError(
            "HTTPS is required for non-localhost servers. "
            "Use --allow-insecure-http only on trusted networks."
        )
    return normalized


def nest_content(content: Mapping[str, str]) -> dict[str, dict[str, dict[str, str]]]:
    """Turn a flat key map into ``page > section > field`` tables."""
    nested: dict[str, dict[str, dict[str, str]]] = {}
    for key in sorted(content):
        parsed = parse_key(key)
        section = nested.setdefault(parsed.page, {}).setdefault(parsed.section, {})
        section[parsed.field] = content[key]
    return nested


def flatten_content(data: Mapping[str, Any]) -> dict[str, str]:
    """Inverse of :func:`nest_content`. Raises ``ValueError`` on a bad shape."""
    flat: dict[str, str] = {}
    for page, sections in data.items():
        if not isinstance(sections, dict):
            raise ValueError(f"Page '{page}' must be a table of sections")
        for section, fields in sections.items():
            if not isinstance(fields, dict):
                raise ValueError(f"Section '{page}.{section}' must be a table of fields")
            for field_name, value in fields.items():
                if not isinstance(value, str):
                    raise ValueError(f"Value of '{page}.{section}.{field_name}' must be a string")
                flat[make_key(page, section, field_name)] = value
    return flat


def write_content_file(path: Path, content: Mapping[str, str]) -> None:
    path.write_text(tomli_w.dumps(nest_content(content)), encoding="utf-8")


def read_content_file(path: Path) -> dict[str, str]:
    return flatten_content(tomllib.loads(path.read_text(encoding="utf-8")))


class ContentClient:
    """Thin wrapper over the admin content API."""

    def __init__(
        self,
        server_url: str,
        token: str,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.client = httpx.Client(
            base_url=server_url,
            headers={"Authorization": f"Bearer {token}"},
            timeout=30.0,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> ContentClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def fetch_content(self, page: str | None = None) -> dict[str, str]:
        """Stored content as a flat key map."""
        params = {"page": page} if page else None
        resp = self.client.get("/api/admin/website-content", params=params)
        resp.raise_for_status()
        return {
            make_key(item["page"], item["section"], item["content_key"]): item["content_value"]
            for item in resp.json()["items"]
        }

    def save(self, rows: list[tuple[str, str, str, str]]) -> int:
        body = [
            {"page": page, "section": section, "content_key": field, "content_value": value}
            for page, section, field, value in rows
        ]
        resp = self.client.put("/api/admin/website-content", json=body)
        resp.raise_for_status()
        saved: int = resp.json()["saved"]
        return saved

    def reseed(self) -> int:
        resp = self.client.post("/api/admin/website-content", json={"action": "reseed"})
        resp.raise_for_status()
        seeded: int = resp.json()["seeded"]
        return seeded


def build_session(client: ContentClient, edited: Mapping[str, str]) -> EditorSession:
    """Session with the server's stored content as snapshot and the file's edits applied."""
    pages = {parse_key(key).page for key in edited}
    stored: dict[str, str] = {}
    for page in sorted(pages):
        stored.update(client.fetch_content(page))
    session = EditorSession(stored)
    for key, value in edited.items():
        session.on_content_change(key, value)
    return session


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="site-content",
        description="Pull, edit and push site content overrides",
    )
    parser.add_argument("--server", "-s", default="http://localhost:8000", help="Server URL")
    parser.add_argument(
        "--allow-insecure-http",
        action="store_true",
        help="Allow http:// server URLs for non-localhost hosts",
    )
    parser.add_argument("--token", help=f"Admin token (default: ${TOKEN_ENV})")
    parser.add_argument("--file", "-f", default=DEFAULT_FILE, help="Content TOML file")

    subparsers = parser.add_subparsers(dest="command")
    pull_parser = subparsers.add_parser("pull", help="Download stored content")
    pull_parser.add_argument("--page", help="Only this page")
    subparsers.add_parser("status", help="List keys edited locally")
    subparsers.add_parser("push", help="Upload keys edited locally")
    reset_parser = subparsers.add_parser("reset", help="Replace stored content with defaults")
    reset_parser.add_argument("--yes", action="store_true", help="Do not ask for confirmation")

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return

    try:
        server_url = validate_server_url(args.server, args.allow_insecure_http)
    except ValueError as exc:
        print(f"Error: {exc}")
        sys.exit(1)

    token = args.token or os.environ.get(TOKEN_ENV)
    if not token:
        print(f"Error: admin token required (--token or ${TOKEN_ENV})")
        sys.exit(1)

    content_file = Path(args.file)
    with ContentClient(server_url, token) as client:
        try:
            run_command(args, client, content_file)
        except httpx.HTTPStatusError as exc:
            print(f"Error: server returned {exc.response.status_code}")
            sys.exit(1)
        except ValueError as exc:
            print(f"Error: {exc}")
            sys.exit(1)


def run_command(args: argparse.Namespace, client: ContentClient, content_file: Path) -> None:
    if args.command == "pull":
        content = client.fetch_content(args.page)
        write_content_file(content_file, content)
        print(f"Wrote {len(content)} key(s) to {content_file}")
        return

    if args.command == "reset":
        if not args.yes and input("Replace ALL stored content with defaults? [y/N] ") != "y":
            print("Aborted.")
            return
        print(f"Reseeded {client.reseed()} key(s) from defaults")
        return

    session = build_session(client, read_content_file(content_file))
    if args.command == "status":
        changed = session.modified_keys()
        if not changed:
            print("No local changes.")
        for key in changed:
            marker = "-" if key not in session.content else "M"
            print(f"  {marker} {key}")
    elif args.command == "push":
        rows = session.pending_updates()
        if not rows:
            print("Nothing to push.")
            return
        print(f"Pushed {client.save(rows)} key(s)")


if __name__ == "__main__":
    main()
