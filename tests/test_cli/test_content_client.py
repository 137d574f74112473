"""Tests for the CLI content client."""

from __future__ import annotations

import argparse
import json
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from cli.content_client import (
    ContentClient,
    build_session,
    flatten_content,
    main,
    nest_content,
    read_content_file,
    run_command,
    validate_server_url,
    write_content_file,
)

if TYPE_CHECKING:
    from pathlib import Path


class FakeServer:
    """In-memory stand-in for the admin content API."""

    def __init__(self, stored: dict[tuple[str, str, str], str] | None = None) -> None:
        self.stored = dict(stored or {})
        self.requests: list[httpx.Request] = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != "Bearer tok":
            return httpx.Response(401, json={"detail": "Not authenticated"})
        path = request.url.path
        if path != "/api/admin/website-content":
            return httpx.Response(404)
        if request.method == "GET":
            page = request.url.params.get("page")
            items = [
                {"page": p, "section": s, "content_key": f, "content_value": v}
                for (p, s, f), v in sorted(self.stored.items())
                if page is None or p == page
            ]
            return httpx.Response(200, json={"items": items})
        body: Any = json.loads(request.content)
        if request.method == "PUT":
            for item in body:
                key = (item["page"], item["section"], item["content_key"])
                self.stored[key] = item["content_value"]
            return httpx.Response(200, json={"saved": len(body), "items": []})
        if request.method == "POST" and body == {"action": "reseed"}:
            self.stored = {("home", "hero", "title"): "Default"}
            return httpx.Response(200, json={"seeded": 1})
        return httpx.Response(422)

    def client(self, token: str = "tok") -> ContentClient:
        transport = httpx.MockTransport(self.handle)
        return ContentClient("http://localhost:8000", token, transport=transport)


def _args(command: str, **extra: Any) -> argparse.Namespace:
    return argparse.Namespace(command=command, **extra)


class TestValidateServerUrl:
    def test_rejects_insecure_http_for_remote_hosts(self) -> None:
        with pytest.raises(ValueError, match="HTTPS is required"):
            validate_server_url("http://example.com")

    def test_allows_http_for_localhost(self) -> None:
        assert validate_server_url("http://localhost:8000/") == "http://localhost:8000"

    def test_allows_insecure_http_when_flag_enabled(self) -> None:
        assert (
            validate_server_url("http://example.com:8000", allow_insecure_http=True)
            == "http://example.com:8000"
        )

    def test_rejects_missing_scheme(self) -> None:
        with pytest.raises(ValueError, match="scheme and host"):
            validate_server_url("example.com")


class TestContentFile:
    def test_nest_groups_by_page_and_section(self) -> None:
        nested = nest_content(
            {"home.hero.title": "T", "home.hero.subtitle": "S", "team.cta.email": "e"}
        )
        assert nested == {
            "home": {"hero": {"subtitle": "S", "title": "T"}},
            "team": {"cta": {"email": "e"}},
        }

    def test_flatten_rejects_non_string_value(self) -> None:
        with pytest.raises(ValueError, match="must be a string"):
            flatten_content({"home": {"hero": {"title": 3}}})

    def test_flatten_rejects_non_table_section(self) -> None:
        with pytest.raises(ValueError, match="table of fields"):
            flatten_content({"home": {"hero": "x"}})

    def test_file_keeps_list_values_as_json_strings(self, tmp_path: Path) -> None:
        content = {
            "footer.for-speakers.links": '[{"text": "Apply", "url": "/apply"}]',
            "home.hero.title": 'Say "hi"',
        }
        path = tmp_path / "content.toml"
        write_content_file(path, content)
        assert read_content_file(path) == content


class TestContentClient:
    def test_fetch_content_flattens_rows(self) -> None:
        server = FakeServer({("home", "hero", "title"): "A", ("team", "hero", "title"): "B"})
        with server.client() as client:
            assert client.fetch_content() == {"home.hero.title": "A", "team.hero.title": "B"}
            assert client.fetch_content("team") == {"team.hero.title": "B"}

    def test_save_sends_rows(self) -> None:
        server = FakeServer()
        with server.client() as client:
            assert client.save([("home", "hero", "title", "New")]) == 1
        assert server.stored == {("home", "hero", "title"): "New"}

    def test_http_errors_raise(self) -> None:
        server = FakeServer()
        with server.client(token="wrong") as client, pytest.raises(httpx.HTTPStatusError):
            client.fetch_content()

    def test_build_session_diffs_against_server(self) -> None:
        server = FakeServer({("home", "hero", "title"): "A", ("home", "hero", "badge"): "B"})
        with server.client() as client:
            session = build_session(
                client, {"home.hero.title": "A2", "home.hero.badge": "B"}
            )
        assert session.modified_keys() == ["home.hero.title"]
        assert session.pending_updates() == [("home", "hero", "title", "A2")]


class TestCommands:
    def test_pull_writes_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        server = FakeServer({("home", "hero", "title"): "A"})
        path = tmp_path / "content.toml"
        with server.client() as client:
            run_command(_args("pull", page=None), client, path)
        assert read_content_file(path) == {"home.hero.title": "A"}
        assert "Wrote 1 key(s)" in capsys.readouterr().out

    def test_status_then_push(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        server = FakeServer({("home", "hero", "title"): "A"})
        path = tmp_path / "content.toml"
        write_content_file(path, {"home.hero.title": "Edited", "team.cta.email": "x@y.z"})

        with server.client() as client:
            run_command(_args("status"), client, path)
            out = capsys.readouterr().out
            assert "M home.hero.title" in out
            assert "M team.cta.email" in out

            run_command(_args("push"), client, path)
            assert "Pushed 2 key(s)" in capsys.readouterr().out

            run_command(_args("status"), client, path)
            assert "No local changes." in capsys.readouterr().out

        assert server.stored[("home", "hero", "title")] == "Edited"

    def test_push_without_changes_sends_nothing(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        server = FakeServer({("home", "hero", "title"): "A"})
        path = tmp_path / "content.toml"
        write_content_file(path, {"home.hero.title": "A"})
        with server.client() as client:
            run_command(_args("push"), client, path)
        assert "Nothing to push." in capsys.readouterr().out
        assert all(r.method == "GET" for r in server.requests)

    def test_reset_requires_confirmation(
        self,
        tmp_path: Path,
        capsys: pytest.CaptureFixture[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        server = FakeServer({("home", "hero", "title"): "Custom"})
        monkeypatch.setattr("builtins.input", lambda _prompt: "n")
        with server.client() as client:
            run_command(_args("reset", yes=False), client, tmp_path / "c.toml")
        assert "Aborted." in capsys.readouterr().out
        assert server.stored == {("home", "hero", "title"): "Custom"}

    def test_reset_with_yes(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        server = FakeServer({("home", "hero", "title"): "Custom"})
        with server.client() as client:
            run_command(_args("reset", yes=True), client, tmp_path / "c.toml")
        assert "Reseeded 1 key(s)" in capsys.readouterr().out
        assert server.stored == {("home", "hero", "title"): "Default"}


class TestMain:
    def test_requires_token(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.delenv("SITE_CONTENT_TOKEN", raising=False)
        with pytest.raises(SystemExit) as exc_info:
            main(["status"])
        assert exc_info.value.code == 1
        assert "admin token required" in capsys.readouterr().out

    def test_rejects_insecure_server(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit):
            main(["--server", "http://example.com", "--token", "tok", "status"])
        assert "HTTPS is required" in capsys.readouterr().out

    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        main([])
        assert "usage: site-content" in capsys.readouterr().out
