"""Tests for modification tracking and the editor session write path."""

from __future__ import annotations

import pytest

from backend.content.codec import LogoItem
from backend.content.tracker import EditorSession, is_modified, modified_keys

KEY = "home.hero.title"


class TestIsModified:
    def test_equal_values(self) -> None:
        assert is_modified(KEY, {KEY: "a"}, {KEY: "a"}) is False

    def test_different_values(self) -> None:
        assert is_modified(KEY, {KEY: "a"}, {KEY: "b"}) is True

    def test_absent_original_counts_as_different(self) -> None:
        assert is_modified(KEY, {KEY: "a"}, {}) is True

    def test_absent_on_both_sides(self) -> None:
        assert is_modified(KEY, {}, {}) is False

    def test_removed_value_is_modified(self) -> None:
        assert is_modified(KEY, {}, {KEY: "a"}) is True

    def test_reencoded_list_is_reported_modified(self) -> None:
        """Lists compare as raw text: formatting-only changes still count."""
        key = "home.client-logos.logos"
        original = {key: '[{"name":"Acme","src":"/a.png"}]'}
        content = {key: '[{"src": "/a.png", "name": "Acme"}]'}
        assert is_modified(key, content, original) is True

    def test_modified_keys_sorted_union(self) -> None:
        content = {"b.x.y": "1", "a.x.y": "2", "c.x.y": "3"}
        original = {"c.x.y": "3", "d.x.y": "4"}
        assert modified_keys(content, original) == ["a.x.y", "b.x.y", "d.x.y"]


class TestEditorSession:
    def test_edit_replaces_content_and_keeps_snapshot(self) -> None:
        loaded = {KEY: "Original"}
        session = EditorSession(loaded)
        before = session.content
        session.on_content_change(KEY, "Edited")
        assert session.content[KEY] == "Edited"
        assert before[KEY] == "Original"
        assert session.original[KEY] == "Original"
        assert loaded == {KEY: "Original"}

    def test_maps_are_read_only(self) -> None:
        session = EditorSession({KEY: "x"})
        with pytest.raises(TypeError):
            session.content[KEY] = "y"  # type: ignore[index]
        with pytest.raises(TypeError):
            session.original[KEY] = "y"  # type: ignore[index]

    def test_edit_rejects_malformed_key(self) -> None:
        session = EditorSession({})
        with pytest.raises(ValueError, match="Invalid content key"):
            session.on_content_change("home.title", "x")

    def test_unsaved_changes(self) -> None:
        session = EditorSession({KEY: "a"})
        assert not session.has_unsaved_changes
        session.on_content_change(KEY, "b")
        assert session.has_unsaved_changes
        session.on_content_change(KEY, "a")
        assert not session.has_unsaved_changes

    def test_pending_updates(self) -> None:
        session = EditorSession({KEY: "a", "home.hero.badge": "b"})
        session.on_content_change(KEY, "new")
        session.on_content_change("footer.bottom.copyright", "(c)")
        assert session.pending_updates() == [
            ("footer", "bottom", "copyright", "(c)"),
            ("home", "hero", "title", "new"),
        ]

    def test_discard(self) -> None:
        session = EditorSession({KEY: "a"})
        session.on_content_change(KEY, "b")
        session.discard()
        assert session.content == {KEY: "a"}
        assert not session.has_unsaved_changes

    def test_mark_saved(self) -> None:
        session = EditorSession({KEY: "a"})
        session.on_content_change(KEY, "b")
        session.mark_saved()
        assert session.original[KEY] == "b"
        assert session.modified_keys() == []


class TestListEditing:
    def test_add_logo_reencodes_into_same_key(self) -> None:
        key = "home.client-logos.logos"
        session = EditorSession({key: '[{"name":"Acme","src":"/a.png"}]'})
        logos = session.get_list(key)
        assert len(logos) == 1
        assert logos[0]["name"] == "Acme"

        session.set_list(key, [*logos, LogoItem(name="Globex", src="/g.png")])

        assert session.get_list(key) == [
            {"name": "Acme", "src": "/a.png"},
            {"name": "Globex", "src": "/g.png"},
        ]
        assert session.modified_keys() == [key]

    def test_get_list_uses_fallback_for_malformed_value(self) -> None:
        key = "team.members.list"
        session = EditorSession({key: "{broken"})
        assert session.get_list(key, [{"id": "m1"}]) == [{"id": "m1"}]

    def test_scalar_key_rejected(self) -> None:
        session = EditorSession({})
        with pytest.raises(ValueError, match="not a list field"):
            session.set_list(KEY, [])
        with pytest.raises(ValueError, match="not a list field"):
            session.get_list(KEY)
