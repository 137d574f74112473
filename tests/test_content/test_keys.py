"""Tests for content key parsing."""

from __future__ import annotations

import pytest

from backend.content.keys import PAGE_IDS, ContentKey, Page, make_key, page_of, parse_key


class TestParseKey:
    def test_three_segments(self) -> None:
        key = parse_key("home.hero.title")
        assert key == ContentKey(page="home", section="hero", field="title")
        assert key.namespace == "home.hero"

    def test_field_keeps_remaining_dots(self) -> None:
        key = parse_key("footer.company.logo.alt")
        assert key.section == "company"
        assert key.field == "logo.alt"
        assert str(key) == "footer.company.logo.alt"

    def test_hyphenated_section(self) -> None:
        key = parse_key("home.client-logos.logos")
        assert key.section == "client-logos"

    @pytest.mark.parametrize(
        "bad",
        ["", "home", "home.hero", "home..title", ".hero.title", "home.hero.", "home.hero"],
    )
    def test_rejects_malformed(self, bad: str) -> None:
        with pytest.raises(ValueError, match="Invalid content key"):
            parse_key(bad)

    def test_belongs_to(self) -> None:
        key = parse_key("team.members.list")
        assert key.belongs_to("team")
        assert not key.belongs_to("home")


class TestHelpers:
    def test_make_key_round_trips(self) -> None:
        assert make_key("services", "cta", "title") == "services.cta.title"
        assert str(parse_key(make_key("services", "cta", "title"))) == "services.cta.title"

    def test_page_of(self) -> None:
        assert page_of("contact.form.title") == "contact"

    def test_page_ids(self) -> None:
        assert PAGE_IDS == {
            "home",
            "services",
            "team",
            "speakers",
            "workshops",
            "contact",
            "footer",
        }
        assert Page("home") is Page.HOME
