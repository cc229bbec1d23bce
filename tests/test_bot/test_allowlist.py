"""Tests for allow-list parsing and loading."""

from __future__ import annotations

from pathlib import Path

from src.bot.allowlist import AllowList, parse_allowed_users


class TestParseAllowedUsers:
    def test_parses_ids_and_skips_comments(self) -> None:
        ids = parse_allowed_users(["# comment", "  12345  ", "", "notanumber", "67890"])
        assert ids == {12345, 67890}

    def test_negative_ids_for_groups(self) -> None:
        assert parse_allowed_users(["-100123"]) == {-100123}

    def test_duplicates_collapse(self) -> None:
        assert parse_allowed_users(["1", "1", " 1"]) == {1}

    def test_indented_comment(self) -> None:
        assert parse_allowed_users(["   # 42"]) == set()

    def test_trailing_text_is_rejected(self) -> None:
        assert parse_allowed_users(["42 # me"]) == set()


class TestAllowList:
    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "allowed_users.txt"
        path.write_text("# ops\n12345\n\nbad\n67890\n")

        allow = AllowList.from_file(path)

        assert len(allow) == 2
        assert allow.is_authorized(12345)
        assert allow.is_authorized(67890)
        assert not allow.is_authorized(1)

    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        allow = AllowList.from_file(tmp_path / "nope.txt")
        assert len(allow) == 0
        assert not allow.is_authorized(12345)

    def test_contains(self) -> None:
        allow = AllowList([7])
        assert 7 in allow
        assert 8 not in allow
