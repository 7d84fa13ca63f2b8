"""Tests for env file parsing and merging."""

from __future__ import annotations

from pathlib import Path

from provisionkit.envfile import format_value, merge, parse_env_file


class TestParseEnvFile:
    """Test suite for parse_env_file."""

    def test_missing_file(self, tmp_path: Path) -> None:
        assert parse_env_file(tmp_path / ".env") == {}

    def test_parses_assignments(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "# comment\n"
            "\n"
            "PLAIN=value\n"
            'DOUBLE="spaced value"\n'
            "SINGLE='single'\n"
            "export EXPORTED=yes\n"
            "INLINE=abc # trailing comment\n"
            "not an assignment\n"
            "PLAIN=later\n",
            encoding="utf-8",
        )

        values = parse_env_file(env_file)

        assert values == {
            "PLAIN": "later",
            "DOUBLE": "spaced value",
            "SINGLE": "single",
            "EXPORTED": "yes",
            "INLINE": "abc",
        }

    def test_escaped_quotes(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text('KEY="say \\"hi\\""\n', encoding="utf-8")

        assert parse_env_file(env_file)["KEY"] == 'say "hi"'


class TestFormatValue:
    def test_plain_values_unquoted(self) -> None:
        assert format_value("libsql://db.turso.io?authToken=abc") == "libsql://db.turso.io?authToken=abc"

    def test_values_with_spaces_quoted(self) -> None:
        assert format_value("two words") == '"two words"'

    def test_empty(self) -> None:
        assert format_value("") == ""

    def test_newline_escaped(self) -> None:
        assert format_value("a\nb") == '"a\\nb"'


class TestMerge:
    """Test suite for merge."""

    def test_creates_file(self, tmp_path: Path) -> None:
        env_file = tmp_path / "nested" / ".env.local"

        merge(env_file, {"A": "1", "B": "2"})

        assert env_file.read_text(encoding="utf-8") == "A=1\nB=2\n"

    def test_replaces_in_place_and_appends(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("# header\nexport A=old\nKEEP=me\n", encoding="utf-8")

        merge(env_file, {"A": "new", "C": "3"})

        assert env_file.read_text(encoding="utf-8") == "# header\nexport A=new\nKEEP=me\nC=3\n"

    def test_missing_trailing_newline(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("KEEP=me", encoding="utf-8")

        merge(env_file, {"A": "1"})

        assert env_file.read_text(encoding="utf-8") == "KEEP=me\nA=1\n"

    def test_preserves_crlf_line_endings(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_bytes(b"A=old\r\nKEEP=me\r\n")

        merge(env_file, {"A": "new"})

        assert env_file.read_bytes() == b"A=new\r\nKEEP=me\r\n"

    def test_merge_is_idempotent(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("# keep\nX=1\n", encoding="utf-8")
        values = {"X": "2", "Y": "has space", "Z": 'quote"d'}

        merge(env_file, values)
        first = env_file.read_text(encoding="utf-8")
        merge(env_file, values)

        assert env_file.read_text(encoding="utf-8") == first
        assert parse_env_file(env_file) == {"X": "2", "Y": "has space", "Z": 'quote"d'}

    def test_later_duplicates_dropped(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text(
            "TURSO_DATABASE_URL=libsql://old-a\nKEEP=me\nTURSO_DATABASE_URL=libsql://old-b\n", encoding="utf-8"
        )

        merge(env_file, {"TURSO_DATABASE_URL": "libsql://new"})

        assert env_file.read_text(encoding="utf-8") == "TURSO_DATABASE_URL=libsql://new\nKEEP=me\n"
        assert parse_env_file(env_file)["TURSO_DATABASE_URL"] == "libsql://new"

    def test_multiline_value_is_idempotent(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"

        merge(env_file, {"CERT": "line1\nline2"})
        first = env_file.read_bytes()
        merge(env_file, {"CERT": "line1\nline2"})

        assert first == b'CERT="line1\\nline2"\n'
        assert env_file.read_bytes() == first
        assert parse_env_file(env_file)["CERT"] == "line1\nline2"

    def test_replaces_quoted_value_spanning_lines(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text('CERT="-----BEGIN\nbody\n-----END"\nKEEP=me\n', encoding="utf-8")

        merge(env_file, {"CERT": "new"})

        assert env_file.read_text(encoding="utf-8") == "CERT=new\nKEEP=me\n"

    def test_blank_lines_before_replaced_key_kept(self, tmp_path: Path) -> None:
        env_file = tmp_path / ".env"
        env_file.write_text("# header\n\n\nA=old\n", encoding="utf-8")

        merge(env_file, {"A": "new"})

        assert env_file.read_text(encoding="utf-8") == "# header\n\n\nA=new\n"
