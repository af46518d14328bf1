"""Tests for the command-line entry point."""

from notion2code.cli import main


class TestExtractCommand:

    def test_structured_completion(self, tmp_path, capsys):
        path = tmp_path / "completion.txt"
        path.write_text('{"files": {"src/a.ts": "export const a = 1;"}}', encoding="utf-8")

        assert main(["extract", str(path)]) == 0

        out = capsys.readouterr().out
        assert "Strategy: direct_json (1 file(s))" in out
        assert "// File: src/a.ts" in out

    def test_unstructured_completion_exits_2(self, tmp_path, capsys):
        path = tmp_path / "completion.txt"
        path.write_text("no files here", encoding="utf-8")

        assert main(["extract", str(path)]) == 2
        assert "raw_text" in capsys.readouterr().out
