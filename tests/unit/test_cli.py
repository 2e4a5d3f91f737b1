"""
Unit tests for the offline analysis CLI.
"""

import json

import pytest

from seraph.cli.analyze import analyze_texts, load_posts, main


class TestLoadPosts:
    """Test load_posts()."""

    def test_json_list(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text(json.dumps(["first post", "second post"]), encoding="utf-8")

        assert load_posts(path) == ["first post", "second post"]

    def test_json_must_be_list_of_strings(self, tmp_path):
        path = tmp_path / "posts.json"
        path.write_text(json.dumps({"posts": ["x"]}), encoding="utf-8")

        with pytest.raises(ValueError):
            load_posts(path)

    def test_text_file_one_post_per_line(self, tmp_path):
        path = tmp_path / "posts.txt"
        path.write_text("first post\n\n  second post  \n", encoding="utf-8")

        assert load_posts(path) == ["first post", "second post"]


class TestAnalyzeTexts:
    """Test analyze_texts()."""

    def test_min_evidence_override(self):
        result = analyze_texts(["bad sad day"], username="cli", min_evidence_tokens=1)

        assert result.posts[0].has_evidence is True
        assert result.summary.username == "cli"
        assert result.summary.platform == "local"

    def test_default_gate(self):
        result = analyze_texts(["bad sad day"])
        assert result.posts[0].has_evidence is False


class TestMain:
    """Test the CLI entry point."""

    def test_writes_output_file(self, tmp_path):
        source = tmp_path / "posts.txt"
        source.write_text(
            "I feel so hopeless and empty, crying every night because of the pain\n"
            "Went to the gym after work and cooked dinner with a friend\n",
            encoding="utf-8",
        )
        output = tmp_path / "out" / "result.json"

        exit_code = main([str(source), "--username", "tester", "--output", str(output)])

        assert exit_code == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["summary"]["username"] == "tester"
        assert [post["best_category"] for post in data["posts"]] == ["SADNESS", "FUNCTIONAL_BASELINE"]

    def test_prints_to_stdout(self, tmp_path, capsys):
        source = tmp_path / "posts.json"
        source.write_text(json.dumps(["hello there"]), encoding="utf-8")

        assert main([str(source)]) == 0

        out = capsys.readouterr().out
        # Log lines may precede the indented JSON result
        data = json.loads(out[out.index("{\n"):])
        assert data["summary"]["post_count"] == 1

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "missing.txt")]) == 1

    def test_invalid_json(self, tmp_path):
        source = tmp_path / "posts.json"
        source.write_text("{not json", encoding="utf-8")

        assert main([str(source)]) == 1
