"""Unit tests for the argument parser module in projingest CLI."""

import argparse
from pathlib import Path

import pytest

from projingest.cli.argparser import (
    PatternArguments,
    create_parser,
    create_pattern_action,
    read_pattern_file,
    validate_args,
)
from projingest.config import DEFAULT_MODEL


@pytest.fixture
def patterns():
    return PatternArguments()


@pytest.fixture
def parser(patterns):
    return create_parser(patterns)


@pytest.fixture
def pattern_file(tmp_path):
    path = tmp_path / "patterns.txt"
    path.write_text("# generated files\n*.min.js\n\ndist/\n", encoding="utf-8")
    return path


def test_create_pattern_action(patterns):
    """Test creation of the PatternAction class."""
    PatternAction = create_pattern_action(patterns)

    assert issubclass(PatternAction, argparse.Action)

    action = PatternAction(option_strings=["-x", "--exclude"], dest="exclude", help="test help")
    assert action.option_strings == ["-x", "--exclude"]
    assert action.dest == "exclude"
    assert action.help == "test help"


def test_pattern_action_single_pattern(patterns):
    action = create_pattern_action(patterns)(option_strings=["-x", "--exclude"], dest="exclude")
    namespace = argparse.Namespace()

    action(None, namespace, "  *.pyc ", "-x")

    assert patterns.exclude == ["*.pyc"]
    assert patterns.include == []
    assert namespace.exclude == ["  *.pyc "]


def test_pattern_action_blank_pattern_ignored(patterns):
    action = create_pattern_action(patterns)(option_strings=["-i", "--include"], dest="include")
    action(None, argparse.Namespace(), "   ", "-i")
    assert not patterns


def test_parse_patterns_in_order(parser, patterns):
    args = parser.parse_args(["-x", "*.log", "-i", "src/*.go", "--exclude", "build/", "-i", "*.md", "project"])

    assert patterns.exclude == ["*.log", "build/"]
    assert patterns.include == ["src/*.go", "*.md"]
    assert args.directory == Path("project")
    assert bool(patterns)


def test_parse_pattern_files(parser, patterns, pattern_file):
    parser.parse_args(["-x", "*.log", "-X", str(pattern_file), "-I", str(pattern_file), "project"])

    assert patterns.exclude == ["*.log", "*.min.js", "dist/"]
    assert patterns.include == ["*.min.js", "dist/"]


def test_missing_pattern_file(parser, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args(["-X", str(tmp_path / "missing.txt"), "project"])

    assert exc_info.value.code == 2
    assert "cannot read pattern file" in capsys.readouterr().err


def test_read_pattern_file(pattern_file):
    assert read_pattern_file(pattern_file) == ["*.min.js", "dist/"]


def test_defaults(parser, patterns):
    args = parser.parse_args(["project"])

    assert not patterns
    assert args.model == DEFAULT_MODEL
    assert args.output is None
    assert args.summary is None
    assert args.settings is None
    assert args.verbose == 0
    assert not any([args.structure, args.no_tokens, args.gitignore, args.hidden, args.no_default_excludes])


def test_flags(parser):
    args = parser.parse_args(
        ["-S", "-N", "-g", "-H", "-D", "-vv", "-o", "out.md", "-s", "file", "--settings", "s.json", "project"]
    )

    assert args.structure and args.no_tokens and args.gitignore and args.hidden and args.no_default_excludes
    assert args.verbose == 2
    assert args.output == Path("out.md")
    assert args.summary == "file"
    assert args.settings == Path("s.json")


def test_invalid_summary_destination(parser):
    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args(["-s", "printer", "project"])
    assert exc_info.value.code == 2


def test_missing_directory(parser):
    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args([])
    assert exc_info.value.code == 2


def test_version(parser, capsys):
    with pytest.raises(SystemExit) as exc_info:
        parser.parse_args(["--version"])
    assert exc_info.value.code == 0
    assert capsys.readouterr().out.startswith("projingest ")


def test_validate_args_summary_file_requires_output(parser):
    args = parser.parse_args(["-s", "file", "project"])
    with pytest.raises(ValueError, match="requires -o/--output"):
        validate_args(args)

    args = parser.parse_args(["-s", "file", "-o", "out.md", "project"])
    validate_args(args)


def test_validate_args_model_without_tokens(parser):
    args = parser.parse_args(["-N", "-m", "gpt-4", "project"])
    with pytest.raises(ValueError, match="no effect"):
        validate_args(args)

    validate_args(parser.parse_args(["-N", "project"]))
    validate_args(parser.parse_args(["-m", "gpt-4", "project"]))
