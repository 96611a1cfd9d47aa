"""Tests for the click command line."""

import pytest
from click.testing import CliRunner
from sqlalchemy import create_engine

from flashlingo import db
from flashlingo.cli import cli


@pytest.fixture(autouse=True)
def setup_db(tmp_path):
    test_db = str(tmp_path / "test_cli.db")
    db.engine = create_engine(f"sqlite:///{test_db}")
    db.SessionLocal = db.sessionmaker(bind=db.engine, expire_on_commit=False)
    yield


@pytest.fixture
def runner():
    return CliRunner()


def run(runner, *args, input=None):
    result = runner.invoke(cli, ["--user", "tester", *args], input=input)
    assert result.exception is None or isinstance(result.exception, SystemExit), result.output
    return result


def test_init_db(runner):
    result = run(runner, "init-db")
    assert "Database initialized." in result.output
    assert db.is_db_initialized()


def test_add_list_edit_delete(runner):
    result = run(runner, "add", "apple", "táo", "--topic", "Fruits")
    assert result.exit_code == 0
    assert "Added 'apple' = 'táo' [Fruits]" in result.output

    [entry] = db.list_entries("tester")
    result = run(runner, "list")
    assert entry.id in result.output
    assert "apple = táo  [Fruits]" in result.output

    result = run(runner, "edit", entry.id, "apple", "quả táo")
    assert result.exit_code == 0
    assert db.list_entries("tester")[0].topic == "Unclassified"

    result = run(runner, "delete", entry.id, "--yes")
    assert result.exit_code == 0
    assert db.list_entries("tester") == []


def test_add_rejects_blank(runner):
    result = run(runner, "add", "apple", "  ")
    assert result.exit_code != 0
    assert "required" in result.output


def test_delete_unknown_and_cancel(runner):
    result = run(runner, "delete", "nope", "--yes")
    assert result.exit_code != 0
    assert "not found" in result.output

    entry = db.create_entry("tester", "dog", "chó")
    result = run(runner, "delete", entry.id, input="n\n")
    assert "Cancelled." in result.output
    assert len(db.list_entries("tester")) == 1


def test_topics_and_watch(runner):
    run(runner, "init-db")
    db.create_entry("tester", "apple", "táo", "Fruits")
    db.create_entry("tester", "dog", "chó", "")

    result = run(runner, "topics")
    assert "2 words, 2 topics" in result.output
    assert "Fruits (1)" in result.output
    assert "Unclassified (1)" in result.output

    result = run(runner, "watch", "--count", "1")
    assert "2 words, 2 topics" in result.output


def test_review_session(runner):
    run(runner, "init-db")
    db.create_entry("tester", "apple", "táo", "Fruits")

    result = run(runner, "review", "--topic", "Fruits", input="f\nn\nq\n")
    assert "Card 1 / 1" in result.output
    assert "-> táo" in result.output


def test_review_empty_topic(runner):
    run(runner, "init-db")
    result = run(runner, "review", "--topic", "Jobs")
    assert "No words for topic 'Jobs'" in result.output


def test_quiz_session(runner):
    run(runner, "init-db")
    db.create_entry("tester", "apple", "táo", "Fruits")

    result = run(runner, "quiz", "--direction", "target_to_source", input="\nApple \n")
    assert "táo" in result.output
    assert "Correct!" in result.output
    assert "Quiz complete: 1/1 correct (100%)" in result.output


def test_quiz_wrong_answer_and_early_exit(runner):
    run(runner, "init-db")
    db.create_entry("tester", "dog", "chó", "Animals")
    db.create_entry("tester", "cat", "mèo", "Animals")

    result = run(runner, "quiz", "--topic", "Animals", input="meo\n:q\n")
    assert "Incorrect. Answer:" in result.output
    assert "Quiz ended early: 0/1 correct" in result.output


def test_quiz_empty_topic(runner):
    run(runner, "init-db")
    result = run(runner, "quiz", "--topic", "Fruits")
    assert "No vocabulary entries for topic 'Fruits'." in result.output
