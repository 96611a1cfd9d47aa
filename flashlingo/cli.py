import itertools
import os
from typing import Any, Optional

import click

from . import db
from .errors import EmptyDeck, RepositoryError
from .library import build_library_view
from .models import ALL_TOPICS, Direction, Outcome
from .quiz import QuizSession
from .review import ReviewDeck
from .topics import filter_by_topic

DEFAULT_USER = os.environ.get("FLASHLINGO_USER", "default_user")
QUIT_COMMANDS = {":q", ":quit", ":exit"}


def register_commands(cli: Any) -> None:

    @cli.command("init-db")
    def init_db() -> None:
        """Initialize the vocabulary database."""
        db.init_db()
        click.echo("Database initialized.")

    @cli.command("add")
    @click.argument("source_text")
    @click.argument("target_text")
    @click.option("--topic", default="", help="Topic tag (blank = Unclassified)")
    @click.pass_obj
    def add(obj: dict, source_text: str, target_text: str, topic: str) -> None:
        """Add a word pair."""
        try:
            entry = db.create_entry(obj["user"], source_text, target_text, topic)
        except RepositoryError as e:
            raise click.ClickException(str(e))
        click.echo(f"Added '{entry.source_text}' = '{entry.target_text}' [{entry.topic}] ({entry.id})")

    @cli.command("edit")
    @click.argument("entry_id")
    @click.argument("source_text")
    @click.argument("target_text")
    @click.option("--topic", default="", help="Topic tag (blank = Unclassified)")
    @click.pass_obj
    def edit(obj: dict, entry_id: str, source_text: str, target_text: str, topic: str) -> None:
        """Replace the texts and topic of a word pair."""
        try:
            db.update_entry(obj["user"], entry_id, source_text, target_text, topic)
        except RepositoryError as e:
            raise click.ClickException(str(e))
        click.echo(f"Updated {entry_id}.")

    @cli.command("delete")
    @click.argument("entry_id")
    @click.option("--yes", is_flag=True, help="Do not ask for confirmation")
    @click.pass_obj
    def delete(obj: dict, entry_id: str, yes: bool) -> None:
        """Delete a word pair."""
        if not yes and not click.confirm(f"Delete {entry_id}?"):
            click.echo("Cancelled.")
            return
        try:
            db.delete_entry(obj["user"], entry_id)
        except RepositoryError as e:
            raise click.ClickException(str(e))
        click.echo(f"Deleted {entry_id}.")

    @cli.command("list")
    @click.option("--topic", default=ALL_TOPICS, help="Only show this topic")
    @click.pass_obj
    def list_words(obj: dict, topic: str) -> None:
        """List word pairs, newest first."""
        view = build_library_view(_snapshot(obj["user"]))
        entries = filter_by_topic(view.entries, topic)
        if not entries:
            click.echo("No vocabulary yet. Add some with 'flashlingo add'.")
            return
        for entry in entries:
            click.echo(f"{entry.id}  {entry.source_text} = {entry.target_text}  [{entry.topic}]")

    @cli.command("topics")
    @click.pass_obj
    def topics(obj: dict) -> None:
        """Show topics with their word counts."""
        _echo_summary(build_library_view(_snapshot(obj["user"])))

    @cli.command("watch")
    @click.option("--timeout", type=float, default=None, help="Re-print after this many idle seconds")
    @click.option("--count", type=int, default=None, help="Stop after this many snapshots")
    @click.pass_obj
    def watch(obj: dict, timeout: Optional[float], count: Optional[int]) -> None:
        """Print the topic summary every time the vocabulary changes."""
        snapshots = db.subscribe(obj["user"], timeout=timeout)
        for snapshot in itertools.islice(snapshots, count):
            _echo_summary(build_library_view(snapshot))
            click.echo("")

    @cli.command("review")
    @click.option("--topic", default=ALL_TOPICS, help="Topic to review")
    @click.pass_obj
    def review(obj: dict, topic: str) -> None:
        """Browse flip-cards: n(ext), p(rev), f(lip), q(uit)."""
        view = build_library_view(_snapshot(obj["user"]))
        deck = ReviewDeck.from_entries(view.entries, topic)
        if deck.is_empty:
            click.echo(f"No words for topic '{topic}'. Try 'flashlingo topics' or --topic all.")
            return

        while True:
            number, size = deck.position
            card = deck.current
            click.echo(f"\nCard {number} / {size}  [{card.topic}]")
            click.echo(f"  {card.source_text}")
            if deck.flipped:
                click.echo(f"  -> {card.target_text}")
            action = click.prompt("[n]ext [p]rev [f]lip [q]uit", default="f" if not deck.flipped else "n")
            action = action.strip().lower()
            if action in ("q", *QUIT_COMMANDS):
                return
            if action == "n":
                deck.next()
            elif action == "p":
                deck.prev()
            elif action == "f":
                deck.toggle_flip()
            else:
                click.echo("Invalid choice.")

    @cli.command("quiz")
    @click.option("--topic", default=ALL_TOPICS, help="Topic to quiz on")
    @click.option("--direction", type=click.Choice([d.value for d in Direction]),
                  default=Direction.SOURCE_TO_TARGET.value, show_default=True)
    @click.pass_obj
    def quiz(obj: dict, topic: str, direction: str) -> None:
        """Type the translation of each word in a shuffled quiz."""
        try:
            session = QuizSession.start(_snapshot(obj["user"]), topic=topic, direction=Direction(direction))
        except EmptyDeck as e:
            click.echo(f"{e} Pick another topic.")
            return

        click.echo(f"Quiz: {session.total} questions. Type :q to stop.")
        while not session.is_finished:
            question = session.current_question
            click.echo(f"\nQuestion {question.number} / {question.total}")
            click.echo(f"{question.prompt_label}: {question.prompt}")
            answer = click.prompt(f"{question.answer_label}", default="", show_default=False)
            if answer.strip().lower() in QUIT_COMMANDS:
                click.echo(f"\nQuiz ended early: {session.score}/{question.number - 1} correct")
                return
            outcome = session.submit_answer(answer)
            if outcome is Outcome.NONE:
                continue
            if outcome is Outcome.CORRECT:
                click.echo("Correct!")
            else:
                click.echo(f"Incorrect. Answer: {session.revealed_answer}")
            session.advance()

        report = session.report
        click.echo(f"\nQuiz complete: {report.score}/{report.total} correct ({report.percent:.0f}%)")


def _snapshot(user: str) -> list:
    try:
        return db.list_entries(user)
    except RepositoryError as e:
        raise click.ClickException(str(e))


def _echo_summary(view: Any) -> None:
    click.echo(f"{view.total} words, {len(view.topics)} topics")
    for topic, count in view.topic_counts.items():
        click.echo(f"  {topic} ({count})")


@click.group()
@click.option("--user", default=DEFAULT_USER, show_default=True, help="User whose vocabulary to use")
@click.pass_context
def cli(ctx: click.Context, user: str) -> None:
    """FlashLingo: vocabulary flashcards and quizzes."""
    if not db.is_db_initialized():
        db.init_db()
    ctx.obj = {"user": user}


register_commands(cli)


def main() -> None:
    cli()
