"""Care feed CLI commands."""

import json
from datetime import timedelta

import click
import structlog
from rich.console import Console
from rich.table import Table

from care import dates
from care.cards import generate_care_feed
from care.feed import active_question, filter_people, visible_suggestions
from care.holidays import get_upcoming_holidays
from care.questions import apply_answer, apply_option
from cli.utils import find_suggestion, get_components, resolve_now
from shared_types import AnswerKind, SuppressionKind

console = Console()
logger = structlog.get_logger()

DATE_OPTION = click.DateTime(formats=["%Y-%m-%d"])

CUE_STYLES = {"Milestone": "magenta", "Meaningful year": "cyan", "Big one": "bold magenta"}


def _print_question(suggestion):
    q = suggestion.question
    console.print(f"\n[bold yellow]?[/] [bold]{q.prompt}[/] [dim]{suggestion.message}[/]")
    if q.answer_kind == AnswerKind.CHOICE:
        opts = ", ".join(f"{o.id} ({o.label})" for o in q.options)
        console.print(f"  [dim]care answer {suggestion.id} <{opts}>[/]")
    elif q.answer_kind == AnswerKind.DATE:
        console.print(f"  [dim]care answer {suggestion.id} YYYY-MM-DD[/]  (0000-MM-DD if the year is unknown)")
    else:
        console.print(f'  [dim]care answer {suggestion.id} "<name>"[/]')
    console.print(f"  [dim]care dismiss {suggestion.id}[/]")


@click.command()
@click.option("--date", "on_date", type=DATE_OPTION, help="Reference date (default: today)")
@click.option("-s", "--search", help="Only people whose name matches")
@click.option("--all", "show_all", is_flag=True, help="Ignore snoozes and question cooldowns")
@click.option("--json", "as_json", is_flag=True, help="Print cards as JSON")
def feed(on_date, search: str, show_all: bool, as_json: bool):
    """Show today's care suggestions."""
    c = get_components()
    now = resolve_now(on_date)
    people = filter_people(c["people"].load(), search)

    suggestions = c["generator"].generate(people, now)
    if not show_all:
        store = c["suppression"]
        suggestions = visible_suggestions(
            suggestions,
            store.snapshot(),
            now=now,
            cooldown_days=c["config_model"].feed.question_cooldown_days,
        )
        shown = active_question(suggestions)
        if shown:
            store.mark_question(shown.person_id, shown.question.id, SuppressionKind.QUESTION_SEEN, at=now)

    if as_json:
        click.echo(json.dumps([s.to_dict() for s in suggestions], indent=2, default=str))
        return

    cards = [s for s in suggestions if not s.is_question]
    if not cards and not suggestions:
        console.print("[yellow]Nothing coming up. Enjoy the quiet.[/]")
        return

    names = {p.id: p.name for p in people}
    if cards:
        table = Table(show_header=True, title=f"Care feed - {now.date().isoformat()}")
        table.add_column("When", style="cyan", no_wrap=True)
        table.add_column("Person")
        table.add_column("Card")
        table.add_column("Action", style="green")
        table.add_column("ID", style="dim")
        for s in cards:
            when = "yesterday" if s.sort_days_until < 0 else dates.format_in_days(s.sort_days_until)
            card = f"[bold]{s.title}[/]\n{s.message}"
            if s.insight:
                card += f"\n[dim]{s.insight}[/]"
            if s.cue:
                card += f"\n[{CUE_STYLES.get(str(s.cue), 'white')}]{s.cue}[/]"
            table.add_row(when, names.get(s.person_id, s.person_id), card, s.action_label, s.id)
        console.print(table)

    for s in suggestions:
        if s.is_question:
            _print_question(s)


@click.command()
@click.option("--date", "on_date", type=DATE_OPTION, help="Reference date (default: today)")
@click.option("-s", "--search", help="Only people whose name matches")
@click.option("--json", "as_json", is_flag=True, help="Print cards as JSON")
def cards(on_date, search: str, as_json: bool):
    """Compact list of upcoming dates, grouped by kind."""
    c = get_components()
    now = resolve_now(on_date)
    people = filter_people(c["people"].load(), search)
    upcoming = generate_care_feed(people, now, horizons=c["config_model"].to_horizons())

    if as_json:
        click.echo(json.dumps([card.to_dict() for card in upcoming], indent=2, default=str))
        return

    if not upcoming:
        console.print("[yellow]Nothing coming up. Enjoy the quiet.[/]")
        return

    for card in upcoming:
        console.print(f"[cyan]{card.date}[/]  [bold]{card.title}[/]  [dim]{card.message}[/]")


@click.command()
@click.option("--date", "on_date", type=DATE_OPTION, help="Reference date (default: today)")
@click.option("-d", "--days", default=None, type=int, help="Days ahead (default: holidays horizon)")
def holidays(on_date, days: int | None):
    """List upcoming holidays."""
    c = get_components()
    now = resolve_now(on_date)
    horizons = c["config_model"].horizons
    days = horizons.holidays if days is None else days

    upcoming = get_upcoming_holidays(now, days, scan_days=horizons.calendar_scan)
    if not upcoming:
        console.print(f"[yellow]No holidays in the next {days} days.[/]")
        return

    table = Table(show_header=True)
    table.add_column("Holiday")
    table.add_column("Date", style="cyan")
    table.add_column("When")
    for h in upcoming:
        table.add_row(
            h.label,
            f"{h.date.isoformat()} ({dates.format_month_day(h.date)})",
            dates.format_in_days(dates.days_between(h.date, now)),
        )
    console.print(table)


@click.command()
@click.argument("card_id")
@click.option("-n", "--days", default=None, type=int, help="Snooze length in days")
@click.option("--date", "on_date", type=DATE_OPTION, help="Date the card was shown on")
def snooze(card_id: str, days: int | None, on_date):
    """Hide a card for a few days."""
    c = get_components()
    now = resolve_now(on_date)
    days = c["config_model"].feed.default_snooze_days if days is None else days

    card = find_suggestion(c, card_id, now)
    if card.is_question:
        raise click.ClickException("That's a question. Use `care dismiss` instead.")

    until = now + timedelta(days=days)
    c["suppression"].snooze_card(card.person_id, card.id, until)
    logger.info("card_snoozed", card_id=card.id, until=until.isoformat())
    console.print(f"[green]Snoozed[/] until {until.date().isoformat()}: {card.title}")


@click.command()
@click.argument("suggestion_id")
@click.argument("option_id", required=False)
@click.option("--value", help="Answer text for name/date questions")
@click.option("--date", "on_date", type=DATE_OPTION, help="Date the question was shown on")
def answer(suggestion_id: str, option_id: str | None, value: str | None, on_date):
    """Answer a quick question. E.g.: care answer question_hasKids_p1_2026-05-10 yes"""
    c = get_components()
    now = resolve_now(on_date)

    card = find_suggestion(c, suggestion_id, now)
    if not card.is_question:
        raise click.ClickException(f"'{suggestion_id}' is not a question.")

    person = c["people"].get(card.person_id)
    if person is None:
        raise click.ClickException(f"Person not found: {card.person_id}")

    question = card.question
    if question.answer_kind == AnswerKind.CHOICE:
        if not option_id:
            valid = ", ".join(o.id for o in question.options)
            raise click.ClickException(f"Pick one of: {valid}")
        updated = apply_option(person, question, option_id)
    else:
        updated = apply_answer(person, question, value if value is not None else option_id)

    if updated is None:
        raise click.ClickException("That answer doesn't fit this question.")

    c["people"].upsert(updated)
    c["suppression"].mark_question(person.id, question.id, SuppressionKind.QUESTION_ANSWERED, at=now)
    logger.info("question_answered", person_id=person.id, question_id=question.id)
    console.print(f"[green]Saved.[/] Updated {person.name or person.id}.")


@click.command()
@click.argument("suggestion_id")
@click.option("--date", "on_date", type=DATE_OPTION, help="Date the question was shown on")
def dismiss(suggestion_id: str, on_date):
    """Not now - skip a quick question for a while."""
    c = get_components()
    now = resolve_now(on_date)

    card = find_suggestion(c, suggestion_id, now)
    if not card.is_question:
        raise click.ClickException(f"'{suggestion_id}' is not a question. Use `care snooze` for cards.")

    c["suppression"].mark_question(card.person_id, card.question.id, SuppressionKind.QUESTION_SNOOZED, at=now)
    console.print("[dim]Okay, I'll ask another time.[/]")
