"""People CLI commands."""

import click
from rich.console import Console
from rich.table import Table

from care.dates import parse_date_parts
from cli.utils import get_components
from people.models import Moment, Person
from people.storage import make_id
from shared_types import MomentType, ParentRole, RelationshipType, ReligionCulture

console = Console()


def _check_date(value: str | None, label: str) -> str | None:
    if value and parse_date_parts(value) is None:
        raise click.BadParameter(f"{label} must be YYYY-MM-DD (0000-MM-DD if the year is unknown)")
    return value


@click.group()
def people():
    """Manage the people you keep in touch with."""
    pass


@people.command("list")
def people_list():
    """List everyone."""
    c = get_components()
    everyone = c["people"].load()
    if not everyone:
        console.print("[yellow]No people yet. Add one with [cyan]care people add NAME[/][/]")
        return

    table = Table(show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name")
    table.add_column("Dates", justify="right")
    table.add_column("Kids", justify="right")
    table.add_column("Culture")
    for p in sorted(everyone, key=lambda x: x.name.casefold()):
        kids = str(len(p.children)) if p.children else ("yes" if p.has_kids else "-")
        table.add_row(p.id, p.name, str(len(p.moments)), kids, p.religion_culture or "-")
    console.print(table)


@people.command("show")
@click.argument("person_id")
def people_show(person_id: str):
    """Show one person with their dates, kids and relationships."""
    c = get_components()
    everyone = c["people"].load()
    p = next((x for x in everyone if x.id == person_id), None)
    if p is None:
        raise click.ClickException(f"Person not found: {person_id}")

    console.print(f"\n[cyan bold]{p.name or p.id}[/] [dim]({p.id})[/]")
    if p.phone:
        console.print(f"[dim]Phone: {p.phone}[/]")
    if p.religion_culture:
        console.print(f"[dim]Culture: {p.religion_culture}[/]")

    if p.moments:
        table = Table(title="Dates", show_header=True)
        table.add_column("Label")
        table.add_column("Date", style="cyan")
        table.add_column("Repeats")
        for m in p.moments:
            label = m.display_label or "-"
            if m.is_sensitive:
                label += " [dim](sensitive)[/]"
            table.add_row(label, m.date, "yes" if m.recurring else "no")
        console.print(table)

    if p.children:
        console.print("\n[bold]Kids:[/]")
        for child in p.children:
            bday = child.effective_birthday or "no birthday yet"
            console.print(f"  {p.child_label(child)} [dim]{bday}[/]")
            for event in child.school_events:
                console.print(f"    [dim]{event.type}: {event.date}[/]")
    elif p.has_kids is False:
        console.print("\n[dim]No kids.[/]")

    prefs = p.holiday_prefs
    if prefs.mothers_day is not None or prefs.fathers_day is not None:
        console.print(f"\n[dim]Mother's Day: {prefs.mothers_day} | Father's Day: {prefs.fathers_day}[/]")

    rels = c["relationships"].for_person(p.id)
    if rels:
        names = {x.id: x.name for x in everyone}
        console.print("\n[bold]Relationships:[/]")
        for r in rels:
            other = r.to_id if r.from_id == p.id else r.from_id
            arrow = "->" if r.from_id == p.id else "<-"
            console.print(f"  {arrow} {names.get(other, other)} [dim]({r.type})[/]")


@people.command("add")
@click.argument("name")
@click.option("--id", "person_id", help="Stable id (default: generated)")
@click.option("--phone", help="Phone number, enables text actions")
@click.option("--birthday", help="YYYY-MM-DD or 0000-MM-DD")
@click.option("--anniversary", help="YYYY-MM-DD or 0000-MM-DD")
@click.option("--culture", type=click.Choice([c.value for c in ReligionCulture]))
@click.option("--role", type=click.Choice([r.value for r in ParentRole]))
@click.option("--kids/--no-kids", "has_kids", default=None, help="Whether they have kids")
def people_add(name, person_id, phone, birthday, anniversary, culture, role, has_kids):
    """Add a person. E.g.: care people add "Sam Lee" --birthday 0000-05-12"""
    c = get_components()
    storage = c["people"]
    person_id = person_id or make_id()
    if storage.get(person_id):
        raise click.ClickException(f"Person already exists: {person_id}")

    moments = []
    if _check_date(birthday, "--birthday"):
        moments.append(Moment(id=make_id(), type=MomentType.BIRTHDAY, date=birthday))
    if _check_date(anniversary, "--anniversary"):
        moments.append(Moment(id=make_id(), type=MomentType.ANNIVERSARY, date=anniversary))

    person = Person(
        id=person_id,
        name=name,
        phone=phone,
        moments=moments,
        has_kids=has_kids,
        religion_culture=culture,
        parent_role=role,
    )
    storage.upsert(person)
    console.print(f"[green]Added[/] {name} [dim]({person_id})[/]")


@people.command("remove")
@click.argument("person_id")
@click.confirmation_option(prompt="Remove this person and their relationships?")
def people_remove(person_id: str):
    """Remove a person, their relationships and snoozes."""
    c = get_components()
    if not c["people"].remove(person_id):
        raise click.ClickException(f"Person not found: {person_id}")
    rels = c["relationships"].remove_for_person(person_id)
    c["suppression"].clear_person(person_id)
    console.print(f"[green]Removed[/] {person_id} ({rels} relationships)")


@people.command("relate")
@click.argument("from_id")
@click.argument("to_id")
@click.option(
    "-t",
    "--type",
    "rel_type",
    default=RelationshipType.OTHER.value,
    type=click.Choice([r.value for r in RelationshipType]),
    help="How FROM_ID relates to TO_ID",
)
def people_relate(from_id: str, to_id: str, rel_type: str):
    """Link two people. E.g.: care people relate p1 p2 --type partner"""
    c = get_components()
    storage = c["people"]
    for pid in (from_id, to_id):
        if storage.get(pid) is None:
            raise click.ClickException(f"Person not found: {pid}")
    if from_id == to_id:
        raise click.ClickException("Can't relate a person to themselves.")

    rel = c["relationships"].add(from_id, to_id, rel_type)
    console.print(f"[green]Linked[/] {from_id} -> {to_id} ({rel.type}) [dim]{rel.id}[/]")


@people.command("migrate")
def people_migrate():
    """Rewrite the people file, folding old date lists into moments."""
    c = get_components()
    count = c["people"].migrate()
    console.print(f"[green]Migrated[/] {count} people in {c['people'].path}")
