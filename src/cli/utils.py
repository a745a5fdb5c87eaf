"""Shared CLI utilities."""

from datetime import date, datetime
from pathlib import Path
from typing import Optional

import click
import structlog
from rich.console import Console

console = Console()
logger = structlog.get_logger()


def current_config_path() -> Optional[Path]:
    """Config path passed to the top-level group (``care --config``), if any."""
    ctx = click.get_current_context(silent=True)
    if ctx is None:
        return None
    obj = ctx.find_root().obj or {}
    return obj.get("config_path")


def get_components(config_path: Optional[Path] = None):
    """Initialize storage, suppression state and the generator from config."""
    from care.generator import CareSuggestionGenerator
    from cli.config import get_paths, load_config_model
    from people.storage import PeopleStorage, RelationshipStorage
    from people.suppression import SuppressionStore

    try:
        config_model = load_config_model(config_path or current_config_path())
    except ValueError as e:
        raise click.ClickException(str(e))

    config = config_model.to_dict()
    paths = get_paths(config)

    generator = CareSuggestionGenerator(
        horizons=config_model.to_horizons(),
        custom_templates=config_model.templates,
    )

    return {
        "config": config,
        "config_model": config_model,
        "paths": paths,
        "people": PeopleStorage(paths["people_file"]),
        "relationships": RelationshipStorage(paths["relationships_file"]),
        "suppression": SuppressionStore(paths["state_db"]),
        "generator": generator,
    }


def resolve_now(on_date: Optional[datetime | date] = None) -> datetime:
    """Wall-clock now, or midnight of ``--date`` when one was given."""
    if on_date is None:
        return datetime.now()
    if isinstance(on_date, datetime):
        return on_date
    return datetime.combine(on_date, datetime.min.time())


def find_suggestion(c: dict, suggestion_id: str, now: datetime):
    """Regenerate the unfiltered feed for ``now`` and look up one card by id."""
    people = c["people"].load()
    for suggestion in c["generator"].generate(people, now):
        if suggestion.id == suggestion_id:
            return suggestion
    raise click.ClickException(
        f"No card '{suggestion_id}' on {now.date().isoformat()}. Pass --date if it belongs to another day."
    )
