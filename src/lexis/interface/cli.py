"""lexis CLI — study planning and review commands on top of the YAML store."""

import asyncio
import json
import logging
import sys
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import typer
from pydantic import ValidationError

from lexis.application.config import AppConfig, resolve_config
from lexis.domain.errors import CommitError, InvalidInputError
from lexis.domain.models import LearningItem

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="lexis: spaced-repetition vocabulary trainer.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage lexis configuration.")
app.add_typer(config_app, name="config")

logger = logging.getLogger(__name__)

_LOG_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _resolve_with_overrides(ctx: typer.Context, **overrides: Any) -> AppConfig:
    obj = ctx.obj or {}
    try:
        return resolve_config(
            {
                "data_dir": obj.get("data_dir"),
                "learner_id": obj.get("learner"),
                "verbose": obj.get("verbose"),
                **overrides,
            }
        )
    except ValidationError as e:
        typer.secho(f"Invalid configuration: {e}", fg="red")
        raise typer.Exit(2)


def _describe(item: LearningItem) -> str:
    state = item.review_state
    group = item.group_key or "-"
    return (
        f"{item.id}  {item.term}  [{group}]  "
        f"reps={state.repetition_count} interval={state.interval_days}d"
    )


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_dir: Annotated[
        Path | None, typer.Option(help="Directory holding learner files.")
    ] = None,
    learner: Annotated[str | None, typer.Option(help="Learner id.")] = None,
):
    """Global settings for lexis."""
    logging.basicConfig(
        level=_LOG_LEVELS.get(verbose, logging.DEBUG),
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose or None
    ctx.obj["data_dir"] = data_dir
    ctx.obj["learner"] = learner


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    term: Annotated[str, typer.Argument(help="Word or phrase to learn.")],
    definition: Annotated[str, typer.Argument(help="Meaning shown on the back.")],
    group: Annotated[str | None, typer.Option("--group", "-g", help="Lesson or topic.")] = None,
):
    """Add a new vocabulary item."""
    from lexis.application.factory import get_item_repository
    from lexis.application.id_service import new_learning_item

    config = _resolve_with_overrides(ctx)
    item = new_learning_item(term, definition, group_key=group)

    async def run() -> bool:
        repo = get_item_repository(config)
        return await repo.commit_items(config.learner_id, [item])

    if not asyncio.run(run()):
        typer.secho("Failed to save item.", fg="red")
        raise typer.Exit(1)
    typer.echo(item.id)


@app.command()
def due(ctx: typer.Context):
    """List items that are due for review."""
    from lexis.application.factory import get_study_service

    config = _resolve_with_overrides(ctx)
    service = asyncio.run(get_study_service(config))
    items = service.due_items(_now())

    if not items:
        typer.secho("Nothing due.", fg="green")
        return
    typer.echo(f"Due: {len(items)}")
    for item in items:
        typer.echo(f"  {_describe(item)}")


@app.command()
def plan(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option(help="Maximum items in the session.")] = None,
    batch_size: Annotated[int | None, typer.Option(help="Items per batch.")] = None,
    focus: Annotated[
        bool, typer.Option("--focus", help="Study the most-failed items first.")
    ] = False,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show the batches the next session would contain, without starting it."""
    from lexis.application.factory import get_study_service
    from lexis.application.selection_planner import plan_batches

    config = _resolve_with_overrides(ctx, session_limit=limit, batch_size=batch_size)
    service = asyncio.run(get_study_service(config))
    batches = plan_batches(service.plan(_now(), focus=focus), config.batch_size)

    if json_output:
        typer.echo(json.dumps([[item.id for item in batch] for batch in batches], indent=2))
        return

    if not batches:
        typer.secho("Nothing to review.", fg="yellow")
        return
    for idx, batch in enumerate(batches, start=1):
        typer.secho(f"Batch {idx} ({len(batch)} items)", bold=True)
        for item in batch:
            typer.echo(f"  {_describe(item)}")


@app.command()
def rate(
    ctx: typer.Context,
    item_id: Annotated[str, typer.Argument(help="Item to rate.")],
    rating: Annotated[str, typer.Argument(help="again, hard, good, easy, or a 0-5 grade.")],
):
    """Record one answer and save it immediately."""
    from lexis.application.factory import get_study_service

    config = _resolve_with_overrides(ctx)

    async def run():
        service = await get_study_service(config)
        now = _now()
        service.start(now, item_ids=[item_id])
        updated = service.record(item_id, rating, now)
        result = service.finish(now)
        await service.commit()
        return updated, result

    try:
        updated, result = asyncio.run(run())
    except InvalidInputError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(2)
    except CommitError as e:
        typer.secho(str(e), fg="red")
        raise typer.Exit(1)

    state = updated.review_state
    status = "mastered" if state.is_mastered else f"next in {state.interval_days}d"
    typer.echo(f"{updated.term}: {status} (+{result.stats.xp} XP)")


@app.command()
def weak(
    ctx: typer.Context,
    limit: Annotated[int | None, typer.Option(help="How many items to list.")] = None,
):
    """List the items with the highest failure rate."""
    from lexis.application.factory import get_study_service
    from lexis.application.review_engine import compute_failure_rate
    from lexis.application.selection_planner import rank_weak_items

    config = _resolve_with_overrides(ctx, weak_list_size=limit)
    service = asyncio.run(get_study_service(config))
    items = rank_weak_items(service.items, config.weak_list_size)

    if not items:
        typer.secho("No weak items.", fg="green")
        return
    for item in items:
        rate_pct = compute_failure_rate(item.review_state) * 100
        typer.echo(f"  {item.term}  {rate_pct:.0f}% wrong  ({item.review_state.total_reviews} reviews)")


@app.command()
def insights(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Today's plan, per-group progress and mastery distribution."""
    from lexis.application.factory import get_study_service
    from lexis.application.insights import group_insights, mastery_distribution, today_plan
    from lexis.application.review_engine import mastery_name

    config = _resolve_with_overrides(ctx)
    service = asyncio.run(get_study_service(config))
    now = _now()
    plan_ = today_plan(service.items, config.daily_goal, now)
    groups = group_insights(service.items, now)
    dist = mastery_distribution(service.items)
    stats = service.stats

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "today": asdict(plan_),
                    "groups": [asdict(g) for g in groups],
                    "mastery": {mastery_name(level): n for level, n in enumerate(dist)},
                    "stats": {"streak": stats.streak, "xp": stats.xp},
                },
                indent=2,
            )
        )
        return

    typer.echo(
        f"Due: {plan_.due_count}  Weak: {plan_.weak_count}  "
        f"Suggested reviews: {plan_.suggested_reviews}"
    )
    typer.echo(f"Streak: {stats.streak}  XP: {stats.xp}")
    if plan_.recommended_group:
        typer.secho(f"Recommended: {plan_.recommended_group}", fg="green")
    for g in groups:
        typer.echo(
            f"  {g.group_key}: {g.mastered}/{g.total} mastered, {g.due} due, {g.weak} weak"
        )
    typer.echo("  ".join(f"{mastery_name(level)}={n}" for level, n in enumerate(dist)))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
