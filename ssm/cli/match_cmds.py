"""Ranking and pair-detail commands."""

from __future__ import annotations
import click
import json
import logging

from .helpers import cli, get_stores
from ..match.errors import RankingCancelled, UserNotFound
from ..match.matching_engine import MatchResult
from ..services.match_service import run_ranking, get_match_details

logger = logging.getLogger(__name__)

_QUALITY_COLORS = {
    "Excellent": "green",
    "Very Good": "green",
    "Good": "cyan",
    "Fair": "yellow",
    "Moderate": "yellow",
    "Low": "red",
}


def _format_row(rank: int, match: MatchResult) -> str:
    c = match.compatibility
    label = click.style(f"{match.quality_label.value:<9}", fg=_QUALITY_COLORS.get(match.quality_label.value))
    name = match.candidate.name or match.candidate.id
    return (
        f"{rank:>3}. {name:<24} {match.score:>3}%  {label}  {match.strength_label.value:<8} "
        f"skill={c.skill_match:.2f} style={c.style_compatibility:.2f} "
        f"avail={c.availability_overlap:.2f} tz={c.timezone_compatibility:.1f}"
    )


@cli.command()
@click.argument('user_id')
@click.option('--limit', type=int, default=None, help='Show only the top N matches')
@click.option('--min-score', type=click.IntRange(0, 100), default=None, help='Drop matches below this percentage (overrides config)')
@click.option('--timeout', type=float, default=None, help='Abort ranking after this many seconds')
@click.option('--json', 'as_json', is_flag=True, help='Print results as JSON')
@click.pass_context
def rank(ctx: click.Context, user_id: str, limit: int | None, min_score: int | None, timeout: float | None, as_json: bool):
    """Rank compatible exchange partners for USER_ID.

    Candidates already in a pending or active exchange with the user, inactive
    users and users without teaching skills are never ranked.
    """
    cfg = ctx.obj
    stores = get_stores(cfg)

    try:
        report = run_ranking(stores, cfg, user_id, limit=limit, min_score=min_score, timeout=timeout)
    except UserNotFound as e:
        click.echo(click.style(f"✗ {e}", fg='red'), err=True)
        ctx.exit(1)
    except RankingCancelled as e:
        click.echo(click.style(f"✗ {e}", fg='red'), err=True)
        ctx.exit(2)
    except ValueError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    click.echo(click.style(f"=== Matches for {user_id} ===", fg='cyan', bold=True))
    if not report.matches:
        click.echo(click.style("⚠ No matches above the minimum score", fg='yellow'))
        return
    for i, match in enumerate(report.matches, start=1):
        click.echo(_format_row(i, match))
        if match.matching_teaching_skills:
            click.echo(f"      teaches you: {', '.join(match.matching_teaching_skills)}")
        if match.matching_learning_skills:
            click.echo(f"      learns from you: {', '.join(match.matching_learning_skills)}")


@cli.command()
@click.argument('user_id')
@click.argument('target_id')
@click.option('--json', 'as_json', is_flag=True, help='Print result as JSON')
@click.pass_context
def details(ctx: click.Context, user_id: str, target_id: str, as_json: bool):
    """Show the compatibility breakdown between USER_ID and TARGET_ID.

    Unlike `rank`, no eligibility filter or minimum score applies.
    """
    cfg = ctx.obj
    stores = get_stores(cfg)

    try:
        match = get_match_details(stores, cfg, user_id, target_id)
    except UserNotFound as e:
        click.echo(click.style(f"✗ {e}", fg='red'), err=True)
        ctx.exit(1)
    except ValueError as e:
        raise click.ClickException(str(e))

    if as_json:
        click.echo(json.dumps(match.to_dict(), indent=2))
        return

    c = match.compatibility
    click.echo(click.style(f"=== {user_id} ↔ {target_id} ===", fg='cyan', bold=True))
    click.echo(f"Match: {match.score}% ({match.quality_label.value}, {match.strength_label.value})")
    click.echo(f"  Skill complementarity: {c.skill_match:.3f}")
    click.echo(f"  Style compatibility:   {c.style_compatibility:.3f}")
    click.echo(f"  Availability overlap:  {c.availability_overlap:.3f}")
    click.echo(f"  Timezone:              {c.timezone_compatibility:.1f}")
    click.echo(f"  Teaches you:     {', '.join(match.matching_teaching_skills) or '-'}")
    click.echo(f"  Learns from you: {', '.join(match.matching_learning_skills) or '-'}")


__all__ = ["rank", "details"]
