from __future__ import annotations
import json
import click
from pathlib import Path

from ..config import load_typed_config
from ..db import SnapshotStore
from ..version import __version__


def get_stores(cfg: dict) -> SnapshotStore:
    """Load the JSON snapshot named in config.

    Args:
        cfg: Configuration dictionary

    Returns:
        SnapshotStore backing users, preferences and engagements

    Raises:
        click.ClickException: If the snapshot is missing or unreadable
    """
    path = Path(cfg["data"]["snapshot_path"])
    try:
        return SnapshotStore.from_file(path)
    except FileNotFoundError:
        raise click.ClickException(f"Snapshot not found: {path} (set --snapshot or SSM__DATA__SNAPSHOT_PATH)")
    except (json.JSONDecodeError, ValueError) as e:
        raise click.ClickException(f"Cannot read snapshot {path}: {e}")


@click.group()
@click.version_option(version=__version__, prog_name="skill-swap-matcher")
@click.option('--snapshot', type=click.Path(dir_okay=False), default=None, help='JSON snapshot with users, preferences and engagements (overrides config)')
@click.option('--progress/--no-progress', default=None, help='Enable/disable progress logging (overrides config)')
@click.option('--progress-interval', type=int, default=None, help='Log progress every N candidates (overrides config)')
@click.pass_context
def cli(ctx: click.Context, snapshot: str | None, progress: bool | None, progress_interval: int | None):
    """Skill-exchange compatibility matching.

    \b
    TYPICAL WORKFLOWS:

    \b
    Rank matches for a user:
      ssm --snapshot data/snapshot.json rank USER_ID
      ssm rank USER_ID --limit 10 --json

    \b
    Explain one pairing:
      ssm details USER_ID OTHER_USER_ID

    \b
    Configuration:
      ssm config                 # Effective settings (defaults, .env, SSM__* vars)
      ssm config -s matching
    """
    if hasattr(ctx, 'obj') and isinstance(ctx.obj, dict):
        ctx.obj = ctx.obj
    else:
        try:
            ctx.obj = load_typed_config().to_dict()
        except ValueError as e:
            raise click.ClickException(str(e))

    # Override config from CLI flags
    if snapshot is not None:
        ctx.obj.setdefault('data', {})['snapshot_path'] = snapshot
    if progress is not None:
        ctx.obj.setdefault('logging', {})['progress_enabled'] = progress
    if progress_interval is not None:
        ctx.obj.setdefault('logging', {})['progress_interval'] = progress_interval


__all__ = ["cli", "get_stores"]
