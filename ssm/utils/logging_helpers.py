"""Logging helper utilities for consistent progress reporting."""

import logging
import click

logger = logging.getLogger(__name__)


def log_progress(
    processed: int,
    total: int | None,
    kept: int = 0,
    skipped: int = 0,
    elapsed_seconds: float = 0.0,
    item_name: str = "candidates"
) -> None:
    """Log progress info with consistent formatting.

    Args:
        processed: Number of items processed so far
        total: Total number of items (None if unknown)
        kept: Count of items that made it into the result
        skipped: Count of skipped items (missing data, faults)
        elapsed_seconds: Time elapsed since start
        item_name: Name of items being processed (e.g., "candidates")
    """
    parts = [
        f"{click.style(f'{processed}', fg='cyan')} {item_name} processed"
    ]

    if total:
        pct = (processed / total * 100) if total > 0 else 0
        parts[0] = f"{click.style(f'{processed}/{total}', fg='cyan')} {item_name} ({pct:.0f}%)"

    if kept > 0:
        parts.append(f"{click.style(f'{kept} kept', fg='green')}")
    if skipped > 0:
        parts.append(f"{click.style(f'{skipped} skipped', fg='yellow')}")

    if elapsed_seconds > 0:
        rate = processed / elapsed_seconds
        parts.append(f"{rate:.1f} {item_name}/s")

    logger.info(" | ".join(parts))


def format_summary(
    ranked: int,
    below_threshold: int,
    skipped: int,
    duration_seconds: float = 0.0,
    item_name: str = "Matches"
) -> str:
    """Format a summary line with colored counts.

    Args:
        ranked: Count of candidates in the ranked result
        below_threshold: Count of candidates dropped by the minimum score
        skipped: Count of candidates skipped because of missing or bad data
        duration_seconds: Total duration in seconds
        item_name: Label for the summary (e.g., "Matches")

    Returns:
        Formatted summary string with colors
    """
    parts = [
        click.style('✓', fg='green'),
        f"{item_name}:",
        click.style(f'{ranked} ranked', fg='green'),
        click.style(f'{below_threshold} below threshold', fg='yellow'),
    ]

    if skipped > 0:
        parts.append(click.style(f'{skipped} skipped', fg='red'))

    if duration_seconds > 0:
        parts.append(f"in {duration_seconds:.2f}s")

    return " ".join(parts)


__all__ = ["log_progress", "format_summary"]
