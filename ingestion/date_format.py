"""Date format estimation for the date column of a CSV preview."""

import logging
from collections import Counter
from typing import Optional, Sequence

from .csv_parser import column_samples
from .metadata import DEFAULT_DATE_FORMAT, DateFormat

logger = logging.getLogger(__name__)


def match_date_format(value: str) -> Optional[DateFormat]:
    """Return the first date shape the value matches, or None."""
    text = value.strip()
    for date_format in DateFormat:
        if date_format.pattern.match(text):
            return date_format
    return None


def estimate_date_format(
    data_preview: Sequence[Sequence[str]], date_column_index: int
) -> str:
    """Estimate the date format used by a column of the preview.

    Every non-empty sample votes for the first shape it matches. The shape with
    the most votes wins; ties go to the shape listed first in ``DateFormat``.
    Without samples or matches the default ``YYYY-MM-DD`` is returned.

    Args:
        data_preview: Preview rows of raw cells
        date_column_index: Index of the date column in each row

    Returns:
        Date format string (a ``DateFormat`` value)
    """
    samples = column_samples(data_preview, date_column_index)
    votes = Counter()
    for sample in samples:
        matched = match_date_format(sample)
        if matched is not None:
            votes[matched] += 1

    if not votes:
        logger.debug(
            f"No date shape matched {len(samples)} samples, "
            f"defaulting to {DEFAULT_DATE_FORMAT.value}"
        )
        return DEFAULT_DATE_FORMAT.value

    order = list(DateFormat)
    winner = max(votes, key=lambda fmt: (votes[fmt], -order.index(fmt)))
    if len(votes) > 1:
        shapes = {fmt.value: count for fmt, count in votes.items()}
        logger.debug(f"Mixed date shapes in preview: {shapes}")
    return winner.value
