"""CSV export of activities."""

from __future__ import annotations

import csv
import logging
import uuid
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from .errors import PersistenceError
from .models import Activity

CSV_COLUMNS = ("id", "start_time", "end_time", "activity_type", "status", "description")
CSV_DATETIME_FMT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)


def default_export_filename(now: Optional[datetime] = None) -> str:
    """``activities_<yyyyMMdd_HHmmss>_<8 hex chars>.csv``."""
    stamp = (now or datetime.now()).strftime("%Y%m%d_%H%M%S")
    return f"activities_{stamp}_{uuid.uuid4().hex[:8]}.csv"


def write_activities_csv(
    activities: Iterable[Activity], stream: TextIO, delimiter: str = ","
) -> int:
    """Write a header and one row per activity; returns the row count.

    Fields containing the delimiter, a quote or a line break are quoted,
    with embedded quotes doubled.
    """
    writer = csv.writer(
        stream,
        delimiter=delimiter,
        quotechar='"',
        quoting=csv.QUOTE_MINIMAL,
        lineterminator="\n",
    )
    writer.writerow(CSV_COLUMNS)
    count = 0
    for activity in activities:
        writer.writerow(
            [
                activity.id,
                activity.start_time.strftime(CSV_DATETIME_FMT),
                activity.end_time.strftime(CSV_DATETIME_FMT) if activity.end_time else "",
                activity.activity_type.name,
                activity.status.name,
                activity.description,
            ]
        )
        count += 1
    return count


def export_activities(
    activities: Iterable[Activity], dest: Path, delimiter: str = ","
) -> int:
    dest = Path(dest)
    try:
        with dest.open("w", newline="", encoding="utf-8") as f:
            count = write_activities_csv(activities, f, delimiter)
    except OSError as exc:
        raise PersistenceError(f"Error exporting data to {dest}: {exc}", "export") from exc
    logger.info("Exported %d activities to %s", count, dest)
    return count
