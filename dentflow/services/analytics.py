from collections import Counter
from datetime import MAXYEAR, date, datetime, timezone, tzinfo
from typing import Iterable

# (label, min age, max age inclusive); None = open ended
AGE_GROUPS = (
    ("0-12", 0, 12),
    ("13-19", 13, 19),
    ("20-35", 20, 35),
    ("36-50", 36, 50),
    ("51-65", 51, 65),
    ("65+", 66, None),
)
UNKNOWN = "Unknown"


def age_on(dob: date | None, today: date) -> int | None:
    if dob is None or dob > today:
        return None
    return today.year - dob.year - ((today.month, today.day) < (dob.month, dob.day))


def age_group(age: int | None) -> str:
    if age is None:
        return UNKNOWN
    for label, lo, hi in AGE_GROUPS:
        if age >= lo and (hi is None or age <= hi):
            return label
    return UNKNOWN


def bucket_ages(dobs: Iterable[date | None], today: date) -> list[dict]:
    """Counts per age group in AGE_GROUPS order; empty groups are omitted."""
    counts = Counter(age_group(age_on(d, today)) for d in dobs)
    order = [label for label, _, _ in AGE_GROUPS] + [UNKNOWN]
    return [{"age_group": label, "total": counts[label]} for label in order if counts[label]]


# ---------- calendar buckets ----------
# Timestamps are stored as naive UTC; years and months are the clinic's.

def to_clinic_time(ts: datetime, tz: tzinfo) -> datetime:
    return ts.replace(tzinfo=timezone.utc).astimezone(tz)


def _naive_utc(ts: datetime) -> datetime:
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def year_bounds_utc(year: int, tz: tzinfo) -> tuple[datetime, datetime | None]:
    """[start, end) of the clinic's calendar year in stored (naive UTC) terms; end is None for MAXYEAR."""
    start = _naive_utc(datetime(year, 1, 1, tzinfo=tz))
    end = None if year >= MAXYEAR else _naive_utc(datetime(year + 1, 1, 1, tzinfo=tz))
    return start, end


def count_by_year(stamps: Iterable[datetime | None], tz: tzinfo) -> list[dict]:
    counts = Counter(to_clinic_time(ts, tz).year for ts in stamps if ts is not None)
    return [{"year": y, "total": counts[y]} for y in sorted(counts)]


def count_by_month(stamps: Iterable[datetime | None], tz: tzinfo, year: int) -> list[dict]:
    local = (to_clinic_time(ts, tz) for ts in stamps if ts is not None)
    counts = Counter(t.month for t in local if t.year == year)
    return [{"year": year, "month": m, "total": counts[m]} for m in sorted(counts)]


def count_by_gender(rows: Iterable[tuple[datetime | None, str | None]], tz: tzinfo, year: int) -> list[dict]:
    """rows are (created_at, gender); a blank gender counts as Unknown."""
    counts = Counter(
        (gender or "").strip() or UNKNOWN
        for ts, gender in rows
        if ts is not None and to_clinic_time(ts, tz).year == year
    )
    return [{"year": year, "gender": g, "total": counts[g]} for g in sorted(counts)]
