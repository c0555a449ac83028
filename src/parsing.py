"""GEDCOM loading and date handling utilities."""

from dataclasses import dataclass
from datetime import date
import logging
from pathlib import Path
import re

from ged4py import GedcomReader

from models import Person

logger = logging.getLogger(__name__)


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}

QUALIFIER_PATTERN = re.compile(
    r"^(ABOUT|AFTER|BEFORE|CIRCA|AROUND|ABT\.?|BEF\.?|AFT\.?|EST\.?|CAL\.?|BET\.?|FROM|TO|AND|CA\.?):?\s*",
    flags=re.IGNORECASE,
)

# (pattern, group order) where order names the (year, month, day) groups;
# a month group holding letters is looked up in MONTH_MAP
DATE_PATTERNS = [
    # "1839-08-29", "1746-00-00"
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})$"), ("year", "month", "day")),
    # "25 NOV 1954", "11 Aug. 1968", "02 May1838"
    (re.compile(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$"), ("day", "month", "year")),
    # "NOV 1954", "May, 1837"
    (re.compile(r"^([A-Za-z]+)\.?,?\s*(\d{4})$"), ("month", "year")),
    # "1698"
    (re.compile(r"^(\d{4})$"), ("year",)),
    # "01-27-1920", "1/15/1957", "04 05 1911"
    (re.compile(r"^(\d{1,2})[-/\s]\s*(\d{1,2})[-/\s]\s*(\d{4})$"), ("month", "day", "year")),
    # "April 17, 1850", "SEPT. 17,1910", "Oct.12,1929"
    (re.compile(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$"), ("month", "day", "year")),
]


def _clean_date(date_str: str) -> str:
    s = date_str.strip().strip("()").rstrip("?")
    return QUALIFIER_PATTERN.sub("", s).strip()


def parse_date_string(date_str: str | None) -> str | None:
    """
    Parse a free-text or GEDCOM date string into ISO format (YYYY-MM-DD).
    Returns None if the date cannot be parsed.

    Handles formats like:
    - "25 NOV 1954"
    - "1698"
    - "ABOUT 1905"
    - "JAN 1905"
    - "(01-27-1920)"
    - "(02 May1838)"
    - "(04 05 1911)"
    - "(1839-08-29)"
    - "(SEPT. 17,1910)"
    - "(May, 1837)"
    - "(1789?)"
    - "(About:1746-00-00)"
    - "(Abt.  1798)"
    - "(April 17, 1850)"

    Missing month or day default to 1. Dates that do not exist on the
    calendar ("31 FEB 1950") return None.
    """
    if not date_str:
        return None

    s = _clean_date(date_str)
    if not s:
        return None

    for pattern, order in DATE_PATTERNS:
        match = pattern.match(s)
        if not match:
            continue

        parts = dict(zip(order, match.groups()))
        month_value = parts.get("month", "1")
        if month_value.isdigit():
            month = int(month_value)
        else:
            month = MONTH_MAP.get(month_value.upper().rstrip("."))
            if month is None:
                continue
        year = int(parts["year"])
        day = int(parts.get("day", "1"))

        # Handle 00 month/day as defaults
        month = month or 1
        day = day or 1
        try:
            return date(year, month, day).isoformat()
        except ValueError:
            # "31 FEB 1950", year 0
            continue

    return None


def is_approximate_date(date_str: str | None) -> bool:
    """True for qualified ("ABT", "BEF", ...) or questioned dates."""
    if not date_str:
        return False
    s = date_str.strip().strip("()")
    return s.endswith("?") or QUALIFIER_PATTERN.match(s) is not None


@dataclass
class AgeCalculation:
    years: int
    is_exact: bool
    display: str
    error: str | None = None


def calculate_age(
    birth_date: str | None, death_date: str | None = None, today: date | None = None
) -> AgeCalculation | None:
    """
    Whole years between birth and death (or `today` for the living).

    Returns None when the birth date is missing or cannot be parsed. A death
    date before the birth date is reported in the result, not raised.
    """
    birth_iso = parse_date_string(birth_date)
    if birth_iso is None:
        return None

    if death_date:
        end_iso = parse_date_string(death_date)
        if end_iso is None:
            return AgeCalculation(0, False, "Unknown", error=f"Unparseable death date: {death_date}")
        end = date.fromisoformat(end_iso)
    else:
        end = today or date.today()

    start = date.fromisoformat(birth_iso)
    years = end.year - start.year - ((end.month, end.day) < (start.month, start.day))

    if end < start:
        years = start.year - end.year - ((start.month, start.day) < (end.month, end.day))
        return AgeCalculation(
            years,
            False,
            f"{years} years (dates may be reversed)",
            error="Death date appears to be before birth date",
        )

    is_exact = not is_approximate_date(birth_date) and not is_approximate_date(death_date)
    return AgeCalculation(years, is_exact, f"{years} {'year' if years == 1 else 'years'}")


# ============================================================================
# GEDCOM
# ============================================================================


def strip_xref(xref_id: str) -> str:
    """'@I12@' -> 'I12'."""
    return xref_id.strip("@")


def parse_gedcom(filepath: Path) -> GedcomReader:
    """Parse a GEDCOM file and return the reader object."""
    return GedcomReader(str(filepath))


def extract_name_parts(indi) -> tuple[str, str | None, str | None]:
    """Extract full name, given name, and surname from an individual record."""
    name_rec = indi.sub_tag("NAME")
    if name_rec is None or name_rec.value is None:
        return ("Unknown", None, None)

    name_value = name_rec.value

    # ged4py returns NAME as tuple: (given, surname, suffix)
    if isinstance(name_value, tuple):
        given, surname, suffix = name_value
        parts = [p for p in (given, surname, suffix) if p]
        return (" ".join(parts) or "Unknown", given or None, surname or None)

    # Fallback: string format "Given /Surname/"
    full_name = str(name_value).replace("/", "").strip() or "Unknown"
    givn = name_rec.sub_tag("GIVN")
    surn = name_rec.sub_tag("SURN")
    return (full_name, givn.value if givn else None, surn.value if surn else None)


def extract_event_date(indi, tag: str) -> str | None:
    """Verbatim date of an event tag (BIRT, DEAT, ...)."""
    event = indi.sub_tag(tag)
    if event is None:
        return None
    date_rec = event.sub_tag("DATE")
    # ged4py may return DateValue objects
    if date_rec and date_rec.value:
        return str(date_rec.value)
    return None


def extract_sex(indi) -> str | None:
    sex_rec = indi.sub_tag("SEX")
    return sex_rec.value if sex_rec else None


def _pointer_id(rec, tag: str) -> str | None:
    sub = rec.sub_tag(tag)
    return strip_xref(sub.xref_id) if sub is not None and sub.xref_id else None


def normalize_data(reader: GedcomReader, collection_by: str | None = None) -> list[Person]:
    """
    Extract Person records from parsed GEDCOM data.

    Parents come from the first family listing a person as a child;
    spouses and children from the families where the person is a partner,
    in file order. With `collection_by="surname"` the surname becomes the
    person's collection tag.
    """
    fields: dict[str, dict] = {}

    for rec in reader.records0("INDI"):
        if rec.xref_id is None:
            continue
        full_name, given_name, surname = extract_name_parts(rec)
        fields[strip_xref(rec.xref_id)] = {
            "name": full_name,
            "given_name": given_name,
            "surname": surname,
            "sex": extract_sex(rec),
            "birth_date": extract_event_date(rec, "BIRT"),
            "death_date": extract_event_date(rec, "DEAT"),
            "father_id": None,
            "mother_id": None,
            "spouse_ids": [],
            "child_ids": [],
            "collection": surname if collection_by == "surname" else None,
        }

    for rec in reader.records0("FAM"):
        if rec.xref_id is None:
            continue
        husb_id = _pointer_id(rec, "HUSB")
        wife_id = _pointer_id(rec, "WIFE")
        partners = [pid for pid in (husb_id, wife_id) if pid in fields]
        children = [strip_xref(c.xref_id) for c in rec.sub_tags("CHIL") if c.xref_id]

        for pid in partners:
            for other in partners:
                if other != pid and other not in fields[pid]["spouse_ids"]:
                    fields[pid]["spouse_ids"].append(other)
            for child_id in children:
                if child_id not in fields[pid]["child_ids"]:
                    fields[pid]["child_ids"].append(child_id)

        for child_id in children:
            child = fields.get(child_id)
            if child is None:
                continue
            if child["father_id"] is None and child["mother_id"] is None:
                child["father_id"] = husb_id
                child["mother_id"] = wife_id

    people = [
        Person(
            id=pid,
            spouse_ids=tuple(f.pop("spouse_ids")),
            child_ids=tuple(f.pop("child_ids")),
            **f,
        )
        for pid, f in fields.items()
    ]
    logger.debug("Loaded %d people from GEDCOM", len(people))
    return people


def load_people(filepath: Path, collection_by: str | None = None) -> list[Person]:
    """Read a GEDCOM file into Person records."""
    with parse_gedcom(filepath) as reader:
        return normalize_data(reader, collection_by)
