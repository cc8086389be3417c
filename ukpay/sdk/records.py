"""
Weekly pay records and form state storage.

This module contains all business logic for saving weeks and the current
form state. CLI commands should be thin wrappers that call these functions.

Storage
-------

Everything lives in one JSON file (store.json in the data directory) used
as a key-value store:

    form_data  -> last form inputs (strings, as typed)
    weeks      -> list of WeeklyRecord dicts, newest save first

Writes replace the whole file through a temporary file and os.replace, so
an interrupted write never truncates the store. There is no locking: the
last write wins.
A corrupt file is logged and read as empty rather than raising, so a bad
store never blocks a calculation.

Weeks and paydays
-----------------

A week is identified by its start date. Pay is in arrears: the week ends six
days after it starts, and payday is eleven days after the start (the Friday
of the following week for a Monday start). Paydays are unique: saving a
second week with the same payday either replaces the first (overwrite=True)
or raises DuplicatePaydayError. At most MAX_WEEKS records are kept.

Comparison rows are recomputed from each record's stored inputs with the
current rate table, so a rate correction is reflected in old weeks too.
"""

import hashlib
import json
import logging
import os
import tempfile
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import ValidationError as SchemaValidationError

from .config import get_setting, get_store_path
from .deductions import ValidationError, compute
from .schemas import DEFAULT_TAX_CODE, DeductionInput, WeeklyRecord
from .taxes.rules import DEFAULT_TAX_YEAR

# Configure logging based on LOG_LEVEL environment variable
_log_level = os.environ.get("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=getattr(logging, _log_level, logging.INFO),
    format="%(asctime)s.%(msecs)03d %(levelname)s: %(message)s",
    datefmt="%H:%M:%S"
)
logger = logging.getLogger(__name__)

FORM_DATA_KEY = "form_data"
WEEKS_KEY = "weeks"

MAX_WEEKS = 20
WEEK_END_OFFSET_DAYS = 6
PAYDAY_OFFSET_DAYS = 11

FORM_FIELDS = (
    "pay_rate",
    "hours_worked",
    "tax_code",
    "pension_percent",
    "child_support",
    "other_deductions",
    "week_start",
)
DEFAULT_PENSION_PERCENT = "3.9"


class DuplicatePaydayError(Exception):
    """Raised when a saved week already has the same payday."""
    def __init__(self, payday: date):
        self.payday = payday
        super().__init__(
            f"A week with payday {payday.strftime('%d/%m/%Y')} already exists. "
            f"Use overwrite to replace it."
        )


# =============================================================================
# KEY-VALUE STORE
# =============================================================================

class JsonStore:
    """Key-value store backed by a single JSON file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_store_path()

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}

        try:
            with open(self.path, "r") as f:
                contents = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Store file {self.path} is corrupt, treating as empty: {e}")
            return {}

        if not isinstance(contents, dict):
            logger.warning(f"Store file {self.path} is not a JSON object, treating as empty")
            return {}
        return contents

    def get(self, key: str) -> Any:
        """Return the JSON value stored under key, or None."""
        value = self._load().get(key)
        logger.debug(f"Loaded key {key}: {'found' if value is not None else 'not found'}")
        return value

    def set(self, key: str, value: Any) -> None:
        """Store a JSON-serializable value under key."""
        contents = self._load()
        contents[key] = value

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write beside the store and swap in, so a failed write leaves the old file
        fd, tmp_name = tempfile.mkstemp(prefix=".store-", suffix=".json", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(contents, f, indent=2)
            os.replace(tmp_name, self.path)
        except BaseException:
            os.unlink(tmp_name)
            raise
        logger.debug(f"Saved key {key} to {self.path}")


def _store(store: Optional[JsonStore]) -> JsonStore:
    return store if store is not None else JsonStore()


# =============================================================================
# WEEK DATES
# =============================================================================

def parse_week_start(value: Union[str, date, None]) -> date:
    """Parse a week start date (YYYY-MM-DD).

    Raises:
        ValidationError: If the date is missing or malformed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value:
        raise ValidationError(["week start date is required"])
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError([f"week start date must be YYYY-MM-DD, got {value!r}"])


def week_dates(week_start: Union[str, date]) -> Tuple[date, date, date]:
    """Get (week_start, week_end, payday) for a week.

    Example:
        week_dates("2024-06-03") -> (2024-06-03, 2024-06-09, 2024-06-14)
    """
    start = parse_week_start(week_start)
    return (
        start,
        start + timedelta(days=WEEK_END_OFFSET_DAYS),
        start + timedelta(days=PAYDAY_OFFSET_DAYS),
    )


def default_week_start(today: Optional[date] = None) -> date:
    """Monday of the week containing today."""
    today = today or date.today()
    return today - timedelta(days=today.weekday())


# =============================================================================
# WEEKLY RECORDS
# =============================================================================

def _generate_record_id(payday: date, timestamp: str) -> str:
    """Generate a short record ID from payday and save time.

    Returns first 8 chars of hash for brevity.
    """
    content = f"week|{payday.isoformat()}|{timestamp}"
    return hashlib.sha256(content.encode()).hexdigest()[:8]


def _load_weeks(store: JsonStore) -> List[WeeklyRecord]:
    weeks = []
    for raw in store.get(WEEKS_KEY) or []:
        try:
            weeks.append(WeeklyRecord.model_validate(raw))
        except SchemaValidationError as e:
            record_id = raw.get("id", "?") if isinstance(raw, dict) else "?"
            logger.warning(f"Skipping unreadable week record {record_id}: {e}")
    return weeks


def _save_weeks(store: JsonStore, weeks: List[WeeklyRecord]) -> None:
    store.set(WEEKS_KEY, [week.model_dump(mode="json") for week in weeks])


def list_weeks(store: Optional[JsonStore] = None) -> List[WeeklyRecord]:
    """List saved weeks in stored order (most recently added first)."""
    return _load_weeks(_store(store))


def get_week(record_id: str, store: Optional[JsonStore] = None) -> Optional[WeeklyRecord]:
    """Get a saved week by ID, or None."""
    for week in _load_weeks(_store(store)):
        if week.id == record_id:
            return week
    return None


def save_week(
    week_start: Union[str, date, None],
    inputs: DeductionInput,
    store: Optional[JsonStore] = None,
    overwrite: bool = False,
    tax_year: str = DEFAULT_TAX_YEAR,
) -> WeeklyRecord:
    """Compute and save a week.

    Args:
        week_start: First day of the worked week (YYYY-MM-DD or date)
        inputs: Calculation inputs for the week
        store: Store to use (default: store.json in the data directory)
        overwrite: Replace an existing week with the same payday
        tax_year: Rate table to use

    Returns:
        The saved WeeklyRecord

    Raises:
        ValidationError: If the date is missing or inputs are invalid
        DuplicatePaydayError: If the payday exists and overwrite is False
    """
    store = _store(store)
    start, end, payday = week_dates(week_start)
    result = compute(inputs, tax_year=tax_year)

    timestamp = datetime.now().isoformat()
    record = WeeklyRecord(
        id=_generate_record_id(payday, timestamp),
        week_start=start,
        week_end=end,
        payday=payday,
        inputs=inputs,
        result=result,
        timestamp=timestamp,
    )

    weeks = _load_weeks(store)
    existing = next((i for i, week in enumerate(weeks) if week.payday == payday), None)

    if existing is not None:
        if not overwrite:
            raise DuplicatePaydayError(payday)
        weeks[existing] = record
        logger.info(f"Updated week with payday {payday.isoformat()}")
    else:
        weeks.insert(0, record)
        logger.info(f"Saved week with payday {payday.isoformat()}")

    # Keep only the most recent MAX_WEEKS entries
    del weeks[MAX_WEEKS:]

    _save_weeks(store, weeks)
    return record


def delete_week(record_id: str, store: Optional[JsonStore] = None) -> bool:
    """Delete a saved week.

    Returns:
        True if a week was removed, False if the ID was not found
    """
    store = _store(store)
    weeks = _load_weeks(store)
    remaining = [week for week in weeks if week.id != record_id]
    if len(remaining) == len(weeks):
        return False
    _save_weeks(store, remaining)
    return True


def comparison_rows(
    store: Optional[JsonStore] = None,
    tax_year: str = DEFAULT_TAX_YEAR,
) -> List[Dict[str, Any]]:
    """Build comparison table rows, newest payday first.

    Each row is recomputed from the stored inputs on a weekly basis with
    the current rate table. Child support and other deductions are
    combined into a single "other" column.
    """
    rows = []
    weeks = sorted(_load_weeks(_store(store)), key=lambda w: w.payday, reverse=True)

    for week in weeks:
        result = compute(week.inputs.model_copy(update={"frequency": "weekly"}), tax_year=tax_year)
        rows.append({
            "id": week.id,
            "payday": week.payday,
            "hours_worked": week.inputs.hours_worked,
            "gross_pay": result.gross_pay,
            "income_tax": result.income_tax,
            "national_insurance": result.national_insurance,
            "pension": result.pension,
            "other": result.child_support + result.other_deductions,
            "total_deductions": result.total_deductions,
            "net_pay": result.net_pay,
        })

    return rows


# =============================================================================
# FORM STATE
# =============================================================================

def form_defaults() -> Dict[str, str]:
    """Defaults for a new user: standard cumulative code and 3.9% pension."""
    return {
        "tax_code": get_setting("default_tax_code", DEFAULT_TAX_CODE),
        "pension_percent": DEFAULT_PENSION_PERCENT,
    }


def load_form_state(store: Optional[JsonStore] = None) -> Dict[str, str]:
    """Load the saved form inputs, with defaults for anything blank."""
    saved = _store(store).get(FORM_DATA_KEY)
    if not isinstance(saved, dict):
        if saved is not None:
            logger.warning(f"Stored {FORM_DATA_KEY} is not an object, using defaults")
        saved = {}
    state = form_defaults()
    for key in FORM_FIELDS:
        value = saved.get(key)
        if value not in (None, ""):
            state[key] = str(value)
    return state


def save_form_state(form: Dict[str, Any], store: Optional[JsonStore] = None) -> Dict[str, str]:
    """Save form inputs. Unknown keys are dropped, values stored as strings.

    Returns:
        The stored form dict
    """
    state = {key: ("" if form.get(key) is None else str(form[key])) for key in FORM_FIELDS}
    _store(store).set(FORM_DATA_KEY, state)
    return state


def form_from_week(week: WeeklyRecord) -> Dict[str, Any]:
    """Form values for a saved week: its inputs and start date."""
    form = {key: getattr(week.inputs, key) for key in FORM_FIELDS if key != "week_start"}
    form["week_start"] = week.week_start.isoformat()
    return form


def load_week_into_form(record_id: str, store: Optional[JsonStore] = None) -> Optional[WeeklyRecord]:
    """Copy a saved week's inputs and start date into the form state.

    The next calculation then starts from that week, ready to edit and save
    again with overwrite.

    Returns:
        The loaded WeeklyRecord, or None if the ID was not found (the form
        state is left unchanged)
    """
    store = _store(store)
    week = get_week(record_id, store)
    if week is None:
        return None

    save_form_state(form_from_week(week), store)
    logger.info(f"Loaded week with payday {week.payday.isoformat()} into form")
    return week
