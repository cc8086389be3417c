"""Tests for weekly records and form state storage.

Uses isolated directories via tmp_path and UK_PAY_CONFIG_PATH
to avoid touching real data.
"""

import json
from datetime import date, timedelta
from decimal import Decimal

import pytest

from ukpay.sdk import records
from ukpay.sdk.deductions import ValidationError
from ukpay.sdk.schemas import DeductionInput


# === FIXTURES ===


@pytest.fixture
def isolated_env(tmp_path, monkeypatch):
    """Set up isolated config and data directories."""
    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"

    config_dir.mkdir()
    data_dir.mkdir()

    monkeypatch.setenv("UK_PAY_CONFIG_PATH", str(config_dir))

    settings = {"data_dir": str(data_dir)}
    (config_dir / "settings.json").write_text(json.dumps(settings))

    return {
        "config_dir": config_dir,
        "data_dir": data_dir,
        "store_path": data_dir / "store.json",
    }


@pytest.fixture
def store(isolated_env):
    return records.JsonStore()


def make_input(hours="40", **overrides) -> DeductionInput:
    values = {"pay_rate": "12.50", "hours_worked": hours, "pension_percent": "0"}
    values.update(overrides)
    return DeductionInput(**values)


# === KEY-VALUE STORE ===


class TestJsonStore:

    def test_default_path_is_in_data_dir(self, isolated_env, store):
        assert store.path == isolated_env["store_path"]

    def test_missing_key_returns_none(self, store):
        assert store.get("anything") is None

    def test_set_then_get(self, store):
        store.set("form_data", {"pay_rate": "12.50"})
        store.set("other", [1, 2, 3])

        assert store.get("form_data") == {"pay_rate": "12.50"}
        assert store.get("other") == [1, 2, 3]

    def test_last_write_wins(self, store):
        store.set("key", "first")
        store.set("key", "second")
        assert store.get("key") == "second"

    def test_corrupt_file_reads_as_empty(self, isolated_env, store):
        isolated_env["store_path"].write_text("{not json")

        assert store.get("weeks") is None
        assert records.list_weeks(store) == []

    def test_non_object_file_reads_as_empty(self, isolated_env, store):
        isolated_env["store_path"].write_text("[1, 2]")
        assert store.get("weeks") is None

    def test_failed_write_keeps_existing_file(self, isolated_env, store, monkeypatch):
        store.set("form_data", {"pay_rate": "12.50"})
        before = isolated_env["store_path"].read_text()

        def broken_dump(obj, f, **kwargs):
            f.write('{"form_data": ')
            raise OSError("disk full")

        monkeypatch.setattr(records.json, "dump", broken_dump)
        with pytest.raises(OSError, match="disk full"):
            store.set("weeks", [])
        monkeypatch.undo()

        assert isolated_env["store_path"].read_text() == before
        assert store.get("form_data") == {"pay_rate": "12.50"}
        # No temporary files left beside the store
        assert [p.name for p in isolated_env["data_dir"].iterdir()] == ["store.json"]


# === WEEK DATES ===


class TestWeekDates:

    def test_end_and_payday(self):
        start, end, payday = records.week_dates("2024-06-03")

        assert start == date(2024, 6, 3)
        assert end == date(2024, 6, 9)
        assert payday == date(2024, 6, 14)

    def test_accepts_date(self):
        assert records.week_dates(date(2024, 6, 3))[2] == date(2024, 6, 14)

    @pytest.mark.parametrize("value", [None, ""])
    def test_missing_date(self, value):
        with pytest.raises(ValidationError, match="required"):
            records.week_dates(value)

    def test_malformed_date(self):
        with pytest.raises(ValidationError, match="YYYY-MM-DD"):
            records.week_dates("03/06/2024")

    @pytest.mark.parametrize("today", [date(2024, 6, 3), date(2024, 6, 5), date(2024, 6, 9)])
    def test_default_week_start_is_monday(self, today):
        assert records.default_week_start(today) == date(2024, 6, 3)


# === WEEKLY RECORDS ===


class TestSaveWeek:

    def test_save_computes_and_stores(self, isolated_env, store):
        record = records.save_week("2024-06-03", make_input(), store=store)

        assert record.payday == date(2024, 6, 14)
        assert record.result.net_pay == Decimal("417.39")
        assert len(record.id) == 8

        raw = json.loads(isolated_env["store_path"].read_text())
        assert raw["weeks"][0]["payday"] == "2024-06-14"
        assert raw["weeks"][0]["result"]["net_pay"] == "417.39"

    def test_reload_matches(self, store):
        saved = records.save_week("2024-06-03", make_input(), store=store)
        assert records.get_week(saved.id, store) == saved

    def test_new_weeks_inserted_first(self, store):
        records.save_week("2024-06-03", make_input(), store=store)
        records.save_week("2024-05-27", make_input(), store=store)

        paydays = [week.payday for week in records.list_weeks(store)]
        assert paydays == [date(2024, 6, 7), date(2024, 6, 14)]

    def test_duplicate_payday_rejected(self, store):
        records.save_week("2024-06-03", make_input(), store=store)

        with pytest.raises(records.DuplicatePaydayError) as exc_info:
            records.save_week("2024-06-03", make_input(hours="45"), store=store)

        assert exc_info.value.payday == date(2024, 6, 14)
        assert len(records.list_weeks(store)) == 1

    def test_duplicate_payday_overwrite(self, store):
        records.save_week("2024-06-03", make_input(), store=store)
        records.save_week("2024-05-27", make_input(), store=store)
        records.save_week("2024-06-03", make_input(hours="45"), store=store, overwrite=True)

        weeks = records.list_weeks(store)
        assert len(weeks) == 2
        # Replaced in place, not moved to the front
        assert weeks[1].payday == date(2024, 6, 14)
        assert weeks[1].inputs.hours_worked == Decimal("45")

    def test_capped_at_max_weeks(self, store):
        first = date(2024, 1, 1)
        for i in range(records.MAX_WEEKS + 5):
            records.save_week(first + timedelta(weeks=i), make_input(), store=store)

        weeks = records.list_weeks(store)
        assert len(weeks) == records.MAX_WEEKS
        # Most recent save first; the five oldest saves were dropped
        assert weeks[0].week_start == first + timedelta(weeks=records.MAX_WEEKS + 4)
        assert weeks[-1].week_start == first + timedelta(weeks=5)

    def test_invalid_input_not_saved(self, store):
        with pytest.raises(ValidationError):
            records.save_week("2024-06-03", make_input(hours="0"), store=store)

        assert records.list_weeks(store) == []

    def test_missing_date_not_saved(self, store):
        with pytest.raises(ValidationError):
            records.save_week(None, make_input(), store=store)


class TestDeleteWeek:

    def test_delete_existing(self, store):
        record = records.save_week("2024-06-03", make_input(), store=store)

        assert records.delete_week(record.id, store) is True
        assert records.get_week(record.id, store) is None

    def test_delete_missing(self, store):
        records.save_week("2024-06-03", make_input(), store=store)

        assert records.delete_week("nope", store) is False
        assert len(records.list_weeks(store)) == 1


class TestComparisonRows:

    def test_sorted_newest_payday_first(self, store):
        records.save_week("2024-05-20", make_input(), store=store)
        records.save_week("2024-06-03", make_input(), store=store)
        records.save_week("2024-05-27", make_input(), store=store)

        rows = records.comparison_rows(store)
        assert [row["payday"] for row in rows] == [
            date(2024, 6, 14), date(2024, 6, 7), date(2024, 5, 31),
        ]

    def test_other_combines_fixed_deductions(self, store):
        records.save_week(
            "2024-06-03",
            make_input(child_support="10", other_deductions="5", pension_percent="3.9"),
            store=store,
        )

        row = records.comparison_rows(store)[0]
        assert row["gross_pay"] == Decimal("500.00")
        assert row["income_tax"] == Decimal("51.65")
        assert row["national_insurance"] == Decimal("30.96")
        assert row["pension"] == Decimal("19.50")
        assert row["other"] == Decimal("15.00")
        assert row["net_pay"] == Decimal("382.89")

    def test_recomputed_weekly(self, store):
        """A fortnightly week is shown on the weekly basis."""
        records.save_week("2024-06-03", make_input(frequency="fortnightly"), store=store)

        row = records.comparison_rows(store)[0]
        assert row["income_tax"] == Decimal("51.65")

    def test_empty(self, store):
        assert records.comparison_rows(store) == []


# === FORM STATE ===


class TestFormState:

    def test_defaults_for_new_user(self, store):
        state = records.load_form_state(store)

        assert state["tax_code"] == "C1257L"
        assert state["pension_percent"] == "3.9"
        assert "pay_rate" not in state

    def test_default_tax_code_setting(self, isolated_env, store):
        settings_path = isolated_env["config_dir"] / "settings.json"
        settings = json.loads(settings_path.read_text())
        settings["default_tax_code"] = "1100L"
        settings_path.write_text(json.dumps(settings))

        assert records.load_form_state(store)["tax_code"] == "1100L"

    def test_save_and_load(self, store):
        records.save_form_state({"pay_rate": 12.5, "hours_worked": "40", "tax_code": "K475"}, store)
        state = records.load_form_state(store)

        assert state["pay_rate"] == "12.5"
        assert state["hours_worked"] == "40"
        assert state["tax_code"] == "K475"

    def test_blank_values_fall_back_to_defaults(self, store):
        records.save_form_state({"tax_code": "", "pension_percent": None}, store)
        state = records.load_form_state(store)

        assert state["tax_code"] == "C1257L"
        assert state["pension_percent"] == "3.9"

    def test_unknown_keys_dropped(self, store):
        stored = records.save_form_state({"pay_rate": "10", "colour": "blue"}, store)
        assert "colour" not in stored

    @pytest.mark.parametrize("value", [["12.50", "40"], "12.50", 7])
    def test_non_object_form_data_uses_defaults(self, store, value):
        store.set("form_data", value)
        state = records.load_form_state(store)

        assert state == records.form_defaults()


class TestLoadWeekIntoForm:

    def test_copies_inputs_and_week_start(self, store):
        saved = records.save_week(
            "2024-06-03",
            make_input(tax_code="K475", child_support="10", other_deductions="5", pension_percent="3.9"),
            store=store,
        )

        week = records.load_week_into_form(saved.id, store)
        state = records.load_form_state(store)

        assert week == saved
        assert state["week_start"] == "2024-06-03"
        assert state["tax_code"] == "K475"
        assert Decimal(state["pay_rate"]) == Decimal("12.50")
        assert Decimal(state["hours_worked"]) == Decimal("40")
        assert Decimal(state["pension_percent"]) == Decimal("3.9")
        assert Decimal(state["child_support"]) == Decimal("10")
        assert Decimal(state["other_deductions"]) == Decimal("5")

    def test_unknown_id_leaves_form_unchanged(self, store):
        records.save_form_state({"pay_rate": "9.50", "hours_worked": "20"}, store)

        assert records.load_week_into_form("nope", store) is None
        assert records.load_form_state(store)["pay_rate"] == "9.50"
