import unittest
from datetime import date
from unittest import mock

from sqlalchemy import func, select

from app.core.errors import (
    ConcurrentModification,
    InsufficientStock,
    InvalidAdjustment,
    InvalidAdjustmentType,
    MedicationNotFound,
)
from app.models.medication import Medication
from app.models.stock_log import StockLogEntry
from app.services import stock_service
from app.services.medication_service import deactivate_medication
from app.services.stock_service import (
    StockSnapshot,
    apply_adjustment,
    describe_expiry,
    describe_stock,
    get_expiry_status,
    get_stock_status,
)
from tests.helpers import make_session_factory, register


class StockLedgerTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _quantity(self, medication_id):
        return self.db.execute(
            select(Medication.quantity).where(Medication.id == medication_id)
        ).scalar_one()

    def _logs(self, medication_id):
        return (
            self.db.execute(
                select(StockLogEntry)
                .where(StockLogEntry.medication_id == medication_id)
                .order_by(StockLogEntry.id)
            )
            .scalars()
            .all()
        )

    def _log_total(self, medication_id):
        return self.db.execute(
            select(func.coalesce(func.sum(StockLogEntry.quantity_changed), 0)).where(
                StockLogEntry.medication_id == medication_id
            )
        ).scalar_one()

    def test_register_logs_opening_stock(self):
        medication = register(self.db, quantity=25)
        logs = self._logs(medication.id)
        self.assertEqual(len(logs), 1)
        self.assertEqual(logs[0].change_type, "add")
        self.assertEqual(logs[0].quantity_changed, 25)
        self.assertEqual(logs[0].reason, "Initial stock")

    def test_register_with_zero_stock_has_no_log(self):
        medication = register(self.db, quantity=0)
        self.assertEqual(self._logs(medication.id), [])

    def test_remove_updates_quantity_and_logs(self):
        medication = register(self.db, quantity=10, min_stock_level=5)
        outcome = apply_adjustment(self.db, medication.id, "remove", 4, reason="Dispensed")

        self.assertEqual(outcome.previous_quantity, 10)
        self.assertEqual(outcome.new_quantity, 6)
        self.assertEqual(outcome.quantity_changed, -4)
        self.assertEqual(outcome.stock_status, "inStock")
        self.assertEqual(self._quantity(medication.id), 6)

        last = self._logs(medication.id)[-1]
        self.assertEqual(last.id, outcome.log_id)
        self.assertEqual(last.change_type, "remove")
        self.assertEqual(last.quantity_changed, -4)
        self.assertEqual(last.previous_quantity, 10)
        self.assertEqual(last.new_quantity, 6)
        self.assertEqual(last.reason, "Dispensed")

    def test_loaded_instance_sees_new_quantity(self):
        medication = register(self.db, quantity=10)
        apply_adjustment(self.db, medication.id, "add", 5)
        self.assertEqual(medication.quantity, 15)
        self.assertEqual(medication.version, 1)

    def test_set_logs_signed_delta(self):
        medication = register(self.db, quantity=10)
        outcome = apply_adjustment(self.db, medication.id, "set", 3)
        self.assertEqual(outcome.quantity_changed, -7)
        self.assertEqual(outcome.stock_status, "lowStock")

    def test_set_to_same_quantity_is_logged_with_zero_delta(self):
        medication = register(self.db, quantity=10)
        outcome = apply_adjustment(self.db, medication.id, "set", 10)
        self.assertEqual(outcome.quantity_changed, 0)
        self.assertEqual(len(self._logs(medication.id)), 2)
        self.assertEqual(self._quantity(medication.id), 10)

    def test_add_then_remove_returns_to_start(self):
        medication = register(self.db, quantity=7)
        apply_adjustment(self.db, medication.id, "add", 13)
        apply_adjustment(self.db, medication.id, "remove", 13)
        self.assertEqual(self._quantity(medication.id), 7)

    def test_log_sums_to_quantity(self):
        medication = register(self.db, quantity=20)
        for adjustment_type, amount in (
            ("remove", 5),
            ("add", 12),
            ("set", 9),
            ("remove", 9),
            ("add", 1),
        ):
            apply_adjustment(self.db, medication.id, adjustment_type, amount)
        self.assertEqual(self._quantity(medication.id), 1)
        self.assertEqual(self._log_total(medication.id), 1)

    def test_over_removal_leaves_stock_and_log_untouched(self):
        medication = register(self.db, quantity=3)
        with self.assertRaises(InsufficientStock):
            apply_adjustment(self.db, medication.id, "remove", 5)
        self.assertEqual(self._quantity(medication.id), 3)
        self.assertEqual(len(self._logs(medication.id)), 1)

    def test_invalid_requests_are_rejected_without_writes(self):
        medication = register(self.db, quantity=3)
        with self.assertRaises(InvalidAdjustmentType):
            apply_adjustment(self.db, medication.id, "subtract", 1)
        with self.assertRaises(InvalidAdjustment):
            apply_adjustment(self.db, medication.id, "add", -1)
        self.assertEqual(self._quantity(medication.id), 3)
        self.assertEqual(len(self._logs(medication.id)), 1)

    def test_unknown_medication(self):
        with self.assertRaises(MedicationNotFound):
            apply_adjustment(self.db, 999, "add", 1)

    def test_inactive_medication_cannot_be_adjusted(self):
        medication = register(self.db, quantity=3)
        deactivate_medication(self.db, medication.id)
        with self.assertRaises(MedicationNotFound):
            apply_adjustment(self.db, medication.id, "add", 1)

    def test_failed_log_insert_rolls_back_quantity(self):
        medication = register(self.db, quantity=10)
        with mock.patch.object(self.db, "flush", side_effect=RuntimeError("disk full")):
            with self.assertRaises(RuntimeError):
                stock_service.record_adjustment(self.db, medication.id, "add", 5)
        self.db.rollback()
        self.assertEqual(self._quantity(medication.id), 10)
        self.assertEqual(len(self._logs(medication.id)), 1)


class StaleReadTest(unittest.TestCase):
    """A write based on a stale read must not overwrite a newer quantity."""

    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()
        self.medication = register(self.db, quantity=10)
        # Another request already took 6 out: quantity 4, version 1.
        apply_adjustment(self.db, self.medication.id, "remove", 6)
        self.stale = StockSnapshot(
            medication_id=self.medication.id,
            quantity=10,
            min_stock_level=10,
            version=0,
        )

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _stale_first(self):
        real = stock_service.read_stock_snapshot
        calls = []

        def read(db, medication_id):
            calls.append(medication_id)
            if len(calls) == 1:
                return self.stale
            return real(db, medication_id)

        return read, calls

    def test_retry_recomputes_from_fresh_read(self):
        read, calls = self._stale_first()
        with mock.patch.object(stock_service, "read_stock_snapshot", side_effect=read):
            outcome = apply_adjustment(self.db, self.medication.id, "add", 5)
        self.assertEqual(len(calls), 2)
        self.assertEqual(outcome.previous_quantity, 4)
        self.assertEqual(outcome.new_quantity, 9)

    def test_second_remove_fails_after_retry(self):
        read, _calls = self._stale_first()
        with mock.patch.object(stock_service, "read_stock_snapshot", side_effect=read):
            with self.assertRaises(InsufficientStock):
                apply_adjustment(self.db, self.medication.id, "remove", 6)
        self.assertEqual(describe_stock(self.db, self.medication.id)["quantity"], 4)

    def test_gives_up_after_retry_budget(self):
        with mock.patch.object(stock_service, "read_stock_snapshot", return_value=self.stale):
            with self.assertRaises(ConcurrentModification):
                apply_adjustment(self.db, self.medication.id, "add", 1)
        self.assertEqual(describe_stock(self.db, self.medication.id)["quantity"], 4)
        count = self.db.execute(
            select(func.count(StockLogEntry.id)).where(
                StockLogEntry.medication_id == self.medication.id
            )
        ).scalar_one()
        self.assertEqual(count, 2)


class StatusLookupTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_stock_status(self):
        empty = register(self.db, name="Empty", quantity=0, min_stock_level=5)
        low = register(self.db, name="Low", quantity=5, min_stock_level=5)
        plenty = register(self.db, name="Plenty", quantity=6, min_stock_level=5)
        self.assertEqual(get_stock_status(self.db, empty.id), "outOfStock")
        self.assertEqual(get_stock_status(self.db, low.id), "lowStock")
        self.assertEqual(get_stock_status(self.db, plenty.id), "inStock")

    def test_expiry_status(self):
        medication = register(self.db, quantity=5, expiry_date=date(2024, 1, 31))
        self.assertEqual(
            get_expiry_status(self.db, medication.id, as_of=date(2024, 1, 1)),
            "expiringSoon",
        )
        self.assertEqual(
            get_expiry_status(self.db, medication.id, as_of=date(2024, 2, 1)),
            "expired",
        )
        detail = describe_expiry(self.db, medication.id, as_of=date(2024, 1, 1))
        self.assertEqual(detail["days_until_expiry"], 30)

    def test_expiry_status_without_date(self):
        medication = register(self.db, quantity=5)
        self.assertIsNone(get_expiry_status(self.db, medication.id, as_of=date(2024, 1, 1)))


if __name__ == "__main__":
    unittest.main()
