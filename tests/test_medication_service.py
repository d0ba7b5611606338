import unittest
from datetime import date

from pydantic import ValidationError

from app.core.errors import MedicationNotFound, SupplierNotFound
from app.schemas.medication import MedicationCreate, MedicationUpdate
from app.schemas.supplier import SupplierCreate
from app.services import medication_service, supplier_service
from tests.helpers import make_session_factory, register


class MedicationRegistryTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_create_applies_default_min_stock_level(self):
        medication = register(self.db, quantity=5, min_stock_level=None)
        self.assertEqual(medication.min_stock_level, 10)
        self.assertTrue(medication.is_active)
        self.assertEqual(medication.version, 0)

    def test_create_with_unknown_supplier(self):
        with self.assertRaises(SupplierNotFound):
            register(self.db, supplier_id=42)

    def test_create_rejects_negative_quantity(self):
        with self.assertRaises(ValidationError):
            MedicationCreate(name="Bad", quantity=-1)

    def test_update_cannot_touch_quantity(self):
        with self.assertRaises(ValidationError):
            MedicationUpdate(quantity=5)

    def test_update_metadata(self):
        medication = register(self.db, quantity=5)
        updated = medication_service.update_medication(
            self.db,
            medication.id,
            MedicationUpdate(dosage="250mg", min_stock_level=2),
        )
        self.assertEqual(updated.dosage, "250mg")
        self.assertEqual(updated.min_stock_level, 2)
        self.assertEqual(updated.quantity, 5)

    def test_get_missing(self):
        with self.assertRaises(MedicationNotFound):
            medication_service.get_medication(self.db, 123)

    def test_deactivate_keeps_record(self):
        medication = register(self.db, quantity=5)
        medication_service.deactivate_medication(self.db, medication.id)
        fetched = medication_service.get_medication(self.db, medication.id)
        self.assertFalse(fetched.is_active)
        self.assertEqual(fetched.quantity, 5)

    def test_list_filters(self):
        empty = register(self.db, name="Insulin", quantity=0, min_stock_level=5)
        low = register(self.db, name="Ibuprofen", quantity=3, min_stock_level=5)
        register(self.db, name="Aspirin", quantity=50, min_stock_level=5)

        out_page = medication_service.list_medications(self.db, out_of_stock=True)
        self.assertEqual([m.id for m in out_page["data"]], [empty.id])

        low_page = medication_service.list_medications(self.db, low_stock=True)
        self.assertEqual([m.id for m in low_page["data"]], [low.id])

        search_page = medication_service.list_medications(self.db, search="i")
        self.assertEqual({m.name for m in search_page["data"]}, {"Insulin", "Ibuprofen", "Aspirin"})

    def test_cursor_pagination(self):
        ids = [register(self.db, name="Med {}".format(i), quantity=1).id for i in range(5)]
        first = medication_service.list_medications(self.db, limit=2)
        self.assertEqual([m.id for m in first["data"]], [ids[4], ids[3]])
        self.assertTrue(first["has_next_page"])

        second = medication_service.list_medications(self.db, limit=2, cursor=first["next_cursor"])
        self.assertEqual([m.id for m in second["data"]], [ids[2], ids[1]])

        last = medication_service.list_medications(self.db, limit=2, cursor=second["next_cursor"])
        self.assertEqual([m.id for m in last["data"]], [ids[0]])
        self.assertFalse(last["has_next_page"])
        self.assertIsNone(last["next_cursor"])

    def test_inventory_overview_flags(self):
        medication = register(
            self.db,
            quantity=3,
            min_stock_level=5,
            expiry_date=date(2024, 1, 20),
        )
        page = medication_service.inventory_overview(self.db, as_of=date(2024, 1, 1))
        item = page["data"][0]
        self.assertEqual(item["id"], medication.id)
        self.assertEqual(item["stock_status"], "lowStock")
        self.assertEqual(item["expiry_status"], "expiringSoon")
        self.assertEqual(item["days_until_expiry"], 19)
        self.assertTrue(item["is_low_stock"])
        self.assertFalse(item["is_out_of_stock"])
        self.assertTrue(item["is_expiring_soon"])

    def test_expiring_soon_excludes_expired_and_far_dates(self):
        soon = register(self.db, name="Soon", quantity=5, expiry_date=date(2024, 1, 10))
        today = register(self.db, name="Today", quantity=5, expiry_date=date(2024, 1, 1))
        register(self.db, name="Expired", quantity=5, expiry_date=date(2023, 12, 1))
        register(self.db, name="Later", quantity=5, expiry_date=date(2024, 6, 1))
        register(self.db, name="Undated", quantity=5)

        items = medication_service.expiring_soon(self.db, days=30, as_of=date(2024, 1, 1))
        self.assertEqual([item["id"] for item in items], [today.id, soon.id])
        self.assertEqual([item["days_until_expiry"] for item in items], [0, 9])


class SupplierRegistryTest(unittest.TestCase):
    def setUp(self):
        self.engine, self.SessionLocal = make_session_factory()
        self.db = self.SessionLocal()

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def test_delete_supplier_keeps_medications(self):
        supplier = supplier_service.create_supplier(self.db, SupplierCreate(name="Acme Pharma"))
        medication = register(self.db, quantity=5, supplier_id=supplier.id)

        supplier_service.delete_supplier(self.db, supplier.id)

        fetched = medication_service.get_medication(self.db, medication.id)
        self.assertIsNone(fetched.supplier_id)
        self.assertEqual(fetched.quantity, 5)
        with self.assertRaises(SupplierNotFound):
            supplier_service.get_supplier(self.db, supplier.id)

    def test_find_by_name(self):
        supplier = supplier_service.create_supplier(self.db, SupplierCreate(name="Acme Pharma"))
        self.assertEqual(supplier_service.find_supplier_by_name(self.db, "Acme Pharma").id, supplier.id)
        self.assertIsNone(supplier_service.find_supplier_by_name(self.db, "Nobody"))
        self.assertEqual(supplier_service.find_supplier_by_name(self.db, " ACME pharma ").id, supplier.id)


if __name__ == "__main__":
    unittest.main()
