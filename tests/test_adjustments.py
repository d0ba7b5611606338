import unittest

from app.core.adjustments import compute_adjustment, preview_adjustment, validate_adjustment
from app.core.constants import MAX_STOCK_QUANTITY
from app.core.errors import InsufficientStock, InvalidAdjustment, InvalidAdjustmentType


class ComputeAdjustmentTest(unittest.TestCase):
    def test_add_remove_set(self):
        self.assertEqual(compute_adjustment(10, "add", 5), 15)
        self.assertEqual(compute_adjustment(10, "remove", 4), 6)
        self.assertEqual(compute_adjustment(10, "remove", 10), 0)
        self.assertEqual(compute_adjustment(10, "set", 3), 3)
        self.assertEqual(compute_adjustment(10, "set", 0), 0)
        self.assertEqual(compute_adjustment(0, "add", 0), 0)

    def test_remove_more_than_available_is_rejected(self):
        with self.assertRaises(InsufficientStock) as ctx:
            compute_adjustment(3, "remove", 5)
        self.assertEqual(ctx.exception.available, 3)
        self.assertEqual(ctx.exception.requested, 5)
        self.assertEqual(str(ctx.exception), "cannot remove more than current stock (3 available)")

    def test_set_is_idempotent(self):
        once = compute_adjustment(17, "set", 40)
        self.assertEqual(compute_adjustment(once, "set", 40), once)

    def test_add_then_remove_round_trip(self):
        for quantity in (0, 1, 12):
            for amount in (0, 1, 7):
                added = compute_adjustment(quantity, "add", amount)
                self.assertEqual(compute_adjustment(added, "remove", amount), quantity)

    def test_unknown_type(self):
        for adjustment_type in ("subtract", "ADD", "", None):
            with self.subTest(adjustment_type=adjustment_type):
                with self.assertRaises(InvalidAdjustmentType):
                    compute_adjustment(10, adjustment_type, 1)

    def test_invalid_quantity(self):
        for quantity in (-1, None, 2.5, "3", True):
            with self.subTest(quantity=quantity):
                with self.assertRaises(InvalidAdjustment):
                    compute_adjustment(10, "add", quantity)

    def test_quantity_ceiling(self):
        self.assertEqual(compute_adjustment(0, "set", MAX_STOCK_QUANTITY), MAX_STOCK_QUANTITY)
        self.assertEqual(compute_adjustment(1, "add", MAX_STOCK_QUANTITY - 1), MAX_STOCK_QUANTITY)
        with self.assertRaises(InvalidAdjustment):
            compute_adjustment(1, "add", MAX_STOCK_QUANTITY)
        for adjustment_type in ("add", "remove", "set"):
            with self.subTest(adjustment_type=adjustment_type):
                with self.assertRaises(InvalidAdjustment):
                    compute_adjustment(10, adjustment_type, 2**63)

    def test_type_checked_before_quantity(self):
        with self.assertRaises(InvalidAdjustmentType):
            validate_adjustment("bogus", -5)

    def test_errors_are_value_errors(self):
        with self.assertRaises(ValueError):
            validate_adjustment("add", -1)
        with self.assertRaises(ValueError):
            validate_adjustment("bogus", 1)


class PreviewAdjustmentTest(unittest.TestCase):
    def test_allowed_preview(self):
        preview = preview_adjustment(10, "remove", 4)
        self.assertEqual(
            preview,
            {"current_quantity": 10, "new_quantity": 6, "allowed": True, "error": None},
        )

    def test_over_removal_clamps_to_zero(self):
        preview = preview_adjustment(3, "remove", 5)
        self.assertEqual(preview["new_quantity"], 0)
        self.assertFalse(preview["allowed"])
        self.assertIn("3 available", preview["error"])

    def test_invalid_input_keeps_current_quantity(self):
        preview = preview_adjustment(8, "bogus", 2)
        self.assertEqual(preview["new_quantity"], 8)
        self.assertFalse(preview["allowed"])
        self.assertTrue(preview["error"])


if __name__ == "__main__":
    unittest.main()
