from __future__ import annotations

import unittest
from uuid import uuid4

from garment_erp.core.errors import BusinessRuleError
from garment_erp.services.allocation import (
    BatchShare,
    SizeSlot,
    clamp_share_quantity,
    effective_assigned_quantity,
    merge_quantities,
    plan_batch_distribution,
    plan_batch_reassignment,
    plan_cutting_reassignment,
    plan_cutting_update,
    split_proportionally,
    validate_fabric_usage,
)


class BatchDistributionTests(unittest.TestCase):
    def setUp(self) -> None:
        self.order_sizes = {"S": 10, "M": 5}
        self.b1, self.b2, self.b3 = uuid4(), uuid4(), uuid4()

    def test_balanced_split_drops_empty_shares(self) -> None:
        shares = [
            BatchShare(self.b1, {"S": 6, "M": 5}),
            BatchShare(self.b2, {"S": 4, "M": 0}),
            BatchShare(self.b3, {}),
        ]
        plan = plan_batch_distribution(self.order_sizes, shares)
        self.assertEqual([s.batch_id for s in plan], [self.b1, self.b2])
        self.assertEqual(plan[1].size_quantities, {"S": 4})

    def test_every_size_must_be_fully_distributed(self) -> None:
        shares = [BatchShare(self.b1, {"S": 8, "M": 5})]
        with self.assertRaises(BusinessRuleError) as ctx:
            plan_batch_distribution(self.order_sizes, shares)
        self.assertEqual(ctx.exception.details, {"remaining": {"S": 2}})

    def test_over_distribution_is_rejected(self) -> None:
        shares = [BatchShare(self.b1, {"S": 10, "M": 5}), BatchShare(self.b2, {"S": 1})]
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution(self.order_sizes, shares)

    def test_batch_may_appear_once(self) -> None:
        shares = [BatchShare(self.b1, {"S": 5}), BatchShare(self.b1, {"S": 5, "M": 5})]
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution(self.order_sizes, shares)

    def test_unknown_size_and_negative_quantity(self) -> None:
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution(self.order_sizes, [BatchShare(self.b1, {"S": 10, "M": 5, "XL": 1})])
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution(self.order_sizes, [BatchShare(self.b1, {"S": 11, "M": 5}), BatchShare(self.b2, {"S": -1})])

    def test_empty_inputs(self) -> None:
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution({}, [BatchShare(self.b1, {"S": 1})])
        with self.assertRaises(BusinessRuleError):
            plan_batch_distribution(self.order_sizes, [])

    def test_clamp_respects_other_batches(self) -> None:
        shares = [BatchShare(self.b1, {"S": 6}), BatchShare(self.b2, {"S": 2})]
        self.assertEqual(clamp_share_quantity(self.order_sizes, shares, self.b2, "S", 9), 4)
        self.assertEqual(clamp_share_quantity(self.order_sizes, shares, self.b2, "S", -3), 0)
        self.assertEqual(clamp_share_quantity(self.order_sizes, shares, self.b2, "XL", 3), 0)


class BatchReassignmentTests(unittest.TestCase):
    def setUp(self) -> None:
        self.slots = [SizeSlot("S", 10, 4), SizeSlot("M", 5, 5)]

    def test_all_moves_every_unpicked_piece(self) -> None:
        plan = plan_batch_reassignment(self.slots, "all")
        self.assertEqual(plan.moved, {"S": 6})
        self.assertEqual(plan.total_moved, 6)
        self.assertEqual(plan.source_quantities, {"S": 4, "M": 5})
        self.assertEqual(plan.source_total, 9)

    def test_partial_within_left(self) -> None:
        plan = plan_batch_reassignment(self.slots, "partial", {"S": 3})
        self.assertEqual(plan.moved, {"S": 3})
        self.assertEqual(plan.source_quantities["S"], 7)

    def test_partial_beyond_left_is_rejected(self) -> None:
        with self.assertRaises(BusinessRuleError) as ctx:
            plan_batch_reassignment(self.slots, "partial", {"S": 7})
        self.assertEqual(ctx.exception.details["left"], 6)

    def test_nothing_to_move(self) -> None:
        with self.assertRaises(BusinessRuleError):
            plan_batch_reassignment(self.slots, "partial", {"M": 0})
        with self.assertRaises(BusinessRuleError):
            plan_batch_reassignment([SizeSlot("S", 3, 3)], "all")

    def test_unknown_mode(self) -> None:
        with self.assertRaises(BusinessRuleError):
            plan_batch_reassignment(self.slots, "some")


class CuttingTests(unittest.TestCase):
    def test_effective_quantity_falls_back_to_order_total(self) -> None:
        self.assertEqual(effective_assigned_quantity(None, 120), 120)
        self.assertEqual(effective_assigned_quantity(40, 120), 40)

    def test_split_rounds_half_up(self) -> None:
        self.assertEqual(split_proportionally({"S": 6, "M": 2, "L": 0}, 4), {"S": 3, "M": 1})
        self.assertEqual(split_proportionally({"S": 1, "M": 1}, 1), {"S": 1, "M": 1})
        self.assertEqual(split_proportionally({"S": 0}, 5), {})

    def test_partial_reassignment_keeps_remainder_open(self) -> None:
        plan = plan_cutting_reassignment(None, 100, 30, "partial", quantity=20)
        self.assertEqual(plan.quantity, 20)
        self.assertEqual(plan.left_before, 70)
        self.assertEqual(plan.old_assigned_quantity, 80)
        self.assertFalse(plan.old_completed)

    def test_full_reassignment_completes_old_assignment(self) -> None:
        plan = plan_cutting_reassignment(50, 100, 30, "all", size_left={"S": 10, "M": 10})
        self.assertEqual(plan.quantity, 20)
        self.assertEqual(plan.old_assigned_quantity, 30)
        self.assertTrue(plan.old_completed)
        self.assertEqual(plan.size_split, {"S": 10, "M": 10})

    def test_reassignment_limits(self) -> None:
        with self.assertRaises(BusinessRuleError):
            plan_cutting_reassignment(50, 100, 50, "all")
        with self.assertRaises(BusinessRuleError):
            plan_cutting_reassignment(50, 100, 10, "partial", quantity=41)
        with self.assertRaises(BusinessRuleError):
            plan_cutting_reassignment(50, 100, 10, "partial", quantity=0)

    def test_cutting_update_clamps_to_ordered(self) -> None:
        plan = plan_cutting_update({"S": 10, "M": 5}, {"S": 8}, {"S": 5, "M": 2, "XL": 3})
        self.assertEqual(plan.applied, {"S": 2, "M": 2})
        self.assertEqual(plan.added_total, 4)
        self.assertEqual(plan.cut_by_size, {"S": 10, "M": 2})
        self.assertEqual(plan.cut_total, 12)

    def test_cutting_update_ignores_negative(self) -> None:
        plan = plan_cutting_update({"S": 10}, {}, {"S": -4})
        self.assertEqual(plan.applied, {})
        self.assertEqual(plan.cut_total, 0)

    def test_fabric_usage(self) -> None:
        validate_fabric_usage(0, None, None)
        validate_fabric_usage(5, 12.5, 20.0)
        with self.assertRaises(BusinessRuleError):
            validate_fabric_usage(5, None, 20.0)
        with self.assertRaises(BusinessRuleError):
            validate_fabric_usage(5, 0, 20.0)
        with self.assertRaises(BusinessRuleError):
            validate_fabric_usage(5, 25.0, 20.0)

    def test_merge_quantities(self) -> None:
        self.assertEqual(merge_quantities({"S": 2}, {"S": 1, "M": 4}), {"S": 3, "M": 4})
