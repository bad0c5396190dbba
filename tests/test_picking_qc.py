from __future__ import annotations

import unittest
from uuid import uuid4

from garment_erp.core.errors import BusinessRuleError
from garment_erp.services.picking import PickLine, apply_picks
from garment_erp.services.qc import (
    QcDecision,
    QcState,
    apply_qc_decision,
    complement_quantities,
    needs_qc,
    pass_rate,
    summarize_orders,
)


class PickingTests(unittest.TestCase):
    def test_remaining_adds_back_rejected_pieces(self) -> None:
        line = PickLine("M", assigned=10, picked=10, rejected=3)
        self.assertEqual(line.remaining(), 3)
        self.assertEqual(line.remaining(new_picks=2), 1)
        self.assertEqual(line.picked_after(3), 10)

    def test_picked_never_exceeds_assigned(self) -> None:
        line = PickLine("S", assigned=10, picked=8)
        self.assertEqual(line.picked_after(5), 10)

    def test_apply_picks(self) -> None:
        lines = [PickLine("S", 10, 4), PickLine("M", 5, 5, rejected=2)]
        result = apply_picks(lines, {"S": 6, "M": 2, "L": 0})
        self.assertEqual(result, {"S": 10, "M": 5})

    def test_apply_picks_rejects_over_picking(self) -> None:
        lines = [PickLine("S", 10, 4)]
        with self.assertRaises(BusinessRuleError) as ctx:
            apply_picks(lines, {"S": 7})
        self.assertEqual(ctx.exception.details["remaining"], 6)

    def test_apply_picks_validation(self) -> None:
        lines = [PickLine("S", 10, 4)]
        with self.assertRaises(BusinessRuleError):
            apply_picks(lines, {"XL": 1})
        with self.assertRaises(BusinessRuleError):
            apply_picks(lines, {"S": -1})
        with self.assertRaises(BusinessRuleError):
            apply_picks(lines, {"S": 0})


class QcTests(unittest.TestCase):
    def test_needs_qc(self) -> None:
        self.assertEqual(needs_qc(8, 0, 0, False), 8)
        self.assertEqual(needs_qc(10, 5, 2, True), 3)
        # rejects replaced by re-picks wait again
        self.assertEqual(needs_qc(10, 7, 3, True), 3)
        self.assertEqual(needs_qc(10, 10, 0, True), 0)

    def test_complement_quantities(self) -> None:
        self.assertEqual(complement_quantities(10, approved=7), (7, 3))
        self.assertEqual(complement_quantities(10, rejected=12), (0, 10))
        self.assertEqual(complement_quantities(10), (0, 0))

    def test_decision_accumulates(self) -> None:
        state = QcState("M", picked=10, prev_approved=5, prev_rejected=0, has_review=True)
        outcome = apply_qc_decision(state, QcDecision("M", approved=3, rejected=2, remarks=" stains "))
        self.assertEqual((outcome.approved, outcome.rejected), (8, 2))
        self.assertEqual(outcome.remarks, "stains")

    def test_rejection_needs_remarks(self) -> None:
        state = QcState("M", picked=10)
        with self.assertRaises(BusinessRuleError):
            apply_qc_decision(state, QcDecision("M", approved=5, rejected=1, remarks="  "))

    def test_decision_bounded_by_pending(self) -> None:
        state = QcState("M", picked=10, prev_approved=8, has_review=True)
        with self.assertRaises(BusinessRuleError) as ctx:
            apply_qc_decision(state, QcDecision("M", approved=3, rejected=0))
        self.assertEqual(ctx.exception.details["pending"], 2)

    def test_pass_rate(self) -> None:
        self.assertEqual(pass_rate(9, 12), 75)
        self.assertEqual(pass_rate(0, 0), 0)

    def test_summarize_orders(self) -> None:
        o1, o2 = uuid4(), uuid4()
        rows = [
            {"order_id": o1, "order_number": "TUC/25-26/JUL/001", "customer_name": "Acme", "assignment_id": uuid4(),
             "picked": 5, "total": 10, "approved": 3, "rejected": 1},
            {"order_id": o1, "order_number": "TUC/25-26/JUL/001", "customer_name": "Acme", "assignment_id": uuid4(),
             "picked": 4, "total": 4, "approved": 0, "rejected": 0},
            {"order_id": o2, "order_number": "TUC/25-26/JUL/002", "customer_name": "Zen", "assignment_id": uuid4(),
             "picked": 0, "total": 6, "approved": 0, "rejected": 0},
        ]
        summaries = summarize_orders(rows)
        self.assertEqual(len(summaries), 1)
        self.assertEqual(summaries[0].picked, 9)
        self.assertEqual(summaries[0].total, 14)
        self.assertEqual(len(summaries[0].assignment_ids), 2)
        self.assertEqual(summarize_orders(rows, search="acme")[0].order_id, o1)
        self.assertEqual(summarize_orders(rows, search="zen"), [])
