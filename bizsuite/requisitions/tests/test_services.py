from datetime import date
from decimal import Decimal
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import DatabaseError
from django.test import TestCase

from bizsuite.exceptions import (
    InvalidTransition,
    PersistenceFailed,
    StageAuthorizationError,
    WorkflowConflict,
    WorkflowValidationError,
)
from bizsuite.notifications.models import Notification
from bizsuite.requisitions import services
from bizsuite.requisitions.models import ApprovalStep, Requisition
from bizsuite.users.models import Role
from bizsuite.users.principal import principal_for

User = get_user_model()


def material_payload(**overrides):
    data = {
        "request_type": "material",
        "title": "Laptops",
        "reason": "New hires",
        "needed_by_date": date(2026, 3, 15),
        "items": [
            {"item_name": "Laptop", "quantity": 2, "unit": "pcs", "unit_cost": 1000}
        ],
    }
    data.update(overrides)
    return data


def cash_payload(**overrides):
    data = {
        "request_type": "cash",
        "title": "Fuel advance",
        "reason": "Site visit",
        "needed_by_date": date(2026, 3, 10),
        "amount_or_value": Decimal("150.00"),
    }
    data.update(overrides)
    return data


class RequisitionServiceTestCase(TestCase):
    def setUp(self):
        def user(email, role):
            return User.objects.create_user(
                email, "pass12345", first_name=email.split("@")[0], role=role
            )

        self.agent = principal_for(user("agent@example.com", Role.SALES_AGENT))
        self.gm = principal_for(user("gm@example.com", Role.GENERAL_MANAGER))
        self.md = principal_for(user("md@example.com", Role.MANAGING_DIRECTOR))
        self.cashier = principal_for(user("cashier@example.com", Role.CASHIER))
        self.store = principal_for(user("store@example.com", Role.STORE_MANAGER))


class CreateRequisitionTests(RequisitionServiceTestCase):
    def test_material_amount_is_items_total(self):
        requisition = services.create_requisition(self.agent, material_payload())
        self.assertEqual(requisition.amount_or_value, Decimal("2000.00"))
        self.assertEqual(requisition.items.count(), 1)
        self.assertEqual(requisition.status, Requisition.Status.PENDING)
        self.assertEqual(requisition.current_stage, Role.GENERAL_MANAGER)
        trail = list(requisition.approval_steps.all())
        self.assertEqual(
            [s.role for s in trail],
            [
                Role.SALES_AGENT,
                Role.GENERAL_MANAGER,
                Role.MANAGING_DIRECTOR,
                Role.STORE_MANAGER,
            ],
        )
        self.assertEqual(trail[0].status, ApprovalStep.Status.APPROVED)

    def test_material_without_items_is_invalid(self):
        with self.assertRaises(WorkflowValidationError):
            services.create_requisition(self.agent, material_payload(items=[]))
        self.assertFalse(Requisition.objects.exists())

    def test_cash_needs_positive_amount(self):
        with self.assertRaises(WorkflowValidationError):
            services.create_requisition(
                self.agent, cash_payload(amount_or_value=Decimal("0"))
            )

    def test_total_too_large_for_amount_column(self):
        items = [
            {
                "item_name": "Turbine",
                "quantity": Decimal("9999999999.99"),
                "unit_cost": Decimal("99999.99"),
            }
        ]
        with self.assertRaises(WorkflowValidationError) as ctx:
            services.create_requisition(self.agent, material_payload(items=items))
        self.assertIn("amount_or_value", ctx.exception.detail)
        self.assertFalse(Requisition.objects.exists())

    def test_cash_amount_too_large(self):
        with self.assertRaises(WorkflowValidationError):
            services.create_requisition(
                self.agent, cash_payload(amount_or_value=Decimal("1000000000000"))
            )

    def test_issuing_roles_cannot_create(self):
        with self.assertRaises(StageAuthorizationError):
            services.create_requisition(self.cashier, cash_payload())

    def test_gm_is_notified_of_new_request(self):
        with self.captureOnCommitCallbacks(execute=True):
            services.create_requisition(self.agent, cash_payload())
        note = Notification.objects.get(recipient_id=self.gm.id)
        self.assertEqual(note.title, "Request Needs Approval")
        self.assertEqual(note.type, Notification.Type.REQUEST)

    def test_failed_write_leaves_nothing_behind(self):
        with patch.object(ApprovalStep, "save", side_effect=DatabaseError("boom")):
            with self.assertRaises(PersistenceFailed):
                services.create_requisition(self.agent, cash_payload())
        self.assertFalse(Requisition.objects.exists())


class DecideRequisitionTests(RequisitionServiceTestCase):
    def test_full_cash_flow(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        requisition = services.decide_requisition(self.gm, requisition.pk, True)
        self.assertEqual(requisition.current_stage, Role.MANAGING_DIRECTOR)
        requisition = services.decide_requisition(self.md, requisition.pk, True)
        self.assertEqual(requisition.status, Requisition.Status.APPROVED)
        self.assertEqual(requisition.current_stage, Role.CASHIER)
        requisition = services.issue_requisition(self.cashier, requisition.pk)
        self.assertEqual(requisition.status, Requisition.Status.ISSUED)

        steps = list(requisition.approval_steps.all())
        self.assertTrue(all(s.status == ApprovalStep.Status.APPROVED for s in steps))
        self.assertEqual(
            [s.acted_by_id for s in steps],
            [self.agent.id, self.gm.id, self.md.id, self.cashier.id],
        )

    def test_wrong_role_leaves_record_untouched(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        with self.assertRaises(StageAuthorizationError):
            services.decide_requisition(self.md, requisition.pk, True)
        requisition.refresh_from_db()
        self.assertEqual(requisition.version, 1)
        self.assertEqual(requisition.current_stage, Role.GENERAL_MANAGER)

    def test_stale_version_conflicts(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        services.decide_requisition(self.gm, requisition.pk, True, expected_version=1)
        with self.assertRaises(WorkflowConflict):
            services.decide_requisition(
                self.md, requisition.pk, True, expected_version=1
            )

    def test_failed_write_rolls_back_decision(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        with patch.object(Requisition, "save", side_effect=DatabaseError("down")):
            with self.assertRaises(PersistenceFailed):
                services.decide_requisition(self.gm, requisition.pk, True)
        step = requisition.approval_steps.get(position=1)
        self.assertEqual(step.status, ApprovalStep.Status.PENDING)
        self.assertIsNone(step.acted_by_id)

    def test_rejection_notifies_creator(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        with self.captureOnCommitCallbacks(execute=True):
            services.decide_requisition(self.gm, requisition.pk, False)
        note = Notification.objects.get(recipient_id=self.agent.id)
        self.assertEqual(note.title, "Request Rejected")

    def test_full_approval_notifies_issuer_and_creator(self):
        requisition = services.create_requisition(self.agent, material_payload())
        services.decide_requisition(self.gm, requisition.pk, True)
        with self.captureOnCommitCallbacks(execute=True):
            services.decide_requisition(self.md, requisition.pk, True)
        self.assertTrue(
            Notification.objects.filter(
                recipient_id=self.store.id, title="Request Awaiting Issuance"
            ).exists()
        )
        self.assertTrue(
            Notification.objects.filter(
                recipient_id=self.agent.id, title="Request Approved"
            ).exists()
        )

    def test_repeat_issue_keeps_version(self):
        requisition = services.create_requisition(self.agent, material_payload())
        services.decide_requisition(self.gm, requisition.pk, True)
        services.decide_requisition(self.md, requisition.pk, True)
        issued = services.issue_requisition(self.store, requisition.pk)
        again = services.issue_requisition(self.store, requisition.pk)
        self.assertEqual(again.status, Requisition.Status.DELIVERED)
        self.assertEqual(again.version, issued.version)


class EditAndCancelTests(RequisitionServiceTestCase):
    def test_creator_edits_items_before_any_decision(self):
        requisition = services.create_requisition(self.agent, material_payload())
        updated = services.update_requisition(
            self.agent,
            requisition.pk,
            {"items": [{"item_name": "Monitor", "quantity": 3, "unit_cost": 200}]},
        )
        self.assertEqual(updated.amount_or_value, Decimal("600.00"))
        self.assertEqual(list(updated.items.values_list("item_name", flat=True)), ["Monitor"])
        self.assertEqual(updated.version, 2)

    def test_edit_after_first_approval_is_refused(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        services.decide_requisition(self.gm, requisition.pk, True)
        with self.assertRaises(InvalidTransition):
            services.update_requisition(self.agent, requisition.pk, {"title": "New"})

    def test_cancel(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        with self.assertRaises(StageAuthorizationError):
            services.cancel_requisition(self.gm, requisition.pk)
        requisition = services.cancel_requisition(self.agent, requisition.pk)
        self.assertEqual(requisition.status, Requisition.Status.CANCELLED)


class VisibilityTests(RequisitionServiceTestCase):
    def test_queues_by_stage(self):
        requisition = services.create_requisition(self.agent, cash_payload())
        self.assertEqual(list(services.awaiting_approval(self.gm)), [requisition])
        self.assertEqual(list(services.awaiting_approval(self.md)), [])
        services.decide_requisition(self.gm, requisition.pk, True)
        services.decide_requisition(self.md, requisition.pk, True)
        self.assertEqual(list(services.awaiting_issuance(self.cashier)), [requisition])
        self.assertEqual(list(services.awaiting_issuance(self.store)), [])

    def test_agent_sees_only_own(self):
        services.create_requisition(self.agent, cash_payload())
        other = principal_for(
            User.objects.create_user(
                "other@example.com", "pass12345", first_name="O", role=Role.SALES_AGENT
            )
        )
        self.assertEqual(services.visible_requisitions(other).count(), 0)
        self.assertEqual(services.visible_requisitions(self.gm).count(), 1)
