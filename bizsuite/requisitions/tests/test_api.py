from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from bizsuite.requisitions.models import Requisition
from bizsuite.users.models import Role

User = get_user_model()

BASE = "/api/requisitions/"


class RequisitionApiTests(APITestCase):
    def setUp(self):
        def user(email, role):
            return User.objects.create_user(
                email, "pass12345", first_name=email.split("@")[0], role=role
            )

        self.agent = user("agent@example.com", Role.SALES_AGENT)
        self.gm = user("gm@example.com", Role.GENERAL_MANAGER)
        self.md = user("md@example.com", Role.MANAGING_DIRECTOR)
        self.cashier = user("cashier@example.com", Role.CASHIER)

    def act_as(self, user):
        self.client.force_authenticate(user=user)

    def create_material(self):
        self.act_as(self.agent)
        resp = self.client.post(
            BASE,
            {
                "request_type": "material",
                "title": "Laptops",
                "reason": "New hires",
                "needed_by_date": "2026-03-15",
                "items": [
                    {"item_name": "Laptop", "quantity": "2", "unit_cost": "1000"}
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        return resp.data

    def test_unauthenticated_is_rejected(self):
        resp = self.client.get(BASE)
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_material_request(self):
        data = self.create_material()
        self.assertEqual(data["amount_or_value"], "2000.00")
        self.assertEqual(data["status"], "Pending")
        self.assertEqual(data["current_stage"], Role.GENERAL_MANAGER)
        self.assertEqual(len(data["approval_trail"]), 4)
        self.assertEqual(data["approval_trail"][0]["user"], "agent@example.com")

    def test_cashier_cannot_create(self):
        self.act_as(self.cashier)
        resp = self.client.post(
            BASE,
            {
                "request_type": "cash",
                "title": "Float",
                "reason": "Till",
                "needed_by_date": "2026-03-15",
                "amount_or_value": "50.00",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_out_of_turn_approval_is_forbidden(self):
        pk = self.create_material()["id"]
        self.act_as(self.md)
        resp = self.client.patch(f"{BASE}{pk}/approve/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(resp.data["detail"], "not_your_turn")
        self.assertEqual(
            Requisition.objects.get(pk=pk).current_stage, Role.GENERAL_MANAGER
        )

    def test_approve_then_stale_version(self):
        pk = self.create_material()["id"]
        self.act_as(self.gm)
        resp = self.client.patch(f"{BASE}{pk}/approve/", {"version": 1}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["current_stage"], Role.MANAGING_DIRECTOR)
        self.assertEqual(resp.data["version"], 2)

        self.act_as(self.md)
        resp = self.client.patch(f"{BASE}{pk}/approve/", {"version": 1}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)

    def test_pending_queue_and_reject(self):
        pk = self.create_material()["id"]
        self.act_as(self.gm)
        resp = self.client.get(f"{BASE}pending/")
        self.assertEqual([r["id"] for r in resp.data], [pk])

        resp = self.client.patch(f"{BASE}{pk}/reject/", {}, format="json")
        self.assertEqual(resp.data["status"], "Rejected")
        resp = self.client.get(f"{BASE}pending/")
        self.assertEqual(resp.data, [])

    def test_unknown_request_is_404(self):
        self.act_as(self.gm)
        resp = self.client.patch(f"{BASE}999/approve/", {}, format="json")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)

    def test_csv_export(self):
        pk = self.create_material()["id"]
        resp = self.client.get(f"{BASE}export/", {"export_format": "csv"})
        self.assertEqual(resp.status_code, 200)
        self.assertIn("requisitions_export.csv", resp["Content-Disposition"])
        lines = resp.content.decode().splitlines()
        self.assertTrue(lines[0].startswith('"ID","Title","Type"'))
        self.assertTrue(lines[1].startswith(f'"{pk}","Laptops","Material"'))

    def test_unsupported_export_format(self):
        self.act_as(self.gm)
        resp = self.client.get(f"{BASE}export/", {"export_format": "docx"})
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
