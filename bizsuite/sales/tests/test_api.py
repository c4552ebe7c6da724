from django.contrib.auth import get_user_model
from rest_framework import status
from rest_framework.test import APITestCase

from bizsuite.sales.models import Order
from bizsuite.users.models import Role

User = get_user_model()

QUOTATIONS = "/api/sales/quotations/"
ORDERS = "/api/sales/orders/"
TARGETS = "/api/sales/targets/"


class SalesApiTests(APITestCase):
    def setUp(self):
        def user(email, role, first_name):
            return User.objects.create_user(
                email, "pass12345", first_name=first_name, role=role
            )

        self.agent = user("agent@example.com", Role.SALES_AGENT, "Ada")
        self.executive = user("exec@example.com", Role.SALES_EXECUTIVE, "Eve")
        self.gm = user("gm@example.com", Role.GENERAL_MANAGER, "Gus")
        self.cashier = user("cash@example.com", Role.CASHIER, "Cy")

    def act_as(self, user):
        self.client.force_authenticate(user=user)

    def patch(self, url, data=None):
        return self.client.patch(url, data or {}, format="json")

    def create_quotation(self):
        self.act_as(self.agent)
        resp = self.client.post(
            QUOTATIONS,
            {
                "customer": "Acme Ltd",
                "date": "2026-03-02",
                "expiry_date": "2026-03-30",
                "items": [
                    {"description": "Drill", "quantity": "2", "unit_price": "80.00"}
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED, resp.data)
        return resp.data

    def test_full_pipeline(self):
        quotation = self.create_quotation()
        self.assertEqual(quotation["status"], "Draft")
        self.assertEqual(quotation["total"], "160.00")
        pk = quotation["id"]

        resp = self.patch(f"{QUOTATIONS}{pk}/request-approval/")
        self.assertEqual(resp.data["status"], "Pending Approval")

        self.act_as(self.executive)
        resp = self.patch(f"{QUOTATIONS}{pk}/mark-sent/")
        self.assertEqual(resp.data["signature_status"], "Pending")

        self.act_as(self.agent)
        resp = self.patch(f"{QUOTATIONS}{pk}/accept/", {"version": 3})
        self.assertEqual(resp.data["status"], "Accepted")

        self.act_as(self.gm)
        resp = self.client.post(f"{QUOTATIONS}{pk}/approve-sale/")
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        self.assertEqual(resp.data["status"], "Awaiting Payment")
        self.assertEqual(resp.data["quotation_id"], pk)
        order_id = resp.data["id"]

        resp = self.client.post(f"{QUOTATIONS}{pk}/approve-sale/")
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)

        self.act_as(self.cashier)
        resp = self.patch(
            f"{ORDERS}{order_id}/receive-payment/", {"payment_method": "card"}
        )
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data["status"], "Processing")
        self.assertEqual(Order.objects.get().total_amount, 160)

    def test_cashier_cannot_create_quotation(self):
        self.act_as(self.cashier)
        resp = self.client.post(
            QUOTATIONS,
            {
                "customer": "Acme Ltd",
                "expiry_date": "2026-03-30",
                "items": [
                    {"description": "Drill", "quantity": "1", "unit_price": "80.00"}
                ],
            },
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_agent_cannot_mark_sent(self):
        pk = self.create_quotation()["id"]
        self.patch(f"{QUOTATIONS}{pk}/request-approval/")
        resp = self.patch(f"{QUOTATIONS}{pk}/mark-sent/")
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)

    def test_agent_sees_only_own_quotations(self):
        self.create_quotation()
        other = User.objects.create_user(
            "bob@example.com", "pass12345", first_name="Bob", role=Role.SALES_AGENT
        )
        self.act_as(other)
        self.assertEqual(self.client.get(QUOTATIONS).data, [])
        self.act_as(self.executive)
        self.assertEqual(len(self.client.get(QUOTATIONS).data), 1)

    def test_quotation_export_xlsx(self):
        self.create_quotation()
        resp = self.client.get(f"{QUOTATIONS}export/", {"export_format": "xlsx"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp["Content-Type"],
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        )
        self.assertTrue(resp.content.startswith(b"PK"))

    def test_targets_upsert_and_list(self):
        self.act_as(self.executive)
        payload = {"agent_name": "Ada", "period": "2026-03", "target_amount": "400"}
        resp = self.client.post(TARGETS, payload, format="json")
        self.assertEqual(resp.status_code, status.HTTP_200_OK, resp.data)
        payload["target_amount"] = "320"
        self.client.post(TARGETS, payload, format="json")

        resp = self.client.get(TARGETS, {"period": "2026-03"})
        self.assertEqual(len(resp.data), 1)
        self.assertEqual(resp.data[0]["target_amount"], "320.00")
        self.assertEqual(resp.data[0]["progress"], "0.00")

    def test_agent_cannot_set_target(self):
        self.act_as(self.agent)
        resp = self.client.post(
            TARGETS,
            {"agent_name": "Ada", "period": "2026-03", "target_amount": "1"},
            format="json",
        )
        self.assertEqual(resp.status_code, status.HTTP_403_FORBIDDEN)
