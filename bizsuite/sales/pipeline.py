"""
Quotation -> order -> payment pipeline.

Quotation: Draft -> Pending Approval -> Sent -> Accepted | Declined.
An accepted quotation can be turned into exactly one order, which starts
as Awaiting Payment and moves to Processing when a cashier receives payment.
Each step is role- or owner-gated; these functions only mutate in memory.
"""

import logging

from bizsuite.exceptions import InvalidTransition, StageAuthorizationError
from bizsuite.sales.models import Order, OrderItem, Quotation
from bizsuite.users.models import Role

logger = logging.getLogger(__name__)

SALE_APPROVER_ROLES = (
    Role.MANAGING_DIRECTOR,
    Role.EXECUTIVE_DIRECTOR,
    Role.GENERAL_MANAGER,
)

# only field agents own quotations
QUOTING_ROLES = (Role.SALES_AGENT,)


def _require_status(obj, expected, action):
    if obj.status != expected:
        raise InvalidTransition(
            detail={
                "detail": f"cannot_{action}",
                "status": obj.status,
                "expected_status": expected,
            }
        )


def _require_agent(quotation, principal, action):
    if quotation.agent_id != principal.id:
        logger.warning(
            "%s refused: quotation=%s user=%s is not the agent=%s",
            action,
            quotation.pk,
            principal.id,
            quotation.agent_id,
        )
        raise StageAuthorizationError(
            detail={"detail": "only_originating_agent", "action": action}
        )


def _require_role(principal, roles, action):
    if principal.role not in roles:
        raise StageAuthorizationError(
            detail={
                "detail": "insufficient_role",
                "action": action,
                "your_role": principal.role,
            }
        )


def request_approval(quotation, principal):
    _require_status(quotation, Quotation.Status.DRAFT, "request_approval")
    _require_agent(quotation, principal, "request_approval")
    _require_role(principal, QUOTING_ROLES, "request_approval")
    quotation.status = Quotation.Status.PENDING_APPROVAL


def mark_sent(quotation, principal):
    _require_status(quotation, Quotation.Status.PENDING_APPROVAL, "mark_sent")
    _require_role(principal, (Role.SALES_EXECUTIVE,), "mark_sent")
    quotation.status = Quotation.Status.SENT
    quotation.signature_status = Quotation.SignatureStatus.PENDING


def accept(quotation, principal):
    _require_status(quotation, Quotation.Status.SENT, "accept")
    _require_agent(quotation, principal, "accept")
    quotation.status = Quotation.Status.ACCEPTED
    quotation.signature_status = Quotation.SignatureStatus.SIGNED


def decline(quotation, principal):
    _require_status(quotation, Quotation.Status.SENT, "decline")
    _require_agent(quotation, principal, "decline")
    quotation.status = Quotation.Status.DECLINED


def approve_sale(quotation, items, principal, today):
    """
    Build the order for an accepted quotation.

    Returns ``(order, order_items)`` unsaved; items are copied from the
    quotation as they are. The quotation itself is not modified.
    """
    _require_status(quotation, Quotation.Status.ACCEPTED, "approve_sale")
    _require_role(principal, SALE_APPROVER_ROLES, "approve_sale")

    order = Order(
        customer=quotation.customer,
        date=today,
        status=Order.Status.AWAITING_PAYMENT,
        quotation=quotation,
        agent_id=quotation.agent_id,
        agent_name=quotation.agent_name,
        approved_by_id=principal.id,
    )
    order_items = [
        OrderItem(
            order=order,
            position=it.position,
            product_id=it.product_id,
            description=it.description,
            quantity=it.quantity,
            unit_price=it.unit_price,
        )
        for it in items
    ]
    return order, order_items


def receive_payment(order, items, principal, payment_method=""):
    _require_status(order, Order.Status.AWAITING_PAYMENT, "receive_payment")
    _require_role(principal, (Role.CASHIER,), "receive_payment")
    order.status = Order.Status.PROCESSING
    if payment_method:
        order.payment_method = payment_method
    order.total_amount = sum((it.line_total for it in items), 0)
