import logging

from django.dispatch import receiver

from bizsuite.notifications.models import Notification
from bizsuite.notifications.services import add_notification, notify_role
from bizsuite.requisitions.models import Requisition
from bizsuite.requisitions.signals import requisition_transitioned
from bizsuite.sales.models import Quotation
from bizsuite.sales.signals import order_created, quotation_transitioned
from bizsuite.users.models import Role

logger = logging.getLogger(__name__)

REQUISITIONS_LINK = "/requests"
SALES_LINK = "/sales"


def _notify_stage(requisition):
    if requisition.status == Requisition.Status.APPROVED:
        title = "Request Awaiting Issuance"
        description = f'"{requisition.title}" is fully approved and awaits issuance.'
    else:
        title = "Request Needs Approval"
        description = (
            f'"{requisition.title}" from {requisition.created_by.email} '
            "is waiting for your approval."
        )
    notify_role(
        requisition.current_stage,
        Notification.Type.REQUEST,
        title,
        description,
        REQUISITIONS_LINK,
    )


def _notify_creator(requisition, title):
    add_notification(
        requisition.created_by_id,
        Notification.Type.REQUEST,
        title,
        f'Your request "{requisition.title}" is now {requisition.status}.',
        REQUISITIONS_LINK,
    )


@receiver(requisition_transitioned, sender=Requisition)
def notify_on_requisition_transition(sender, requisition, action, actor, **kwargs):
    try:
        if action in ("created", "advanced"):
            _notify_stage(requisition)
        elif action == "fully_approved":
            _notify_stage(requisition)
            _notify_creator(requisition, "Request Approved")
        elif action == "rejected":
            _notify_creator(requisition, "Request Rejected")
        elif action == "issued":
            _notify_creator(requisition, f"Request {requisition.status}")
    except Exception as exc:
        logger.exception(
            "failed to dispatch notifications for requisition=%s action=%s: %s",
            requisition.pk,
            action,
            exc,
        )


@receiver(quotation_transitioned, sender=Quotation)
def notify_on_quotation_transition(sender, quotation, action, actor, **kwargs):
    if action != "approval_requested":
        return
    try:
        notify_role(
            Role.SALES_EXECUTIVE,
            Notification.Type.SALES,
            "Quotation Needs Approval",
            f"{quotation.agent_name} submitted a quotation for {quotation.customer} "
            "requiring your approval.",
            SALES_LINK,
        )
    except Exception as exc:
        logger.exception(
            "failed to notify sales executives for quotation=%s: %s", quotation.pk, exc
        )


@receiver(order_created)
def notify_cashiers_on_order(sender, order, actor, **kwargs):
    try:
        notify_role(
            Role.CASHIER,
            Notification.Type.SALES,
            "Order Awaiting Payment",
            f"Order {order.pk} for {order.customer} is awaiting payment.",
            SALES_LINK,
        )
    except Exception as exc:
        logger.exception("failed to notify cashiers for order=%s: %s", order.pk, exc)
