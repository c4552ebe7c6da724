import logging
from datetime import date
from decimal import Decimal

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from bizsuite.exceptions import (
    InvalidTransition,
    PersistenceFailed,
    StageAuthorizationError,
    WorkflowValidationError,
)
from bizsuite.sales import pipeline
from bizsuite.sales.models import Order, Quotation, QuotationItem, SalesTarget
from bizsuite.sales.signals import order_created, quotation_transitioned
from bizsuite.transitions import apply_transition
from bizsuite.users.models import Role

logger = logging.getLogger(__name__)

# roles that see every quotation and order
SALES_OVERSIGHT_ROLES = (
    Role.ADMIN,
    Role.SALES_EXECUTIVE,
    Role.MANAGING_DIRECTOR,
    Role.EXECUTIVE_DIRECTOR,
    Role.GENERAL_MANAGER,
    Role.CASHIER,
)

TARGET_MANAGER_ROLES = (
    Role.ADMIN,
    Role.SALES_EXECUTIVE,
    Role.MANAGING_DIRECTOR,
    Role.EXECUTIVE_DIRECTOR,
    Role.GENERAL_MANAGER,
)


def _build_quotation_items(quotation, items):
    return [
        QuotationItem(
            quotation=quotation,
            position=pos,
            product_id=it.get("product_id") or "",
            description=it["description"],
            quantity=it["quantity"],
            unit_price=it["unit_price"],
        )
        for pos, it in enumerate(items)
    ]


def _validate_quotation(data):
    errors = {}
    if not (data.get("customer") or "").strip():
        errors["customer"] = "This field is required."
    items = data.get("items") or []
    if not items:
        errors["items"] = "A quotation needs at least one item."
    for idx, it in enumerate(items):
        if Decimal(str(it.get("quantity") or 0)) <= 0:
            errors[f"items[{idx}].quantity"] = "Quantity must be positive."
        if Decimal(str(it.get("unit_price") or 0)) < 0:
            errors[f"items[{idx}].unit_price"] = "Unit price cannot be negative."
    if data.get("date") and data.get("expiry_date"):
        if data["expiry_date"] < data["date"]:
            errors["expiry_date"] = "Expiry date must not be before the quote date."
    if errors:
        raise WorkflowValidationError(detail=errors)


def create_quotation(principal, data) -> Quotation:
    if principal.role not in pipeline.QUOTING_ROLES:
        raise StageAuthorizationError(
            detail={"detail": "role_cannot_create_quotations", "role": principal.role}
        )
    _validate_quotation(data)
    quotation = Quotation(
        customer=data["customer"].strip(),
        date=data.get("date") or timezone.localdate(),
        expiry_date=data["expiry_date"],
        status=Quotation.Status.DRAFT,
        signature_status=Quotation.SignatureStatus.NOT_REQUESTED,
        agent_id=principal.id,
        agent_name=principal.name,
    )
    try:
        with transaction.atomic():
            quotation.save()
            for it in _build_quotation_items(quotation, data["items"]):
                it.save()
    except DatabaseError as exc:
        logger.exception("create_quotation failed for user=%s: %s", principal.id, exc)
        raise PersistenceFailed() from exc
    logger.info(
        "quotation created id=%s customer=%s agent=%s",
        quotation.id,
        quotation.customer,
        principal.id,
    )
    return quotation


def update_quotation(principal, pk, data, expected_version=None) -> Quotation:
    def mutate(quotation):
        if quotation.agent_id != principal.id:
            raise StageAuthorizationError(detail={"detail": "only_originating_agent"})
        if quotation.status != Quotation.Status.DRAFT:
            raise InvalidTransition(detail={"detail": "only_drafts_can_be_edited"})
        merged = {
            "customer": quotation.customer,
            "date": quotation.date,
            "expiry_date": quotation.expiry_date,
            "items": [
                {
                    "product_id": it.product_id,
                    "description": it.description,
                    "quantity": it.quantity,
                    "unit_price": it.unit_price,
                }
                for it in quotation.items.all()
            ],
        }
        merged.update(data)
        _validate_quotation(merged)
        quotation.customer = merged["customer"].strip()
        quotation.date = merged["date"]
        quotation.expiry_date = merged["expiry_date"]
        if "items" in data:
            quotation.items.all().delete()
            return _build_quotation_items(quotation, merged["items"])
        return []

    quotation, _ = apply_transition(
        Quotation, pk, mutate, expected_version=expected_version
    )
    return quotation


def delete_quotation(principal, pk):
    def mutate(quotation):
        if quotation.agent_id != principal.id and principal.role != Role.ADMIN:
            raise StageAuthorizationError(detail={"detail": "only_originating_agent"})
        if quotation.status not in (Quotation.Status.DRAFT, Quotation.Status.DECLINED):
            raise InvalidTransition(
                detail={"detail": "only_draft_or_declined_quotations_can_be_deleted"}
            )
        quotation.delete()
        return None

    apply_transition(Quotation, pk, mutate)
    logger.info("quotation deleted id=%s by=%s", pk, principal.id)


QUOTATION_STEPS = {
    "approval_requested": pipeline.request_approval,
    "sent": pipeline.mark_sent,
    "accepted": pipeline.accept,
    "declined": pipeline.decline,
}


def transition_quotation(principal, pk, action, expected_version=None) -> Quotation:
    step = QUOTATION_STEPS[action]

    def mutate(quotation):
        step(quotation, principal)
        return []

    quotation, _ = apply_transition(
        Quotation, pk, mutate, expected_version=expected_version
    )
    logger.info(
        "quotation=%s %s by user=%s role=%s -> status=%s signature=%s",
        quotation.id,
        action,
        principal.id,
        principal.role,
        quotation.status,
        quotation.signature_status,
    )
    transaction.on_commit(
        lambda: quotation_transitioned.send(
            sender=Quotation, quotation=quotation, action=action, actor=principal
        )
    )
    return quotation


def approve_sale(principal, pk, today=None) -> Order:
    created = {}

    def mutate(quotation):
        if Order.objects.filter(quotation=quotation).exists():
            raise InvalidTransition(
                detail={"detail": "order_already_created"}, code="order_exists"
            )
        order, order_items = pipeline.approve_sale(
            quotation,
            list(quotation.items.all()),
            principal,
            today or timezone.localdate(),
        )
        created["order"] = order
        return [order, *order_items]

    # the quotation is locked for the check but left untouched
    apply_transition(Quotation, pk, mutate, bump_version=False)
    order = created["order"]
    logger.info(
        "sale approved: quotation=%s -> order=%s by user=%s", pk, order.id, principal.id
    )
    transaction.on_commit(
        lambda: order_created.send(sender=Order, order=order, actor=principal)
    )
    return order


def receive_payment(principal, pk, payment_method="", expected_version=None) -> Order:
    def mutate(order):
        items = list(order.items.all())
        pipeline.receive_payment(order, items, principal, payment_method)
        return []

    order, _ = apply_transition(Order, pk, mutate, expected_version=expected_version)
    logger.info(
        "payment received: order=%s by user=%s total=%s",
        order.id,
        principal.id,
        order.total_amount,
    )
    return order


def visible_quotations(principal):
    qs = Quotation.objects.prefetch_related("items")
    if principal.role in SALES_OVERSIGHT_ROLES:
        return qs
    return qs.filter(agent_id=principal.id)


def visible_orders(principal):
    qs = Order.objects.prefetch_related("items")
    if principal.role in SALES_OVERSIGHT_ROLES:
        return qs
    return qs.filter(Q(agent_id=principal.id))


def _period_bounds(period):
    try:
        year, month = (int(p) for p in period.split("-"))
        start = date(year, month, 1)
    except (AttributeError, TypeError, ValueError):
        raise WorkflowValidationError(detail={"period": "Use the YYYY-MM format."})
    end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
    return start, end


def upsert_sales_target(principal, agent_name, period, target_amount) -> SalesTarget:
    if principal.role not in TARGET_MANAGER_ROLES:
        raise StageAuthorizationError(detail={"detail": "insufficient_role"})
    if not agent_name or not period:
        raise WorkflowValidationError(
            detail={
                "detail": "Agent name and period are required to upsert a sales target."
            }
        )
    _period_bounds(period)
    target, created = SalesTarget.objects.update_or_create(
        agent_name=agent_name,
        period=period,
        defaults={"target_amount": target_amount},
    )
    logger.info(
        "sales target %s agent=%s period=%s amount=%s",
        "created" if created else "updated",
        agent_name,
        period,
        target_amount,
    )
    return target


def achieved_amount(target) -> Decimal:
    start, end = _period_bounds(target.period)
    accepted = Quotation.objects.filter(
        agent_name=target.agent_name,
        status=Quotation.Status.ACCEPTED,
        date__gte=start,
        date__lt=end,
    ).prefetch_related("items")
    return sum((q.total for q in accepted), Decimal("0"))


def target_progress(target) -> dict:
    achieved = achieved_amount(target)
    if target.target_amount > 0:
        progress = min(achieved / target.target_amount * 100, Decimal("100"))
    else:
        progress = Decimal("0")
    return {
        "achieved_amount": achieved,
        "progress": progress.quantize(Decimal("0.01")),
        "reached": progress >= 100,
    }
