import logging
from decimal import Decimal, InvalidOperation

from django.db import DatabaseError, transaction
from django.db.models import Q
from django.utils import timezone

from bizsuite.exceptions import (
    InvalidTransition,
    PersistenceFailed,
    StageAuthorizationError,
    WorkflowValidationError,
)
from bizsuite.requisitions import workflow
from bizsuite.requisitions.chains import NON_REQUESTING_ROLES, active_chain_version
from bizsuite.requisitions.models import ApprovalStep, Requisition, RequisitionItem
from bizsuite.requisitions.signals import requisition_transitioned
from bizsuite.transitions import apply_transition
from bizsuite.users.models import Role

logger = logging.getLogger(__name__)

# roles that see every requisition, not only their own
OVERSIGHT_ROLES = (
    Role.ADMIN,
    Role.GENERAL_MANAGER,
    Role.MANAGING_DIRECTOR,
    Role.EXECUTIVE_DIRECTOR,
)


def _decimal(value, field):
    try:
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise WorkflowValidationError(detail={field: "must be a number"})


def line_items_total(items) -> Decimal:
    total = Decimal("0")
    for it in items:
        qty = _decimal(it.get("quantity") or 0, "quantity")
        unit = _decimal(it.get("unit_cost") or 0, "unit_cost")
        total += qty * unit
    return total.quantize(Decimal("0.01"))


def _fits_amount_column(amount) -> bool:
    field = Requisition._meta.get_field("amount_or_value")
    return abs(amount) < Decimal(10) ** (field.max_digits - field.decimal_places)


def validate_payload(data):
    """Check a create/edit payload and return the amount to store."""
    errors = {}
    for field in ("title", "reason", "needed_by_date"):
        if not data.get(field):
            errors[field] = "This field is required."

    request_type = data.get("request_type")
    if request_type not in Requisition.RequestType.values:
        errors["request_type"] = "Must be 'cash' or 'material'."

    items = data.get("items") or []
    if request_type == Requisition.RequestType.MATERIAL:
        if not items:
            errors["items"] = "A material request needs at least one item."
        for idx, it in enumerate(items):
            if not (it.get("item_name") or "").strip():
                errors[f"items[{idx}].item_name"] = "This field is required."
            if _decimal(it.get("quantity") or 0, "quantity") <= 0:
                errors[f"items[{idx}].quantity"] = "Quantity must be positive."
    elif items:
        errors["items"] = "Only material requests carry items."

    if errors:
        raise WorkflowValidationError(detail=errors)

    if items:
        amount = line_items_total(items)
    else:
        amount = _decimal(data.get("amount_or_value") or 0, "amount_or_value")
        if amount <= 0:
            raise WorkflowValidationError(
                detail={"amount_or_value": "Amount must be positive."}
            )
    if not _fits_amount_column(amount):
        raise WorkflowValidationError(
            detail={"amount_or_value": "Amount is too large."}
        )
    return amount


def _build_items(requisition, items):
    return [
        RequisitionItem(
            requisition=requisition,
            position=pos,
            item_name=it["item_name"].strip(),
            quantity=_decimal(it["quantity"], "quantity"),
            unit=it.get("unit") or "",
            unit_cost=(
                _decimal(it["unit_cost"], "unit_cost")
                if it.get("unit_cost") is not None
                else None
            ),
        )
        for pos, it in enumerate(items)
    ]


def _announce(requisition, action, principal):
    transaction.on_commit(
        lambda: requisition_transitioned.send(
            sender=Requisition,
            requisition=requisition,
            action=action,
            actor=principal,
        )
    )


def create_requisition(principal, data) -> Requisition:
    if principal.role in NON_REQUESTING_ROLES:
        raise StageAuthorizationError(
            detail={"detail": "role_cannot_create_requests", "role": principal.role}
        )
    amount = validate_payload(data)
    items = data.get("items") or []
    now = timezone.now()

    requisition = Requisition(
        request_type=data["request_type"],
        title=data["title"],
        reason=data["reason"],
        amount_or_value=amount,
        needed_by_date=data["needed_by_date"],
        delivery_location=data.get("delivery_location") or "",
        created_by_id=principal.id,
        chain_version=active_chain_version(),
        created_at=now,
    )
    trail = workflow.build_trail(requisition, principal, now)
    try:
        with transaction.atomic():
            requisition.save()
            for obj in _build_items(requisition, items) + trail:
                obj.save()
            _announce(requisition, "created", principal)
    except DatabaseError as exc:
        logger.exception("create_requisition failed for user=%s: %s", principal.id, exc)
        raise PersistenceFailed() from exc

    logger.info(
        "requisition created id=%s type=%s amount=%s by=%s stage=%s",
        requisition.id,
        requisition.request_type,
        requisition.amount_or_value,
        principal.id,
        requisition.current_stage,
    )
    return requisition


def update_requisition(principal, pk, data, expected_version=None) -> Requisition:
    def mutate(requisition):
        if requisition.created_by_id != principal.id:
            raise StageAuthorizationError(
                detail={"detail": "only_creator_can_edit"}, code="not_creator"
            )
        if requisition.status != Requisition.Status.PENDING:
            raise InvalidTransition(
                detail={"detail": "only_pending_requests_can_be_edited"}
            )
        if requisition.approval_steps.filter(position__gt=0).exclude(
            status=ApprovalStep.Status.PENDING
        ).exists():
            raise InvalidTransition(detail={"detail": "approval_already_started"})

        merged = {
            "request_type": requisition.request_type,
            "title": requisition.title,
            "reason": requisition.reason,
            "needed_by_date": requisition.needed_by_date,
            "delivery_location": requisition.delivery_location,
            "amount_or_value": requisition.amount_or_value,
            "items": [
                {
                    "item_name": it.item_name,
                    "quantity": it.quantity,
                    "unit": it.unit,
                    "unit_cost": it.unit_cost,
                }
                for it in requisition.items.all()
            ],
        }
        if data.get("request_type") not in (None, requisition.request_type):
            raise WorkflowValidationError(
                detail={"request_type": "The request type cannot be changed."}
            )
        merged.update({k: v for k, v in data.items() if k != "request_type"})
        requisition.amount_or_value = validate_payload(merged)
        for field in ("title", "reason", "needed_by_date"):
            setattr(requisition, field, merged[field])
        requisition.delivery_location = merged.get("delivery_location") or ""

        if "items" in data:
            # simple strategy: remove existing and recreate
            requisition.items.all().delete()
            return _build_items(requisition, merged["items"])
        return []

    requisition, _ = apply_transition(
        Requisition, pk, mutate, expected_version=expected_version
    )
    logger.info("requisition updated id=%s by=%s", requisition.id, principal.id)
    return requisition


def _load_trail(requisition):
    return list(requisition.approval_steps.order_by("position"))


def decide_requisition(principal, pk, approved, expected_version=None) -> Requisition:
    def mutate(requisition):
        trail = _load_trail(requisition)
        step = workflow.decide(requisition, trail, principal, approved, timezone.now())
        return [step]

    requisition, _ = apply_transition(
        Requisition, pk, mutate, expected_version=expected_version
    )
    logger.info(
        "decide: requisition=%s user=%s role=%s approved=%s -> status=%s stage=%s",
        requisition.id,
        principal.id,
        principal.role,
        approved,
        requisition.status,
        requisition.current_stage,
    )
    if not approved:
        action = "rejected"
    elif requisition.status == Requisition.Status.APPROVED:
        action = "fully_approved"
    else:
        action = "advanced"
    _announce(requisition, action, principal)
    return requisition


def issue_requisition(principal, pk, expected_version=None) -> Requisition:
    def mutate(requisition):
        trail = _load_trail(requisition)
        step = workflow.issue(requisition, trail, principal, timezone.now())
        return None if step is None else [step]

    requisition, changed = apply_transition(
        Requisition, pk, mutate, expected_version=expected_version
    )
    if changed:
        logger.info(
            "issue: requisition=%s user=%s -> status=%s",
            requisition.id,
            principal.id,
            requisition.status,
        )
        _announce(requisition, "issued", principal)
    return requisition


def cancel_requisition(principal, pk, expected_version=None) -> Requisition:
    def mutate(requisition):
        workflow.cancel(requisition, principal)
        return []

    requisition, _ = apply_transition(
        Requisition, pk, mutate, expected_version=expected_version
    )
    logger.info("requisition cancelled id=%s by=%s", requisition.id, principal.id)
    return requisition


def visible_requisitions(principal):
    qs = Requisition.objects.select_related("created_by").prefetch_related(
        "items", "approval_steps__acted_by"
    )
    if principal.role in OVERSIGHT_ROLES:
        return qs
    return qs.filter(Q(created_by_id=principal.id) | Q(current_stage=principal.role))


def awaiting_approval(principal):
    return visible_requisitions(principal).filter(
        status=Requisition.Status.PENDING, current_stage=principal.role
    )


def awaiting_issuance(principal):
    return visible_requisitions(principal).filter(
        status=Requisition.Status.APPROVED, current_stage=principal.role
    )
