"""
Requisition approval trail engine.

Pure in-memory transitions over a requisition and its ordered trail of
``ApprovalStep`` rows. Nothing here touches the database; the service layer
loads, locks and persists around these functions.

Trail layout: position 0 is the creator's own step (approved at creation),
followed by the chain for the request type. The last chain role is the
issuing role. Once every role before it has approved, the requisition
becomes ``Approved`` with ``current_stage`` set to the issuing role, and only
``issue`` can finish it.
"""

import logging

from bizsuite.exceptions import InvalidTransition, StageAuthorizationError
from bizsuite.requisitions.chains import (
    build_approval_chain,
    issued_status,
    issuing_role,
)
from bizsuite.requisitions.models import ApprovalStep, Requisition

logger = logging.getLogger(__name__)

PENDING = Requisition.Status.PENDING
APPROVED = Requisition.Status.APPROVED
REJECTED = Requisition.Status.REJECTED
CANCELLED = Requisition.Status.CANCELLED
FULFILLED = (Requisition.Status.ISSUED, Requisition.Status.DELIVERED)


def build_trail(requisition, creator, now):
    """Return unsaved trail steps for a new requisition and set its stage."""
    chain = build_approval_chain(requisition.request_type, requisition.chain_version)
    steps = [
        ApprovalStep(
            requisition=requisition,
            position=0,
            role=creator.role,
            status=ApprovalStep.Status.APPROVED,
            acted_by_id=creator.id,
            timestamp=now,
        )
    ]
    for pos, role in enumerate(chain, start=1):
        steps.append(
            ApprovalStep(requisition=requisition, position=pos, role=role)
        )
    requisition.status = PENDING
    requisition.current_stage = chain[0]
    return steps


def first_pending(trail):
    return next((s for s in trail if s.status == ApprovalStep.Status.PENDING), None)


def _mark(step, status, principal, now):
    step.status = status
    step.acted_by_id = principal.id
    step.timestamp = now


def decide(requisition, trail, principal, approved, now):
    """
    Record ``principal``'s approve/reject decision on the current stage.

    Returns the step that was decided. Raises without touching anything when
    the requisition is not pending or it is not the principal's turn.
    """
    if requisition.status != PENDING:
        raise InvalidTransition(
            detail={
                "detail": "only_pending_requests_can_be_decided",
                "status": requisition.status,
            },
            code="not_pending",
        )

    step = first_pending(trail)
    if step is None or step.role != principal.role:
        expected = step.role if step is not None else None
        logger.warning(
            "decide refused: requisition=%s user=%s role=%s expected=%s",
            requisition.pk,
            principal.id,
            principal.role,
            expected,
        )
        raise StageAuthorizationError(
            detail={
                "detail": "not_your_turn",
                "expected_role": expected,
                "your_role": principal.role,
            }
        )

    if not approved:
        _mark(step, ApprovalStep.Status.REJECTED, principal, now)
        requisition.status = REJECTED
        return step

    _mark(step, ApprovalStep.Status.APPROVED, principal, now)
    nxt = first_pending(trail)
    if nxt is None:
        requisition.status = APPROVED
        return step

    requisition.current_stage = nxt.role
    is_last = nxt is trail[-1]
    role = issuing_role(requisition.request_type, requisition.chain_version)
    if is_last and nxt.role == role:
        requisition.status = APPROVED
    return step


def issue(requisition, trail, principal, now):
    """
    Fulfil a fully approved requisition as its issuing role.

    Returns the fulfilled step, or ``None`` when the requisition was already
    issued/delivered (repeat calls change nothing).
    """
    if requisition.status in FULFILLED:
        logger.info(
            "issue no-op: requisition=%s already %s", requisition.pk, requisition.status
        )
        return None
    if requisition.status != APPROVED:
        raise InvalidTransition(
            detail={"detail": "not_fully_approved", "status": requisition.status},
            code="not_fully_approved",
        )

    role = issuing_role(requisition.request_type, requisition.chain_version)
    if principal.role != role or requisition.current_stage != role:
        raise StageAuthorizationError(
            detail={
                "detail": "not_issuing_role",
                "expected_role": role,
                "your_role": principal.role,
            }
        )

    step = next(
        (
            s
            for s in reversed(trail)
            if s.role == role and s.status == ApprovalStep.Status.PENDING
        ),
        None,
    )
    if step is None:
        raise InvalidTransition(
            detail={"detail": "issuance_step_missing"}, code="issuance_step_missing"
        )

    _mark(step, ApprovalStep.Status.APPROVED, principal, now)
    requisition.status = issued_status(requisition.request_type)
    return step


def cancel(requisition, principal):
    if requisition.status != PENDING:
        raise InvalidTransition(
            detail={
                "detail": "only_pending_requests_can_be_cancelled",
                "status": requisition.status,
            },
            code="not_pending",
        )
    if requisition.created_by_id != principal.id:
        raise StageAuthorizationError(
            detail={"detail": "only_creator_can_cancel"}, code="not_creator"
        )
    requisition.status = CANCELLED
