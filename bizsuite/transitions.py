"""
Write-through helper shared by every workflow mutation.

A transition locks the row, checks the caller's version token, applies an
in-memory mutation and persists the result in one transaction. Nothing the
mutation touched survives a failed write: the transaction rolls back and
the locked instance is discarded.
"""

import logging

from django.db import DatabaseError, transaction
from rest_framework.exceptions import NotFound

from bizsuite.exceptions import PersistenceFailed, WorkflowConflict

logger = logging.getLogger(__name__)


def check_version(instance, expected_version):
    if expected_version is None:
        return
    try:
        expected = int(expected_version)
    except (TypeError, ValueError):
        raise WorkflowConflict(detail="Version token must be an integer.")
    if expected != instance.version:
        logger.warning(
            "version conflict on %s=%s expected=%s stored=%s",
            instance._meta.model_name,
            instance.pk,
            expected,
            instance.version,
        )
        raise WorkflowConflict(
            detail={
                "detail": "stale_version",
                "expected_version": expected,
                "current_version": instance.version,
            }
        )


def apply_transition(model, pk, mutate, expected_version=None, bump_version=True):
    """
    Run ``mutate(instance)`` against a freshly locked row of ``model``.

    ``mutate`` returns ``None`` when the call is a no-op, otherwise a list of
    related objects to save (in order) before the instance itself.
    Returns ``(instance, changed)``.
    """
    try:
        with transaction.atomic():
            try:
                instance = model.objects.select_for_update().get(pk=pk)
            except model.DoesNotExist:
                raise NotFound(
                    detail=f"No {model._meta.verbose_name} matches the given query."
                )
            check_version(instance, expected_version)

            dirty = mutate(instance)
            if dirty is None:
                return instance, False

            for obj in dirty:
                obj.save()
            if bump_version:
                instance.version += 1
                instance.save()
            return instance, True
    except DatabaseError as exc:
        logger.exception(
            "transition write failed for %s=%s: %s", model._meta.model_name, pk, exc
        )
        raise PersistenceFailed() from exc
