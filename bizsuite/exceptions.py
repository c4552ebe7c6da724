from rest_framework import status
from rest_framework.exceptions import APIException


class WorkflowError(APIException):
    """Base class for workflow failures rendered by DRF."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Workflow operation failed."
    default_code = "workflow_error"


class WorkflowValidationError(WorkflowError):
    default_detail = "Invalid input."
    default_code = "invalid"


class InvalidTransition(WorkflowError):
    default_detail = "This action is not allowed in the current status."
    default_code = "invalid_transition"


class StageAuthorizationError(WorkflowError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "You are not allowed to act on this record now."
    default_code = "not_your_turn"


class WorkflowConflict(WorkflowError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "The record was changed by someone else. Reload and retry."
    default_code = "conflict"


class PersistenceFailed(WorkflowError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = "The change could not be saved."
    default_code = "persistence_failed"
