from .approval_step import ApprovalStep
from .requisition import Requisition
from .requisition_item import RequisitionItem

__all__ = ["Requisition", "RequisitionItem", "ApprovalStep"]
