from django.dispatch import Signal

# sent after commit with kwargs: requisition, action, actor
# action is one of: created, advanced, fully_approved, rejected, issued
requisition_transitioned = Signal()
