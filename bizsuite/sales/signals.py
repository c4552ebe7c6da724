from django.dispatch import Signal

# sent after commit with kwargs: quotation, action, actor
quotation_transitioned = Signal()

# sent after commit with kwargs: order, actor
order_created = Signal()
