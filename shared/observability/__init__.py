from .setup import setup_observability
from .metrics import (
    ecomm_orders_placed_total,
    ecomm_order_placement_duration_seconds,
    ecomm_stock_conflicts_total,
    ecomm_order_status_updates_total,
    ecomm_notifications_total
)
