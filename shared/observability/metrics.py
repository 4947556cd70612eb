from prometheus_client import Counter, Histogram

# Business Metrics
ecomm_orders_placed_total = Counter(
    "ecomm_orders_placed_total",
    "Total order placements processed",
    ["status"] # Labels: 'success', 'rejected', 'failed'
)

ecomm_order_placement_duration_seconds = Histogram(
    "ecomm_order_placement_duration_seconds",
    "Order placement duration in seconds"
)

ecomm_stock_conflicts_total = Counter(
    "ecomm_stock_conflicts_total",
    "Placements rolled back because a conditional stock decrement matched no row"
)

ecomm_order_status_updates_total = Counter(
    "ecomm_order_status_updates_total",
    "Order status transitions applied",
    ["status"]
)

ecomm_notifications_total = Counter(
    "ecomm_notifications_total",
    "Best-effort notifications dispatched",
    ["channel", "status"] # channel='sms'|'email', status='sent'|'failed'|'skipped'
)
