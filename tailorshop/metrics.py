"""
Prometheus metrics: order creation and lifecycle events, inventory adjustments, logins.
"""
from prometheus_client import Counter, generate_latest

orders_created_total = Counter(
    "orders_created_total",
    "Total orders created",
)
# Generated order number already taken by a concurrent insert; generation retried
order_number_conflicts_total = Counter(
    "order_number_conflicts_total",
    "Total order number uniqueness conflicts hit while creating orders",
)
order_status_changes_total = Counter(
    "order_status_changes_total",
    "Total order status changes, by new status",
    ["status"],
)
order_approvals_total = Counter(
    "order_approvals_total",
    "Total pending ready-photo approvals resolved",
    ["outcome"],
)
inventory_adjustments_total = Counter(
    "inventory_adjustments_total",
    "Total inventory quantity adjustments",
    ["direction"],
)
logins_total = Counter(
    "logins_total",
    "Total login attempts",
    ["role", "outcome"],
)


def get_metrics_content_type():
    return "text/plain; charset=utf-8; version=0.0.4"


def get_metrics_bytes():
    return generate_latest()
