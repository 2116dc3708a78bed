from fastapi import APIRouter, Depends

from tailorshop import db
from tailorshop.routes.common import order_json
from tailorshop.security import Principal, require_admin

router = APIRouter(prefix="/api/admin/dashboard", tags=["admin"])

RECENT_ORDERS_LIMIT = 10


@router.get("")
async def dashboard(principal: Principal = Depends(require_admin)) -> dict:
    pool = await db.get_pool()
    stats = await db.order_stats(pool, principal.shop_id)
    low_stock = await db.list_inventory(pool, principal.shop_id, low_stock_only=True)
    breakdown = await db.status_breakdown(pool, principal.shop_id)
    recent, _ = await db.list_orders(
        pool, principal.shop_id, include_inactive=True, limit=RECENT_ORDERS_LIMIT
    )
    return {
        "stats": {
            "totalCustomers": stats["total_customers"],
            "totalActiveOrders": stats["total_active_orders"],
            "readyForPickup": stats["ready_for_pickup"],
            "pendingApproval": stats["pending_approval"],
            "lowStockCount": len(low_stock),
        },
        "statusBreakdown": breakdown,
        "recentOrders": [order_json(o) for o in recent],
        "lowStockItems": [i.to_json() for i in low_stock],
    }
