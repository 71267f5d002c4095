from logistics.api.guest import guest_router
from logistics.api.routes import maintenance_router, pickup_router, purchase_router, quote_router, shipment_router
from logistics.api.tracking import tracking_router

routers = [
    quote_router,
    shipment_router,
    pickup_router,
    purchase_router,
    tracking_router,
    guest_router,
    maintenance_router,
]

__all__ = [
    "guest_router",
    "maintenance_router",
    "pickup_router",
    "purchase_router",
    "quote_router",
    "routers",
    "shipment_router",
    "tracking_router",
]
