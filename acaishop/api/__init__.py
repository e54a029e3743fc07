# acaishop/api/__init__.py
from fastapi import FastAPI

from acaishop.api.routers import (
    health,
    stores,
    catalog,
    additionals,
    carts,
    orders,
    payments,
    webhooks,
    notifications,
    push,
    reports,
    tables,
)


def include_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(stores.router)
    app.include_router(catalog.router)
    app.include_router(catalog.admin_router)
    app.include_router(additionals.router)
    app.include_router(additionals.admin_router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(orders.admin_router)
    app.include_router(payments.router)
    app.include_router(webhooks.router)
    app.include_router(notifications.router)
    app.include_router(notifications.admin_router)
    app.include_router(push.router)
    app.include_router(reports.router)
    app.include_router(tables.router)
    app.include_router(tables.admin_router)
    return app
