from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import init_models
from shared.errors import register_exception_handlers
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.auth_service import models as auth_models
from services.product_service import models as product_models
from services.cart_service import models as cart_models
from services.order_service import models as order_models
from services.pickup_service import models as pickup_models
from services.notification_service import models as notification_models
from services.review_service import models as review_models

from services.auth_service.router import router as auth_router
from services.product_service.router import router as product_router
from services.cart_service.router import router as cart_router
from services.order_service.router import router as order_router, retailer_router
from services.pickup_service.router import router as pickup_router
from services.notification_service.router import router as notification_router
from services.review_service.router import router as review_router

app = FastAPI(title="Marketplace", version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(app, "marketplace")

# --- ERRORS & SECURITY ---
register_exception_handlers(app)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

app.include_router(auth_router)
app.include_router(product_router)
app.include_router(review_router)
app.include_router(cart_router)
app.include_router(order_router)
app.include_router(retailer_router)
app.include_router(pickup_router)
app.include_router(notification_router)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "marketplace", "status": "running"}


@app.on_event("startup")
async def startup_event():
    # Create schemas and all tables
    await init_models()
