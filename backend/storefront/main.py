from contextlib import asynccontextmanager

from fastapi import FastAPI

from storefront.api.errors import register_error_handlers
from storefront.api.health import router as health_router
from storefront.api.routes_products import router as products_router
from storefront.config import settings
from storefront.db import init_db
from storefront.middleware import CORSHeadersMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup; RESET_DB=1 drops and recreates tables
    init_db()
    yield


app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, lifespan=lifespan)

app.add_middleware(CORSHeadersMiddleware, allow_origin=settings.CORS_ALLOW_ORIGIN)

register_error_handlers(app)

app.include_router(health_router, prefix="/api", tags=["health"])

app.include_router(products_router, tags=["products"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("storefront.main:app", host=settings.APP_HOST, port=settings.APP_PORT, reload=False)
