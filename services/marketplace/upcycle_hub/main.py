from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from contextlib import asynccontextmanager
import logging

from upcycle_hub.config import settings
from upcycle_hub.db.database import init_db
from upcycle_hub.api import auth, products, conversations, health

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Upcycle Hub API...")
    logger.info(f"Auth provider: {settings.auth_provider}, data backend: {settings.data_backend}, image provider: {settings.image_provider}")

    if settings.data_backend == "database":
        await init_db()
    else:
        logger.info("Mock data backend selected; skipping database migrations")

    logger.info("Upcycle Hub API started successfully")
    yield
    # Shutdown
    logger.info("Shutting down Upcycle Hub API...")


app = FastAPI(
    title="Upcycle Hub API",
    description="""
    Marketplace for secondhand and upcycled goods.

    **Features:**
    - Account registration and login (local, Supabase or Clerk)
    - Listing creation, browsing and soft deletion
    - Image attachments (Cloudinary or Supabase Storage)
    - Buyer/seller conversations

    **Authentication:**
    Protected endpoints require a bearer token in the Authorization header:
    ```
    Authorization: Bearer <your-access-token>
    ```

    **Profile flags:**
    - **is_seller**: can create listings
    - **is_collector**: collects upcycled items
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# When allow_credentials=True the headers must be listed explicitly
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD"],
    allow_headers=["Authorization", "Content-Type", "Accept", "Origin", "X-Requested-With", "x-client-info"],
    expose_headers=["Retry-After"],
    max_age=3600,
)


def custom_openapi():
    """Custom OpenAPI schema with JWT Bearer authentication"""
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )

    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "BearerAuth": {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
            "description": "Access token from /api/auth/login, Supabase or Clerk. Format: Bearer <token>"
        }
    }

    app.openapi_schema = openapi_schema
    return app.openapi_schema


app.openapi = custom_openapi


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them properly"""
    logger.error(
        f"Unhandled exception: {type(exc).__name__}: {str(exc)}",
        exc_info=True,
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error_type": type(exc).__name__,
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle request validation errors"""
    logger.warning(
        f"Validation error: {exc.errors()}",
        extra={
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=422,
        content={"detail": jsonable_encoder(exc.errors())}
    )


# Include routers
app.include_router(health.router)
app.include_router(auth.router, prefix="/api")
app.include_router(products.router, prefix="/api")
app.include_router(conversations.router, prefix="/api")


@app.get("/")
async def root():
    return {"service": settings.app_name, "version": settings.app_version}
