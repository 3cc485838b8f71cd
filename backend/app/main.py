import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.responses import Response

from app.core.config import settings
from app.routers import audit_logs, branches, farmer_products, farmers, settlements

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

OPENAPI_TAGS = [
    {"name": "Branches", "description": "Branches that farmers and staff are assigned to."},
    {"name": "Farmers", "description": "Register farmers and view their payment summaries."},
    {"name": "Farmer Products", "description": "Record and correct produce owed to farmers."},
    {"name": "Settlements", "description": "Settle owed products and browse payout history."},
    {"name": "Audit Logs", "description": "Query the audit trail for farmers and settlements."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Track produce delivered by farmers and settle what they are owed. "
        "Each settlement records a proof of payment and a snapshot of the products it paid."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


app.include_router(branches.router, prefix="/v1/branches", tags=["Branches"])
app.include_router(farmers.router, prefix="/v1/farmers", tags=["Farmers"])
app.include_router(
    farmer_products.router,
    prefix="/v1/farmer_products",
    tags=["Farmer Products"],
)
app.include_router(settlements.router, prefix="/v1/settlements", tags=["Settlements"])
app.include_router(audit_logs.router, prefix="/v1/audit_logs", tags=["Audit Logs"])


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "domain": settings.APP_DOMAIN,
        "status": "running",
    }
