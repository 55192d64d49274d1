"""
OwlDoor CRM - API Backend

Start with:
    uvicorn server:app --host 0.0.0.0 --port 8001 --reload
"""

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging

from config import client, db, CORS_ORIGINS
from services.errors import CRMError
from services.remote_procedures import get_gateway

# Logging configuration
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("owldoor")

app = FastAPI(
    title="OwlDoor CRM",
    description="Recruiting CRM: lead pipelines, clients, credits, AI recruiter",
    version="1.0.0"
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== ERRORS ====================

@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    """Every failure is scoped to the one action that raised it"""
    content = {"success": False, "message": exc.message}
    error_kind = getattr(exc, "error_kind", None)
    if error_kind:
        content["error_kind"] = error_kind
    if exc.status_code >= 500:
        logger.error(f"[API] {request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


# ==================== ROUTES ====================

from routes import pipeline, leads, clients, custom_fields, ai_recruiter, reviews, packages, zapier, event_log

app.include_router(pipeline.router, prefix="/api")
app.include_router(leads.router, prefix="/api")
app.include_router(clients.router, prefix="/api")
app.include_router(custom_fields.router, prefix="/api")
app.include_router(ai_recruiter.router, prefix="/api")
app.include_router(reviews.router, prefix="/api")
app.include_router(packages.router, prefix="/api")
app.include_router(zapier.router, prefix="/api")
app.include_router(event_log.router, prefix="/api")


@app.get("/api/health")
async def health():
    return {"name": "OwlDoor CRM API", "version": "1.0.0", "status": "running"}


# ==================== STARTUP / SHUTDOWN ====================

@app.on_event("startup")
async def startup():
    logger.info("OwlDoor CRM starting")

    await db.pros.create_index("id", unique=True)
    await db.pros.create_index("pipeline_stage")
    await db.pros.create_index("created_at")
    await db.clients.create_index("id", unique=True)
    await db.ai_leads.create_index("id", unique=True)
    await db.ai_leads.create_index([("client_id", 1), ("stage", 1)])
    await db.matches.create_index([("client_id", 1), ("pro_id", 1)])
    await db.custom_fields.create_index([("target_table", 1), ("field_name", 1)])
    await db.custom_field_values.create_index(
        [("custom_field_id", 1), ("record_id", 1)], unique=True
    )
    await db.ai_card_layouts.create_index([("client_id", 1), ("view_type", 1)], unique=True)
    await db.ai_tasks.create_index([("client_id", 1), ("ai_lead_id", 1)])
    await db.client_reviews.create_index("client_id")
    await db.pricing_packages.create_index([("client_id", 1), ("is_custom", 1)])
    await db.zapier_api_keys.create_index("api_key_hash", unique=True)
    await db.zapier_webhooks.create_index("user_id")
    await db.event_log.create_index([("entity_type", 1), ("entity_id", 1), ("created_at", -1)])

    logger.info("MongoDB indexes ready")


@app.on_event("shutdown")
async def shutdown():
    await get_gateway().drain()
    client.close()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
