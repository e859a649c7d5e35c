from fastapi import FastAPI

from inhouse.api.routes import collections, resources, webhook
from inhouse.auth.signature import signature_verifier
from inhouse.core.config import settings
from inhouse.core.errors import register_exception_handlers
from inhouse.database.mongodb import close_db, connect_db
from inhouse.utils.logger import logger


# No docs routes: every top-level path segment names a collection
app = FastAPI(
    title=settings.APP_NAME,
    debug=settings.DEBUG,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

register_exception_handlers(app)

@app.on_event("startup")
async def startup():
    app.state.store = await connect_db(settings)
    if not signature_verifier.enabled:
        logger.warning("GITHUB_SECRET is not set; webhook signatures are not verified")

@app.on_event("shutdown")
async def shutdown():
    store = getattr(app.state, "store", None)
    if store is not None:
        await close_db(store)


# Include routers; the generic resource routes must come last
app.include_router(webhook.router, prefix="/_hook", tags=["Webhook"])
app.include_router(collections.router, prefix="/_collection", tags=["Collections"])
app.include_router(resources.router, tags=["Resources"])


def run():
    import uvicorn

    logger.info(f"{settings.APP_NAME} server listening on {settings.PORT}...")
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
