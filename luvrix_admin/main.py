import uuid
import traceback
import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from luvrix_admin.config import settings
from luvrix_admin.db import engine, SessionLocal
from luvrix_admin.errors import AdminRedirect
from luvrix_admin.logging_setup import setup_logging, log_event, request_id_var
from luvrix_admin.models import Base
from luvrix_admin.routes import auth_pages, overview, content, people, giveaways, site_settings
from luvrix_admin.services.scheduler import start_scheduler

setup_logging()
logger = logging.getLogger(__name__)

if settings.public_site_url.startswith("http://") and settings.session_cookie_secure:
    logger.warning("Public site is plain http but session cookies are marked secure")

app = FastAPI(title="Luvrix Admin Console")
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    req_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = request_id_var.set(req_id)
    try:
        response = await call_next(request)
    finally:
        request_id_var.reset(token)
    response.headers["X-Request-ID"] = req_id
    return response


@app.exception_handler(AdminRedirect)
async def admin_redirect_handler(request: Request, exc: AdminRedirect):
    return RedirectResponse(exc.url, status_code=303)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    log_event(
        "unhandled_error",
        level="error",
        path=request.url.path,
        error=str(exc),
        error_type=type(exc).__name__,
        trace=traceback.format_exc(),
    )
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal Server Error: {str(exc)}", "type": type(exc).__name__},
    )


app.include_router(auth_pages.router)
app.include_router(overview.router)
app.include_router(content.router)
app.include_router(people.router)
app.include_router(giveaways.router)
app.include_router(site_settings.router)


@app.on_event("startup")
def on_startup():
    log_event("startup", platform_api_url=settings.platform_api_url)
    Base.metadata.create_all(bind=engine)

    app.state.scheduler = None
    if not settings.scheduler_enabled:
        return
    try:
        app.state.scheduler = start_scheduler(SessionLocal)
    except Exception as e:
        log_event("scheduler_start_failed", level="error", error=repr(e))


@app.on_event("shutdown")
def on_shutdown():
    sched = getattr(app.state, "scheduler", None)
    if sched is not None:
        sched.shutdown(wait=False)


@app.get("/health")
def health():
    return {"status": "ok"}
