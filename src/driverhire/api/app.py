from __future__ import annotations

from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles

from driverhire.api.deps import LoginRequired, ManagerRequired
from driverhire.api.routes import router as api_router
from driverhire.config import get_settings
from driverhire.db.init import ensure_data_directories, init_database
from driverhire.logging_config import configure_logging
from driverhire.web.routes import router as web_router
from driverhire.web.routes import templates


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()
    static_dir = Path(__file__).resolve().parents[1] / "web" / "static"

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.exception_handler(LoginRequired)
    def _login_required(request: Request, exc: LoginRequired) -> RedirectResponse:
        return RedirectResponse(url=f"/login?returnTo={quote(exc.return_to)}", status_code=303)

    @app.exception_handler(ManagerRequired)
    def _manager_required(request: Request, exc: ManagerRequired):
        return templates.TemplateResponse(request, "forbidden.html", {"session": exc.session}, status_code=403)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    if settings.web_ui_enabled:
        app.include_router(web_router)

    ensure_data_directories()
    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    return app
