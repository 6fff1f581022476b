"""FastAPI application."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Body, Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger

from spellwatch.core.report import format_report
from spellwatch.core.services import Services, build_services
from spellwatch.store import create_store
from spellwatch.utils.config import Settings, settings as default_settings
from spellwatch.utils.constants import ROLES
from spellwatch.utils.errors import InfrastructureError, SpellwatchError, StoreError


def get_services(request: Request) -> Services:
    return request.app.state.services


def _ok(message: str, **data) -> dict:
    return {"success": True, "message": message, **data}


def create_app(services: Optional[Services] = None, settings: Optional[Settings] = None) -> FastAPI:
    """Build the API. Without ``services`` the store is created on startup
    from ``settings`` and closed on shutdown."""
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.services is None
        if owned:
            app.state.services = build_services(create_store(settings))
            logger.info(f"Store backend: {settings.store.backend}")
        yield
        if owned:
            app.state.services.store.close()
            app.state.services = None

    app = FastAPI(
        title="Spellwatch API",
        description="Rainfall spell and ponding-point monitoring",
        version=settings.app.version,
        lifespan=lifespan,
    )
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(SpellwatchError)
    async def spellwatch_error(request: Request, exc: SpellwatchError):
        if isinstance(exc, InfrastructureError):
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        message = exc.public_message if isinstance(exc, StoreError) else exc.message
        body = {"success": False, "error": message}
        if getattr(exc, "field", None):
            body["field"] = exc.field
        return JSONResponse(status_code=exc.status_code, content=body)

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"{request.method} {request.url.path} crashed: {exc}")
        return JSONResponse(status_code=500, content={"success": False, "error": "An unknown error occurred."})

    @app.get("/health")
    def health(svc: Services = Depends(get_services)):
        """Health check endpoint."""
        db_ok = svc.store.health_check()
        return {
            "status": "healthy" if db_ok else "degraded",
            "database": "connected" if db_ok else "disconnected",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    @app.get("/api/v1/roles")
    def roles():
        return {"roles": ROLES}

    # ============ CITIES ============

    @app.get("/api/v1/cities")
    def list_cities(svc: Services = Depends(get_services)):
        cities = svc.cities.list_cities()
        return {"count": len(cities), "cities": [c.to_dict() for c in cities]}

    @app.post("/api/v1/cities", status_code=201)
    def create_city(payload: dict[str, Any] = Body(...), svc: Services = Depends(get_services)):
        city, message = svc.cities.create_city(payload)
        return _ok(message, city=city.to_dict())

    # ============ PONDING POINTS ============

    @app.get("/api/v1/cities/{city_name}/points")
    def list_points(city_name: str, svc: Services = Depends(get_services)):
        points = svc.points.list_points(city_name)
        return {"count": len(points), "points": [p.to_dict() for p in points]}

    @app.post("/api/v1/cities/{city_name}/points")
    def save_point(city_name: str, payload: dict[str, Any] = Body(...), svc: Services = Depends(get_services)):
        return _ok(svc.points.add_or_update(city_name, payload))

    @app.post("/api/v1/cities/{city_name}/points/batch")
    def batch_update_points(city_name: str, payload: dict[str, Any] = Body(...), svc: Services = Depends(get_services)):
        readings = payload.get("points")
        if not isinstance(readings, list):
            readings = []
        return _ok(svc.points.batch_update(city_name, readings))

    @app.delete("/api/v1/cities/{city_name}/points/{point_id}")
    def delete_point(city_name: str, point_id: str, svc: Services = Depends(get_services)):
        return _ok(svc.points.delete(city_name, point_id))

    @app.get("/api/v1/cities/{city_name}/summary")
    def city_summary(city_name: str, svc: Services = Depends(get_services)):
        return svc.points.summary(city_name).to_dict()

    # ============ SPELLS ============

    @app.get("/api/v1/cities/{city_name}/spell")
    def active_spell(city_name: str, svc: Services = Depends(get_services)):
        spell = svc.spells.get_active_spell(city_name)
        return {"active": spell is not None, "spell": spell.to_dict() if spell else None}

    @app.post("/api/v1/cities/{city_name}/spell/start")
    def start_spell(city_name: str, svc: Services = Depends(get_services)):
        spell = svc.spells.start_spell(city_name)
        return _ok("Spell started. You can now enter rainfall data.", spell=spell.to_dict())

    @app.post("/api/v1/cities/{city_name}/spell/stop")
    def stop_spell(city_name: str, svc: Services = Depends(get_services)):
        spell = svc.spells.stop_spell(city_name)
        return _ok("Spell data saved and rainfall values reset.", spell=spell.to_dict())

    # ============ REPORT ============

    @app.get("/api/v1/cities/{city_name}/report")
    def latest_report(
        city_name: str,
        format: str = Query("json", pattern="^(json|text)$"),
        svc: Services = Depends(get_services),
    ):
        report = svc.reports.latest(city_name)
        if format == "text":
            return PlainTextResponse(format_report(report, "text"))
        return report.to_dict()

    # ============ ACCESS REQUESTS ============

    @app.post("/api/v1/requests", status_code=201)
    def request_access(payload: dict[str, Any] = Body(...), svc: Services = Depends(get_services)):
        return _ok(svc.requests.request_access(payload))

    @app.get("/api/v1/requests")
    def pending_requests(svc: Services = Depends(get_services)):
        pending = svc.requests.list_pending()
        return {"count": len(pending), "requests": [r.to_dict() for r in pending]}

    @app.post("/api/v1/requests/{request_id}/review")
    def review_request(request_id: str, payload: dict[str, Any] = Body(...), svc: Services = Depends(get_services)):
        request = svc.requests.review(request_id, str(payload.get("status", "")))
        return _ok(f"Request for {request.email} {request.status}.", request=request.to_dict())

    # ============ WEATHER ============

    @app.get("/api/v1/weather")
    def weather(city: Optional[str] = Query(None), svc: Services = Depends(get_services)):
        if city:
            return {"weather": [svc.dashboard.fetch_city(city).to_dict()]}
        return {"weather": [w.to_dict() for w in svc.dashboard.fetch()]}

    return app


app = create_app()
