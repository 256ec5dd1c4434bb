"""Aplicação FastAPI com as rotas de ingestão, consulta e manutenção."""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, Iterable

import uvicorn
from dotenv import load_dotenv
from fastapi import APIRouter, BackgroundTasks, Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from vigia import settings
from vigia.application import EventFilters
from vigia.bootstrap import run_migrations
from vigia.container import VigiaContainer, build_container
from vigia.domain import Event, InvalidInput, StoreUnavailable, VigiaError
from vigia.schemas import IngestBatchPayload, RecalcRequest, RegeocodeRequest

log = logging.getLogger("vigia.api")

_REGEOCODE_MODES = ("outside_region", "outside_cz")


def configure_cors(app: FastAPI) -> None:
    """Configura o CORS padrão utilizado pelo serviço."""

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _require_secret(expected: str, provided: str | None, name: str) -> None:
    if not expected:
        raise HTTPException(status_code=500, detail=f"{name} not set on server")
    if (provided or "") != expected:
        raise HTTPException(status_code=401, detail="unauthorized")


def include_routes(
    app: FastAPI,
    container: VigiaContainer,
    *,
    api_key: Callable[[], str] = settings.get_api_key,
    admin_password: Callable[[], str] = settings.get_admin_password,
) -> None:
    """Registra as rotas do serviço na aplicação."""

    router = APIRouter(prefix="/api", tags=["Ocorrências"])

    def require_key(x_api_key: str | None = Header(default=None)) -> None:
        _require_secret(api_key(), x_api_key, "API key")

    def require_admin(x_admin_password: str | None = Header(default=None)) -> None:
        _require_secret(admin_password(), x_admin_password, "admin password")

    def backfill_coordinates(events: Iterable[Event]) -> None:
        try:
            result = container.backfill.backfill_coordinates(events)
        except VigiaError:
            log.exception("Falha no preenchimento de coordenadas em segundo plano")
            return
        if result.fixed:
            log.info("%d coordenada(s) preenchida(s) em segundo plano", result.fixed)

    @router.post("/ingest", dependencies=[Depends(require_key)])
    def ingest(payload: IngestBatchPayload, background_tasks: BackgroundTasks) -> dict[str, Any]:
        """Reconcilia um lote de observações."""

        accepted: list[Event] = []
        rejected = 0
        closed_seen = 0
        for item in payload.items:
            observation = item.to_domain()
            try:
                event = container.reconciler.reconcile(observation)
            except InvalidInput as exc:
                log.warning("Observação rejeitada: %s", exc)
                rejected += 1
                continue
            accepted.append(event)
            if observation.is_closed:
                closed_seen += 1

        if accepted:
            background_tasks.add_task(backfill_coordinates, accepted)

        return {
            "ok": True,
            "source": payload.source or "unknown",
            "accepted": len(accepted),
            "rejected": rejected,
            "closed_seen_in_batch": closed_seen,
        }

    @router.get("/events")
    def list_events(
        background_tasks: BackgroundTasks,
        day: str | None = None,
        status: str | None = None,
        city: str | None = None,
        month: str | None = None,
        event_type: str | None = Query(default=None, alias="type"),
        limit: int = 400,
    ) -> dict[str, Any]:
        """Lista ocorrências filtradas preenchendo durações ausentes."""

        filters = EventFilters.from_query(
            status=status, day=day, city=city, month=month, event_type=event_type
        )
        events = container.query_service.list_events(filters, limit)
        durations = container.backfill.backfill_durations(events)
        background_tasks.add_task(backfill_coordinates, durations.events)

        return {
            "ok": True,
            "filters": filters.to_mapping(),
            "backfilled_durations": durations.fixed,
            "items": [event.to_record() for event in durations.events],
        }

    @router.get("/stats")
    def stats(
        day: str | None = None,
        status: str | None = None,
        city: str | None = None,
        month: str | None = None,
        event_type: str | None = Query(default=None, alias="type"),
    ) -> dict[str, Any]:
        """Contagens, histograma diário e rankings."""

        filters = EventFilters.from_query(
            status=status, day=day, city=city, month=month, event_type=event_type
        )
        return {"ok": True, **container.stats.compute(filters).to_mapping()}

    @router.post("/admin/regeocode", dependencies=[Depends(require_key)])
    def regeocode(request: RegeocodeRequest) -> dict[str, Any]:
        """Corrige coordenadas fora da região de operação."""

        if request.mode not in _REGEOCODE_MODES:
            raise HTTPException(status_code=400, detail="mode must be 'outside_region'")
        result = container.regeocode_job.run(limit=request.limit)
        return {"ok": True, "mode": request.mode, **result.to_mapping()}

    @router.post("/admin/recalc", dependencies=[Depends(require_admin)])
    def recalc(request: RecalcRequest) -> dict[str, Any]:
        """Recalcula durações ausentes de ocorrências fechadas."""

        result = container.duration_recalc_job.run(limit=request.limit)
        return {"ok": True, **result.to_mapping()}

    app.include_router(router)

    @app.get("/health", response_class=PlainTextResponse)
    def health() -> str:
        return "OK"

    @app.exception_handler(StoreUnavailable)
    async def store_unavailable(_request, exc: StoreUnavailable) -> JSONResponse:
        log.error("Armazenamento indisponível: %s", exc, exc_info=exc)
        return JSONResponse(status_code=503, content={"ok": False, "error": "store unavailable"})


def create_app(container: VigiaContainer | None = None) -> FastAPI:
    """Instancia a aplicação; sem ``container`` executa o bootstrap e monta o padrão."""

    if container is None:
        container = build_container()
        run_migrations(container.factory)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        container.close()

    app = FastAPI(
        title="Vigia API",
        version="1.0.0",
        description="Ingestão e consulta de ocorrências reconciliadas.",
        lifespan=lifespan,
    )
    configure_cors(app)
    include_routes(app, container)
    return app


def run() -> None:
    """Executa a API usando o Uvicorn."""

    load_dotenv()
    uvicorn.run(
        "vigia.api:create_app",
        host=settings.get_api_bind_host(),
        port=settings.get_api_port(),
        factory=True,
    )


__all__ = ["configure_cors", "create_app", "include_routes", "run"]
