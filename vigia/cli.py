"""Interface de linha de comando para operar o Vigia."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from vigia.application import EventFilters
from vigia.bootstrap import run_migrations
from vigia.container import build_container
from vigia.domain import InvalidInput, StoreUnavailable
from vigia.schemas import ObservationPayload


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Vigia - rastreador de ocorrências")
    subparsers = parser.add_subparsers(dest="command", required=True)

    bootstrap = subparsers.add_parser(
        "bootstrap", help="Cria índices, marcador de rastreamento e limpa durações implausíveis"
    )

    ingest = subparsers.add_parser(
        "ingest", help="Reconcilia observações a partir de um arquivo JSON"
    )
    ingest.add_argument(
        "path",
        type=Path,
        help="Arquivo com uma lista de observações ou um objeto com a chave 'items'",
    )

    stats = subparsers.add_parser("stats", help="Exibe as estatísticas das ocorrências")
    stats.add_argument("--day", default=None, help="today, yesterday ou all")
    stats.add_argument("--status", default=None, help="open, closed ou all")
    stats.add_argument("--city", default=None, help="Trecho do nome da cidade")
    stats.add_argument("--month", default=None, help="Mês no formato YYYY-MM")
    stats.add_argument("--type", dest="event_type", default=None, help="Tipo classificado")

    recalc = subparsers.add_parser(
        "recalc-durations", help="Recalcula durações ausentes de ocorrências fechadas"
    )
    recalc.add_argument("--limit", type=int, default=2000, help="Máximo de ocorrências")

    regeocode = subparsers.add_parser(
        "regeocode", help="Corrige coordenadas fora da região de operação"
    )
    regeocode.add_argument("--limit", type=int, default=200, help="Máximo de ocorrências")

    serve = subparsers.add_parser("serve", help="Inicia a API HTTP")

    for sp in (bootstrap, ingest, stats, recalc, regeocode, serve):
        sp.add_argument(
            "--log-level",
            default=None,
            help="Nível de log: DEBUG, INFO, WARNING, ERROR (padrão INFO)",
        )

    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    load_dotenv()
    args = parse_args(argv)
    console = Console()
    level_name = getattr(args, "log_level", None) or os.getenv("VIGIA_LOG_LEVEL", "INFO")
    handler = RichHandler(console=console, markup=True, rich_tracebacks=True)
    logging.basicConfig(
        level=getattr(logging, str(level_name).upper(), logging.INFO),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    logger = logging.getLogger("vigia.cli")

    if args.command == "serve":
        from vigia.api import run

        run()
        return

    container = build_container()
    try:
        if args.command == "bootstrap":
            with console.status("Executando migrations...", spinner="dots"):
                run_migrations(container.factory)
            console.print("[green]Bootstrap concluído.[/green]")
        elif args.command == "ingest":
            items = _load_observations(args.path)
            accepted = 0
            rejected = 0
            with console.status("Reconciliando observações...", spinner="dots"):
                for raw in items:
                    try:
                        observation = ObservationPayload.model_validate(raw).to_domain()
                        container.reconciler.reconcile(observation)
                    except (ValidationError, InvalidInput) as exc:
                        logger.warning("Observação rejeitada: %s", exc)
                        rejected += 1
                        continue
                    accepted += 1
            console.print_json(data={"accepted": accepted, "rejected": rejected})
        elif args.command == "stats":
            filters = EventFilters.from_query(
                status=args.status,
                day=args.day,
                city=args.city,
                month=args.month,
                event_type=args.event_type,
            )
            console.print_json(data=container.stats.compute(filters).to_mapping())
        elif args.command == "recalc-durations":
            with console.status("Recalculando durações...", spinner="dots"):
                result = container.duration_recalc_job.run(limit=args.limit)
            console.print_json(data=result.to_mapping())
        elif args.command == "regeocode":
            with console.status("Corrigindo coordenadas...", spinner="dots"):
                result = container.regeocode_job.run(limit=args.limit)
            console.print_json(data=result.to_mapping())
            if result.failed:
                logger.warning("%d ocorrência(s) ficaram sem coordenadas", result.failed)
        else:
            raise ValueError(f"Comando desconhecido: {args.command}")
    except StoreUnavailable as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(2)
    finally:
        container.close()


def _load_observations(path: Path) -> list[dict[str, Any]]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("items", [])
    if not isinstance(data, list):
        raise ValueError("O arquivo deve conter uma lista de observações")
    return [item for item in data if isinstance(item, dict)]


if __name__ == "__main__":
    main()
