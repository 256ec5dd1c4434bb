"""Cliente HTTP do geocodificador compatível com a API de busca do Nominatim."""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable, Sequence

import httpx

from vigia.domain import CZECHIA_BOUNDS, Coordinates, GeoBounds, GeocodeCandidate, UnresolvedLookup
from vigia.domain.ports import Geocoder

log = logging.getLogger(__name__)


class NominatimGeocoder(Geocoder):
    """Consulta o endpoint ``/search`` respeitando um intervalo mínimo entre chamadas."""

    def __init__(
        self,
        url: str,
        *,
        user_agent: str,
        country_code: str = "cz",
        bounds: GeoBounds = CZECHIA_BOUNDS,
        client: httpx.Client | None = None,
        timeout: float | None = 10.0,
        min_interval: float = 1.0,
        result_limit: int = 3,
        monotonic: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        """Configura o cliente HTTP utilizado nas buscas.

        Parameters
        ----------
        url:
            Endereço completo do endpoint de busca.
        user_agent:
            Identificação exigida pela política de uso do serviço.
        client:
            Cliente HTTP opcional reutilizado por outros componentes.
        min_interval:
            Segundos mínimos entre duas requisições consecutivas.
        """

        self._url = url
        self._headers = {"User-Agent": user_agent, "Accept-Language": "cs,en;q=0.8"}
        self._country_code = country_code
        self._bounds = bounds
        self._min_interval = min_interval
        self._result_limit = result_limit
        self._monotonic = monotonic
        self._sleep = sleep

        self._client: httpx.Client = client or httpx.Client(timeout=timeout)
        """Cliente HTTP responsável pelas consultas."""

        self._owns_client: bool = client is None
        """Indica se o cliente HTTP deve ser fechado por esta classe."""

        self._lock = threading.Lock()
        self._last_call: float | None = None

    def search(self, query: str) -> Sequence[GeocodeCandidate]:
        params = {
            "format": "json",
            "limit": str(self._result_limit),
            "q": query,
            "countrycodes": self._country_code,
            "addressdetails": "1",
            "bounded": "1",
            "viewbox": self._bounds.viewbox(),
        }
        with self._lock:
            self._throttle()
            try:
                response = self._client.get(self._url, params=params, headers=self._headers)
            except httpx.HTTPError as exc:
                raise UnresolvedLookup(f"geocoder request failed for {query!r}: {exc}") from exc
            finally:
                self._last_call = self._monotonic()

        if response.status_code != 200:
            raise UnresolvedLookup(
                f"geocoder answered {response.status_code} for {query!r}"
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise UnresolvedLookup(f"geocoder returned invalid JSON for {query!r}") from exc
        if not isinstance(body, list):
            return []
        return [candidate for candidate in map(self._parse_candidate, body) if candidate]

    def close(self) -> None:
        """Fecha o cliente HTTP caso esta instância seja a proprietária dele."""

        if self._owns_client:
            self._client.close()

    def _throttle(self) -> None:
        if self._last_call is None or self._min_interval <= 0:
            return
        wait = self._last_call + self._min_interval - self._monotonic()
        if wait > 0:
            log.debug("Aguardando %.2fs antes da próxima geocodificação", wait)
            self._sleep(wait)

    @staticmethod
    def _parse_candidate(item: Any) -> GeocodeCandidate | None:
        if not isinstance(item, dict):
            return None
        coordinates = Coordinates.parse(item.get("lat"), item.get("lon"))
        if coordinates is None:
            return None
        address = item.get("address")
        country = address.get("country_code") if isinstance(address, dict) else None
        return GeocodeCandidate(
            coordinates=coordinates,
            country_code=str(country).lower() if country else None,
            display_name=item.get("display_name"),
        )


__all__ = ["NominatimGeocoder"]
