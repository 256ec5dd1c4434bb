"""Modelos Pydantic para observações recebidas do coletor de feed."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from vigia.domain import Observation


class ObservationPayload(BaseModel):
    """Observação individual no formato camelCase enviado pelo coletor."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    #: Identificador estável da ocorrência; vazio é rejeitado na reconciliação.
    id: str | None = None
    title: str | None = None
    link: str | None = None
    pub_date: str | None = Field(default=None, alias="pubDate")
    place_text: str | None = Field(default=None, alias="placeText")
    city_text: str | None = Field(default=None, alias="cityText")
    status_text: str | None = Field(default=None, alias="statusText")
    event_type: str | None = Field(default=None, alias="eventType")
    description_raw: str | None = Field(default=None, alias="descriptionRaw")
    start_time_iso: str | None = Field(default=None, alias="startTimeIso")
    end_time_iso: str | None = Field(default=None, alias="endTimeIso")
    duration_min: float | None = Field(default=None, alias="durationMin")
    is_closed: bool | None = Field(default=None, alias="isClosed")

    def to_domain(self) -> Observation:
        """Converte os dados validados em uma :class:`Observation`."""

        return Observation(
            id=self.id or "",
            title=self.title,
            link=self.link,
            pub_date=self.pub_date,
            place_text=self.place_text,
            city_text=self.city_text,
            status_text=self.status_text,
            event_type=self.event_type,
            description_raw=self.description_raw,
            start_time_iso=self.start_time_iso,
            end_time_iso=self.end_time_iso,
            duration_min=self.duration_min,
            is_closed=self.is_closed,
        )


class IngestBatchPayload(BaseModel):
    """Lote de observações enviado em uma única requisição."""

    #: Nome livre do coletor que originou o lote.
    source: str | None = None
    items: list[ObservationPayload] = Field(min_length=1)


class RegeocodeRequest(BaseModel):
    mode: str = "outside_region"
    limit: int = 200


class RecalcRequest(BaseModel):
    limit: int = 2000


__all__ = [
    "IngestBatchPayload",
    "ObservationPayload",
    "RecalcRequest",
    "RegeocodeRequest",
]
