"""On-disk format of the delivery map (``.state/delivered.json``)."""

from __future__ import annotations

from datetime import datetime  # noqa: TC003

from pydantic import BaseModel, ConfigDict, Field, RootModel


class DeliveryRecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    delivered_at: datetime = Field(alias="deliveredAt")
    release: str
    note: str | None = None


class DeliveryMapModel(RootModel[dict[str, DeliveryRecordModel]]):
    root: dict[str, DeliveryRecordModel] = Field(default_factory=dict)
