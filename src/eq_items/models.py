"""Pydantic models for resolved items, their statistics and linked effects."""

from __future__ import annotations

from pydantic import BaseModel, Field


class Statistic(BaseModel):
    code: str
    value: float | None = None
    effect: str = ""


class Effect(BaseModel):
    name: str = ""
    uri: str = ""
    restriction: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.name) and bool(self.uri)


class Item(BaseModel):
    id: int | None = Field(default=None, gt=0)
    name: str
    display_name: str = Field(default="", alias="displayName")
    image_src: str = Field(default="", alias="imageSrc")
    price: float | None = None
    statistics: list[Statistic] = Field(default_factory=list)
    effects: list[Effect] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @property
    def is_empty(self) -> bool:
        return not self.image_src and not self.statistics and not self.effects
