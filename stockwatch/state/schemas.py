from typing import Any

from pydantic import BaseModel, Field


class ActionRequest(BaseModel):
    type: str
    payload: dict[str, Any] | None = None


class SelectedStockRequest(BaseModel):
    symbol: str | None = Field(default=None, max_length=16)


class OfflineRequest(BaseModel):
    is_offline: bool


class WatchlistCreate(BaseModel):
    name: str = Field(max_length=100)
    symbol: str | None = Field(default=None, max_length=16)


class WatchlistUpdate(BaseModel):
    name: str = Field(max_length=100)


class WatchlistSymbolAdd(BaseModel):
    symbol: str = Field(max_length=16)


class SymbolRemoval(BaseModel):
    symbol: str
    removed_from: int
