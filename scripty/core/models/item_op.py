"""
ItemOp and ItemReceipt models — the item-tree mutation contract.

ItemOps are planned mutations of the host project's item tree.
ItemReceipts are their outcomes. The reconciliation engine plans ops,
applies them in order, and collects one receipt per op. Applying an op
never raises: item-tree failures are captured in the receipt.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Literal

from pydantic import BaseModel, Field


class ItemOpKind(StrEnum):
    """The four mutations the engine can ask of an item tree."""

    ADD_ITEM_FROM_FILE = "add_item_from_file"
    SET_ITEM_TYPE = "set_item_type"
    UPDATE_ITEM_TYPE = "update_item_type"
    DELETE_ITEM = "delete_item"


class ItemOp(BaseModel):
    """A planned item-tree mutation."""

    kind: ItemOpKind
    path: str                          # canonical absolute path
    build_action: str | None = None    # set/update ops only

    @classmethod
    def add(cls, path: str) -> ItemOp:
        return cls(kind=ItemOpKind.ADD_ITEM_FROM_FILE, path=path)

    @classmethod
    def set_type(cls, path: str, build_action: str) -> ItemOp:
        return cls(kind=ItemOpKind.SET_ITEM_TYPE, path=path, build_action=build_action)

    @classmethod
    def update_type(cls, path: str, build_action: str) -> ItemOp:
        return cls(kind=ItemOpKind.UPDATE_ITEM_TYPE, path=path, build_action=build_action)

    @classmethod
    def delete(cls, path: str) -> ItemOp:
        return cls(kind=ItemOpKind.DELETE_ITEM, path=path)

    def __str__(self) -> str:
        if self.build_action is not None:
            return f"{self.kind.value}({self.path}, {self.build_action})"
        return f"{self.kind.value}({self.path})"


class ItemReceipt(BaseModel):
    """Outcome of applying one ItemOp."""

    op: ItemOp
    status: Literal["ok", "skipped", "failed"] = "ok"
    detail: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @classmethod
    def success(cls, op: ItemOp, detail: str = "", **kwargs: Any) -> ItemReceipt:
        return cls(op=op, status="ok", detail=detail, **kwargs)

    @classmethod
    def skip(cls, op: ItemOp, reason: str = "", **kwargs: Any) -> ItemReceipt:
        return cls(op=op, status="skipped", detail=reason, **kwargs)

    @classmethod
    def failure(cls, op: ItemOp, error: str, **kwargs: Any) -> ItemReceipt:
        return cls(op=op, status="failed", detail=error, **kwargs)
