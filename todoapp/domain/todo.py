from __future__ import annotations

from typing import Any, Mapping

from pydantic import BaseModel


class Todo(BaseModel):
    id: int
    content: str
    finished: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Todo":
        return cls(id=int(row["id"]), content=row["content"], finished=bool(row["finished"]))

    def toggled(self) -> "Todo":
        return self.model_copy(update={"finished": not self.finished})
