"""Per-request trace identifiers passed into services."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestContext:
    request_id: str = ""
    uid: str = ""

    def log_fields(self) -> dict[str, str]:
        return {"request_id": self.request_id, "uid": self.uid}


EMPTY_CONTEXT = RequestContext()
