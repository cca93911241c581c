from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass(slots=True, frozen=True)
class Session:
    user_id: str
    email: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict, compare=False)
