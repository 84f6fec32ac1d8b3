"""Document entity."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Document:
    """Stored JSON document, unique by content hash."""

    id: str
    content_hash: str
    raw_content: bytes
    size: int
    created_at: datetime
    updated_at: datetime
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def json_data(self) -> Any:
        """Decoded JSON value of the raw content."""
        return json.loads(self.raw_content)
