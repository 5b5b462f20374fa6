"""File-based persistence for the console's navigation snapshot."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from ..config import settings
from ..schemas.navigation import NavigationSnapshot

logger = logging.getLogger(__name__)

SNAPSHOT_FILE_NAME = "dashboard_state.json"


class SnapshotStore:
    """Thin wrapper around the data root holding the last navigation snapshot."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.state_root = self.root / "state"
        self.state_root.mkdir(parents=True, exist_ok=True)
        self.path = self.state_root / SNAPSHOT_FILE_NAME

    def save(self, snapshot: NavigationSnapshot) -> None:
        payload = snapshot.model_dump(mode="json", by_alias=True)
        tmp_path = self.path.with_suffix(".tmp")
        with tmp_path.open("w", encoding="utf-8") as handle:
            json.dump(payload, handle, ensure_ascii=False, indent=2)
        tmp_path.replace(self.path)

    def load(self) -> Optional[NavigationSnapshot]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                return NavigationSnapshot.model_validate(json.load(handle))
        except (OSError, json.JSONDecodeError, ValidationError) as exc:
            logger.warning(f"Ignoring unreadable navigation snapshot at {self.path}: {exc}")
            return None

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)
