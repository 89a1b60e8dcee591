"""Named save files: one JSON file per ``SaveData`` record."""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from spider_solitaire import common as C
from spider_solitaire.game import SpiderGame

logger = logging.getLogger(__name__)

_SAVE_VERSION = 1
_TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def default_saves_dir() -> str:
    return C.saves_dir("spider")


@dataclass(frozen=True)
class SaveData:
    game: SpiderGame
    label: str
    remark: str
    saved_at: datetime

    @classmethod
    def capture(cls, game: SpiderGame, label: str, remark: str = "") -> "SaveData":
        """Snapshot ``game`` now; later play does not affect the record."""
        return cls(game=game.copy(), label=label, remark=remark, saved_at=datetime.now())

    def formatted_save_time(self) -> str:
        return self.saved_at.strftime(_TIME_FORMAT)

    def __str__(self):
        return f"[{self.formatted_save_time()}] {self.label} ({self.remark})"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": _SAVE_VERSION,
            "label": self.label,
            "remark": self.remark,
            "saved_at": self.saved_at.isoformat(),
            "game": self.game.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SaveData":
        try:
            label = data["label"]
            remark = data.get("remark", "")
            saved_at = datetime.fromisoformat(data["saved_at"])
            game = SpiderGame.from_dict(data["game"])
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed save record: {exc}") from exc
        if not isinstance(label, str) or not isinstance(remark, str):
            raise ValueError("label and remark must be strings")
        return cls(game=game, label=label, remark=remark, saved_at=saved_at)


def write_save(save: SaveData, directory: Optional[str] = None) -> str:
    """Write ``save`` to a new file named by creation time and return its path.

    Raises ``OSError`` when the file cannot be written.
    """
    directory = directory or default_saves_dir()
    path = os.path.join(directory, f"save_{int(time.time() * 1000)}.json")
    # Two saves inside the same millisecond must not overwrite each other
    n = 1
    while os.path.exists(path):
        path = os.path.join(directory, f"save_{int(time.time() * 1000)}_{n}.json")
        n += 1
    C.safe_write_json(path, save.to_dict())
    logger.info("Saved game '%s' to %s", save.label, path)
    return path


def list_saves(directory: Optional[str] = None) -> List[SaveData]:
    """Return every valid save in ``directory``; unreadable files are skipped."""
    directory = directory or default_saves_dir()
    try:
        names = sorted(n for n in os.listdir(directory) if n.endswith(".json"))
    except FileNotFoundError:
        return []
    saves = []
    for name in names:
        path = os.path.join(directory, name)
        data = C.safe_read_json(path)
        if data is None:
            continue
        try:
            saves.append(SaveData.from_dict(data))
        except ValueError as exc:
            logger.debug("Skipping invalid save %s: %s", path, exc)
    return saves
