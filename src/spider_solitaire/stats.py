"""Lifetime statistics and achievement tracking."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from spider_solitaire import common as C
from spider_solitaire.achievements import ACHIEVEMENTS
from spider_solitaire.game import GameMode, SpiderGame

logger = logging.getLogger(__name__)

_STATS_VERSION = 1


def _per_mode(value) -> Dict[str, Any]:
    return {mode.value: value for mode in GameMode}


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Statistics:
    games_played: int = 0
    total_wins: int = 0
    total_moves: int = 0
    total_sequences: int = 0
    best_scores: Dict[str, int] = field(default_factory=lambda: _per_mode(0))
    # None until a game of that mode has been won
    fastest_times: Dict[str, Optional[int]] = field(default_factory=lambda: _per_mode(None))
    wins_by_mode: Dict[str, int] = field(default_factory=lambda: _per_mode(0))
    unlocked: Dict[str, int] = field(default_factory=dict)

    def best_score(self, mode: GameMode) -> int:
        return self.best_scores.get(mode.value, 0)

    def update_best_score(self, mode: GameMode, score: int):
        if score > self.best_score(mode):
            self.best_scores[mode.value] = score

    def fastest_time(self, mode: GameMode) -> Optional[int]:
        return self.fastest_times.get(mode.value)

    def update_fastest_time(self, mode: GameMode, seconds: int):
        current = self.fastest_time(mode)
        if current is None or seconds < current:
            self.fastest_times[mode.value] = seconds

    def wins_for(self, mode: GameMode) -> int:
        return self.wins_by_mode.get(mode.value, 0)

    def increment_wins_for(self, mode: GameMode):
        self.wins_by_mode[mode.value] = self.wins_for(mode) + 1

    def is_unlocked(self, achievement_id: str) -> bool:
        return achievement_id in self.unlocked

    def unlock(self, achievement_id: str, timestamp_ms: Optional[int] = None):
        if achievement_id not in self.unlocked:
            self.unlocked[achievement_id] = _now_ms() if timestamp_ms is None else timestamp_ms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": _STATS_VERSION,
            "games_played": self.games_played,
            "total_wins": self.total_wins,
            "total_moves": self.total_moves,
            "total_sequences": self.total_sequences,
            "best_scores": dict(self.best_scores),
            "fastest_times": dict(self.fastest_times),
            "wins_by_mode": dict(self.wins_by_mode),
            "unlocked": dict(self.unlocked),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Statistics":
        def counter(key):
            value = data.get(key, 0)
            if not isinstance(value, int) or isinstance(value, bool) or value < 0:
                raise ValueError(f"Invalid counter {key}: {value!r}")
            return value

        def mapping(key, allow_none=False):
            raw = data.get(key, {})
            if not isinstance(raw, dict):
                raise ValueError(f"{key} must be a mapping")
            out = {}
            for name, value in raw.items():
                if value is None and allow_none:
                    out[name] = None
                elif isinstance(value, int) and not isinstance(value, bool):
                    out[name] = value
                else:
                    raise ValueError(f"Invalid {key} entry {name}: {value!r}")
            return out

        stats = cls(
            games_played=counter("games_played"),
            total_wins=counter("total_wins"),
            total_moves=counter("total_moves"),
            total_sequences=counter("total_sequences"),
        )
        stats.best_scores.update(mapping("best_scores"))
        stats.fastest_times.update(mapping("fastest_times", allow_none=True))
        stats.wins_by_mode.update(mapping("wins_by_mode"))
        stats.unlocked.update(mapping("unlocked"))
        return stats


class StatsStore:
    """Owns the ``Statistics`` record and its file.

    Construct one per process and hand it to the play session; call
    :meth:`load` at startup. Counter updates go through the ``record_*``
    helpers, which persist immediately.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = path or C.stats_path()
        self.stats = Statistics()

    def load(self) -> Statistics:
        data = C.safe_read_json(self.path)
        if data is None:
            self.stats = Statistics()
            return self.stats
        try:
            self.stats = Statistics.from_dict(data)
        except ValueError as exc:
            logger.warning("Discarding corrupt statistics file %s: %s", self.path, exc)
            self.stats = Statistics()
        return self.stats

    def save(self) -> bool:
        try:
            C.safe_write_json(self.path, self.stats.to_dict())
        except OSError as exc:
            logger.error("Failed to save statistics to %s: %s", self.path, exc)
            return False
        return True

    def check_achievements(self, game: Optional[SpiderGame] = None) -> List[str]:
        newly_unlocked = []
        for achievement in ACHIEVEMENTS:
            if self.stats.is_unlocked(achievement.id):
                continue
            if achievement.is_met(self.stats, game):
                self.stats.unlock(achievement.id)
                newly_unlocked.append(achievement.name)
        if newly_unlocked:
            logger.info("Achievements unlocked: %s", ", ".join(newly_unlocked))
            self.save()
        return newly_unlocked

    # ----- Counter updates -----
    def record_game_started(self):
        self.stats.games_played += 1
        self.save()

    def record_move(self):
        self.stats.total_moves += 1
        self.save()

    def record_sequences(self, count: int):
        if count > 0:
            self.stats.total_sequences += count
            self.save()

    def record_win(self, game: SpiderGame):
        s = self.stats
        s.total_wins += 1
        s.increment_wins_for(game.mode)
        s.update_best_score(game.mode, game.score)
        s.update_fastest_time(game.mode, game.elapsed_seconds)
        self.save()
