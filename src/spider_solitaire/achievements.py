"""Achievement catalog.

Each achievement is a tagged rule: ``kind`` selects the check and
``threshold``/``mode`` parameterise it. Rules are pure functions of the
statistics and, optionally, the game that just changed.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Optional, Tuple

from spider_solitaire.game import GameMode

if TYPE_CHECKING:
    from spider_solitaire.game import SpiderGame
    from spider_solitaire.stats import Statistics


GAMES_PLAYED = "games_played"
TOTAL_WINS = "total_wins"
MODE_WINS = "mode_wins"
FASTEST_WIN = "fastest_win"
WIN_UNDER_MOVES = "win_under_moves"
TOTAL_MOVES = "total_moves"


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    kind: str
    threshold: int
    mode: Optional[GameMode] = None

    def is_met(self, stats: "Statistics", game: Optional["SpiderGame"] = None) -> bool:
        kind = self.kind
        if kind == GAMES_PLAYED:
            return stats.games_played >= self.threshold
        if kind == TOTAL_WINS:
            return stats.total_wins >= self.threshold
        if kind == MODE_WINS:
            return stats.wins_for(self.mode) >= self.threshold
        if kind == FASTEST_WIN:
            times = (stats.fastest_time(mode) for mode in GameMode)
            return any(t is not None and t <= self.threshold for t in times)
        if kind == WIN_UNDER_MOVES:
            return game is not None and game.is_game_won() and game.moves < self.threshold
        if kind == TOTAL_MOVES:
            return stats.total_moves >= self.threshold
        raise ValueError(f"Unknown achievement kind: {kind}")


ACHIEVEMENTS: Tuple[Achievement, ...] = (
    Achievement(
        id="NOVICE",
        name="Novice",
        description="Start your first game",
        kind=GAMES_PLAYED,
        threshold=1,
    ),
    Achievement(
        id="FIRST_WIN",
        name="First Victory",
        description="Win your first game",
        kind=TOTAL_WINS,
        threshold=1,
    ),
    Achievement(
        id="SINGLE_EXPERT",
        name="Single-Suit Expert",
        description="Win 10 Single Suit games",
        kind=MODE_WINS,
        threshold=10,
        mode=GameMode.SINGLE_SUIT,
    ),
    Achievement(
        id="TWO_SUIT_PRO",
        name="Two-Suit Pro",
        description="Win 5 Two Suits games",
        kind=MODE_WINS,
        threshold=5,
        mode=GameMode.TWO_SUITS,
    ),
    Achievement(
        id="FOUR_SUIT_KING",
        name="Four-Suit King",
        description="Win a Four Suits game",
        kind=MODE_WINS,
        threshold=1,
        mode=GameMode.FOUR_SUITS,
    ),
    Achievement(
        id="SPEED_DEMON",
        name="Speed Demon",
        description="Win a game in 10 minutes (600 seconds) or less",
        kind=FASTEST_WIN,
        threshold=600,
    ),
    Achievement(
        id="ECONOMIST",
        name="Economist",
        description="Win a game in fewer than 500 moves",
        kind=WIN_UNDER_MOVES,
        threshold=500,
    ),
    Achievement(
        id="PERSISTENT",
        name="Persistent",
        description="Make 10,000 moves in total",
        kind=TOTAL_MOVES,
        threshold=10000,
    ),
)


ACHIEVEMENT_REGISTRY: Dict[str, Achievement] = {a.id: a for a in ACHIEVEMENTS}
