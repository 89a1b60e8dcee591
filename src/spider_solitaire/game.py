"""Spider Solitaire tableau engine.

``SpiderGame`` owns the ten tableau columns, the stock and the completed
foundations, and implements every rule of the game: dealing, drag and drop
validation, moving runs, completing King-to-Ace sequences and detecting the
win. Mutators either apply fully or return ``False`` without touching state.
"""

from __future__ import annotations

import enum
import random
from collections import Counter
from typing import Any, Dict, List, Optional, Tuple

from spider_solitaire import common as C


COLUMN_COUNT = 10
COMPLETE_SEQUENCE_LENGTH = 13
SEQUENCES_TO_WIN = 8
DEAL_PENALTY = 5
SEQUENCE_BONUS = 100
_SAVE_VERSION = 1


class GameMode(enum.Enum):
    SINGLE_SUIT = "SINGLE_SUIT"
    TWO_SUITS = "TWO_SUITS"
    FOUR_SUITS = "FOUR_SUITS"


_MODE_SUITS = {
    GameMode.SINGLE_SUIT: (C.SPADE,),
    GameMode.TWO_SUITS: (C.SPADE, C.HEART),
    GameMode.FOUR_SUITS: (C.SPADE, C.HEART, C.DIAMOND, C.CLUB),
}


def suits_for_mode(mode: GameMode) -> Tuple[int, ...]:
    try:
        return _MODE_SUITS[mode]
    except KeyError:
        raise ValueError(f"Unknown game mode: {mode!r}") from None


def _is_complete_run(cards: List[C.Card]) -> bool:
    if len(cards) != COMPLETE_SEQUENCE_LENGTH:
        return False
    suit = cards[0].suit
    return all(c.face_up and c.suit == suit and c.rank == expected
               for expected, c in zip(range(13, 0, -1), cards))


def _deck_counts(cards) -> Counter:
    return Counter((c.suit, c.rank) for c in cards)


class SpiderGame:
    def __init__(self, mode: GameMode = GameMode.SINGLE_SUIT, rng: Optional[random.Random] = None):
        suits_for_mode(mode)
        self.mode = mode
        self._rng = rng
        self.columns: List[List[C.Card]] = [[] for _ in range(COLUMN_COUNT)]
        self.stock: List[C.Card] = []
        self.foundations: List[List[C.Card]] = []
        self.completed_sequences = 0
        self.score = 0
        self.moves = 0
        self.deals = 0
        self.elapsed_seconds = 0
        self.new_game()

    # ----- Deal -----
    def _clear(self):
        for col in self.columns:
            col.clear()
        self.stock.clear()
        self.foundations.clear()
        self.completed_sequences = 0
        self.score = 0
        self.moves = 0
        self.deals = 0
        self.elapsed_seconds = 0

    def new_game(self):
        self._clear()
        deck = C.make_deck(suits_for_mode(self.mode), shuffle=True, rng=self._rng)
        # First 4 columns get 6 cards, the other 6 get 5
        for ci, col in enumerate(self.columns):
            count = 6 if ci < 4 else 5
            for _ in range(count):
                col.append(deck.pop())
            col[-1].face_up = True
        # Remaining 50 cards go to stock, face down
        self.stock.extend(deck)

    def can_deal_row(self) -> bool:
        return len(self.stock) >= COLUMN_COUNT

    def deal_row(self) -> bool:
        if not self.can_deal_row():
            return False
        for col in self.columns:
            c = self.stock.pop()
            c.face_up = True
            col.append(c)
        self.score = max(0, self.score - DEAL_PENALTY)
        self.deals += 1
        for ci in range(COLUMN_COUNT):
            self._check_complete_sequence(ci)
        return True

    # ----- Rules -----
    def can_start_drag(self, column: int, index: int) -> bool:
        col = self.columns[column]
        if index < 0 or index >= len(col):
            return False
        if not col[index].face_up:
            return False
        for upper, lower in zip(col[index:], col[index + 1:]):
            if not lower.face_up:
                return False
            if upper.suit != lower.suit or upper.rank != lower.rank + 1:
                return False
        return True

    def can_drop(self, from_column: int, start_index: int, to_column: int) -> bool:
        if from_column == to_column:
            return False
        if not self.can_start_drag(from_column, start_index):
            return False
        target = self.columns[to_column]
        if not target:
            return True
        moving = self.columns[from_column][start_index]
        top = target[-1]
        # Any suit may receive the run; only the rank must follow on
        return top.face_up and top.rank == moving.rank + 1

    def move_sequence(self, from_column: int, start_index: int, to_column: int) -> bool:
        if not self.can_drop(from_column, start_index, to_column):
            return False
        source = self.columns[from_column]
        target = self.columns[to_column]
        moving = source[start_index:]
        del source[start_index:]
        target.extend(moving)
        if source:
            source[-1].face_up = True
        self._check_complete_sequence(to_column)
        self.moves += 1
        return True

    def _check_complete_sequence(self, column: int) -> bool:
        col = self.columns[column]
        if len(col) < COMPLETE_SEQUENCE_LENGTH:
            return False
        tail = col[-COMPLETE_SEQUENCE_LENGTH:]
        if not _is_complete_run(tail):
            return False
        del col[-COMPLETE_SEQUENCE_LENGTH:]
        self.foundations.append(tail)
        self.completed_sequences += 1
        if col:
            col[-1].face_up = True
        self.score += SEQUENCE_BONUS
        return True

    def is_game_won(self) -> bool:
        return self.completed_sequences == SEQUENCES_TO_WIN

    def get_movable_sequence(self, column: int, start_index: int) -> List[C.Card]:
        if not self.can_start_drag(column, start_index):
            return []
        return list(self.columns[column][start_index:])

    def find_hint(self) -> Optional[Tuple[int, int, int]]:
        """Return the first legal ``(from_column, start_index, to_column)`` move."""
        for fi, col in enumerate(self.columns):
            for i in range(len(col)):
                if not self.can_start_drag(fi, i):
                    continue
                for ti in range(COLUMN_COUNT):
                    if self.can_drop(fi, i, ti):
                        return fi, i, ti
        return None

    # ----- Accessors -----
    def get_column(self, index: int) -> List[C.Card]:
        return self.columns[index]

    def set_elapsed_seconds(self, seconds: int):
        self.elapsed_seconds = int(seconds)

    def card_count(self) -> int:
        return (sum(len(col) for col in self.columns)
                + len(self.stock)
                + sum(len(f) for f in self.foundations))

    def _all_cards(self) -> List[C.Card]:
        cards = [c for col in self.columns for c in col]
        cards.extend(self.stock)
        cards.extend(c for f in self.foundations for c in f)
        return cards

    # ----- Snapshots -----
    def copy(self) -> "SpiderGame":
        clone = SpiderGame.__new__(SpiderGame)
        clone.mode = self.mode
        clone._rng = self._rng
        clone.columns = [C.clone_cards(col) for col in self.columns]
        clone.stock = C.clone_cards(self.stock)
        clone.foundations = [C.clone_cards(f) for f in self.foundations]
        clone.completed_sequences = self.completed_sequences
        clone.score = self.score
        clone.moves = self.moves
        clone.deals = self.deals
        clone.elapsed_seconds = self.elapsed_seconds
        return clone

    def restore_from(self, other: "SpiderGame"):
        # The source is discarded by the caller, so its containers are adopted as-is
        self.mode = other.mode
        self.columns = other.columns
        self.stock = other.stock
        self.foundations = other.foundations
        self.completed_sequences = other.completed_sequences
        self.score = other.score
        self.moves = other.moves
        self.deals = other.deals
        self.elapsed_seconds = other.elapsed_seconds

    # ----- Persistence -----
    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": _SAVE_VERSION,
            "mode": self.mode.value,
            "columns": [C.dump_cards(col) for col in self.columns],
            "stock": C.dump_cards(self.stock),
            "foundations": [C.dump_cards(f) for f in self.foundations],
            "score": self.score,
            "moves": self.moves,
            "deals": self.deals,
            "elapsed_seconds": self.elapsed_seconds,
        }

    @classmethod
    def from_dict(cls, state: Dict[str, Any]) -> "SpiderGame":
        if not isinstance(state, dict):
            raise ValueError("game state must be a mapping")
        try:
            mode = GameMode(state["mode"])
            columns = state["columns"]
            if not isinstance(columns, list) or len(columns) != COLUMN_COUNT:
                raise ValueError(f"expected {COLUMN_COUNT} columns")
            foundations = state.get("foundations", [])
            if not isinstance(foundations, list):
                raise ValueError("foundations must be a list")
            game = cls.__new__(cls)
            game.mode = mode
            game._rng = None
            game.columns = [C.load_cards(col) for col in columns]
            game.stock = C.load_cards(state.get("stock", []))
            game.foundations = [C.load_cards(f) for f in foundations]
            game.completed_sequences = len(game.foundations)
            game.score = int(state.get("score", 0))
            game.moves = int(state.get("moves", 0))
            game.deals = int(state.get("deals", 0))
            game.elapsed_seconds = int(state.get("elapsed_seconds", 0))
        except (KeyError, TypeError) as exc:
            raise ValueError(f"Malformed game state: {exc}") from exc
        for f in game.foundations:
            if not _is_complete_run(f):
                raise ValueError("foundations must be face-up King-to-Ace runs of one suit")
        for ci, col in enumerate(game.columns):
            if col and not col[-1].face_up:
                raise ValueError(f"top card of column {ci} must be face up")
        if game.card_count() != C.DECK_SIZE:
            raise ValueError(f"expected {C.DECK_SIZE} cards, found {game.card_count()}")
        if _deck_counts(game._all_cards()) != _deck_counts(C.make_deck(suits_for_mode(mode), shuffle=False)):
            raise ValueError(f"cards do not match a {mode.value} deck")
        return game
