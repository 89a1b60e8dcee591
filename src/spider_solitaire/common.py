# common.py - shared cards, settings and file helpers for Spider Solitaire
import os
import json
import logging
import random
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)

# --- Settings ---
# Defaults (may be overridden by persisted settings)
_DEFAULT_SETTINGS = {
    "mode": "SINGLE_SUIT",   # SINGLE_SUIT | TWO_SUITS | FOUR_SUITS
    "max_undo": 50,
}

_CURRENT_SETTINGS = dict(_DEFAULT_SETTINGS)


def _settings_dir() -> str:
    # Explicit override first, then %APPDATA% on Windows, else ~/.spider_solitaire
    override = os.environ.get("SPIDER_DATA_DIR")
    if override:
        return override
    base = os.environ.get("APPDATA")
    if base:
        return os.path.join(base, "SpiderSolitaire")
    return os.path.join(os.path.expanduser("~"), ".spider_solitaire")


def _settings_path() -> str:
    return os.path.join(_settings_dir(), "settings.json")


def stats_path() -> str:
    return os.path.join(_settings_dir(), "stats.json")


def saves_dir(subdir: Optional[str] = None) -> str:
    base = os.path.join(_settings_dir(), "saves")
    if subdir:
        base = os.path.join(base, subdir)
    return base


def get_current_settings():
    return dict(_CURRENT_SETTINGS)


def _merge_settings(data: Dict[str, Any]):
    mode = data.get("mode")
    if mode in ("SINGLE_SUIT", "TWO_SUITS", "FOUR_SUITS"):
        _CURRENT_SETTINGS["mode"] = mode
    max_undo = data.get("max_undo")
    if isinstance(max_undo, int) and not isinstance(max_undo, bool) and max_undo > 0:
        _CURRENT_SETTINGS["max_undo"] = max_undo


def load_settings():
    data = safe_read_json(_settings_path())
    if data:
        _merge_settings(data)
    return get_current_settings()


def save_settings(new_values: dict) -> bool:
    # Merge and write to disk
    _merge_settings(new_values)
    try:
        safe_write_json(_settings_path(), _CURRENT_SETTINGS)
    except OSError as exc:
        logger.warning("Failed to save settings: %s", exc)
        return False
    return True


def reset_settings():
    _CURRENT_SETTINGS.clear()
    _CURRENT_SETTINGS.update(_DEFAULT_SETTINGS)


# --- JSON files ---
def safe_write_json(path: str, data: Dict) -> None:
    """Write ``data`` as JSON, creating parent directories.

    Unlike reads, write failures are not swallowed: the caller decides how to
    report them.
    """
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(data, fh, indent=2)


def safe_read_json(path: str) -> Optional[Dict]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except FileNotFoundError:
        return None
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable file %s: %s", path, exc)
        return None
    if isinstance(data, dict):
        return data
    logger.warning("Ignoring %s: expected a JSON object", path)
    return None


# ---------- Cards ----------
SPADE, HEART, DIAMOND, CLUB = range(4)
SUITS = ["♠", "♥", "♦", "♣"]  # 0..3
RANK_TO_TEXT = {1: "A", 11: "J", 12: "Q", 13: "K"}
for _r in range(2, 11):
    RANK_TO_TEXT[_r] = str(_r)

DECK_SIZE = 104
RANKS_PER_SUIT = 13


class Card:
    __slots__ = ("_suit", "_rank", "face_up")

    def __init__(self, suit, rank, face_up=False):
        if suit not in (SPADE, HEART, DIAMOND, CLUB):
            raise ValueError(f"Invalid suit: {suit!r}")
        if not 1 <= rank <= RANKS_PER_SUIT:
            raise ValueError(f"Invalid rank: {rank!r}")
        self._suit = suit
        self._rank = rank
        self.face_up = face_up

    @property
    def suit(self):
        return self._suit

    @property
    def rank(self):
        return self._rank

    def rank_symbol(self):
        return RANK_TO_TEXT[self._rank]

    def copy(self):
        return Card(self._suit, self._rank, self.face_up)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return NotImplemented
        return (self._suit, self._rank, self.face_up) == (other._suit, other._rank, other.face_up)

    __hash__ = None

    def __str__(self):
        return f"{RANK_TO_TEXT[self._rank]}{SUITS[self._suit]}"

    def __repr__(self):
        return f"{RANK_TO_TEXT[self._rank]}{SUITS[self._suit]}{'↑' if self.face_up else '↓'}"


def make_deck(suits: Sequence[int], shuffle=True, rng: Optional[random.Random] = None) -> List[Card]:
    """Build the 104-card Spider deck from ``suits``, repeated to fill 8 suit runs."""
    copies = 8 // len(suits)
    d = [Card(suit, rank, False) for suit in suits for _ in range(copies) for rank in range(1, 14)]
    if shuffle:
        (rng or random).shuffle(d)
    return d


def clone_cards(cards: Sequence[Card]) -> List[Card]:
    return [c.copy() for c in cards]


def dump_cards(cards: Sequence[Card]) -> List[List]:
    return [[c.suit, c.rank, c.face_up] for c in cards]


def load_cards(seq) -> List[Card]:
    if not isinstance(seq, list):
        raise ValueError("card list expected")
    out = []
    for item in seq:
        if not isinstance(item, (list, tuple)) or len(item) != 3:
            raise ValueError(f"Malformed card entry: {item!r}")
        s, r, f = item
        if not isinstance(s, int) or not isinstance(r, int) or not isinstance(f, bool):
            raise ValueError(f"Malformed card entry: {item!r}")
        out.append(Card(s, r, f))
    return out


# Load any persisted settings now
load_settings()
