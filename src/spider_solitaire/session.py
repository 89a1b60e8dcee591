"""Play session: the layer a UI drives for one table of Spider.

The session owns the active ``SpiderGame``, the undo history, the elapsed
time clock and a ``message`` line for the player, and keeps the
``StatsStore`` in step with every game event.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List, Optional

import pygame

from spider_solitaire import common as C
from spider_solitaire.game import GameMode, SpiderGame
from spider_solitaire.saves import SaveData, list_saves, write_save
from spider_solitaire.stats import StatsStore

logger = logging.getLogger(__name__)


class GameClock:
    """Adds whole seconds to a game's elapsed time while running.

    Poll :meth:`update` once per frame; time is read from
    ``pygame.time.get_ticks``.
    """

    def __init__(self):
        self.running = False
        self._last_ms = 0

    def start(self):
        self.running = True
        self._last_ms = pygame.time.get_ticks()

    def stop(self):
        self.running = False

    def update(self, game: SpiderGame) -> int:
        if not self.running:
            return 0
        now = pygame.time.get_ticks()
        whole = (now - self._last_ms) // 1000
        if whole <= 0:
            return 0
        self._last_ms += whole * 1000
        game.set_elapsed_seconds(game.elapsed_seconds + whole)
        return whole


class PlaySession:
    def __init__(
        self,
        stats: StatsStore,
        mode: Optional[GameMode] = None,
        saves_dir: Optional[str] = None,
        max_undo: Optional[int] = None,
    ):
        settings = C.get_current_settings()
        self.stats = stats
        self.saves_dir = saves_dir
        self.max_undo = max_undo or settings["max_undo"]
        self.undo_stack: Deque[SpiderGame] = deque(maxlen=self.max_undo)
        self.clock = GameClock()
        self.message = ""
        self.last_unlocked: List[str] = []
        self.game: Optional[SpiderGame] = None
        self._last_foundation_count = 0
        self.new_game(mode or GameMode(settings["mode"]))

    # ----- Game lifecycle -----
    def new_game(self, mode: Optional[GameMode] = None):
        if mode is None:
            mode = self.game.mode if self.game is not None else GameMode.SINGLE_SUIT
        self.undo_stack.clear()
        self.game = SpiderGame(mode)
        self._last_foundation_count = 0
        self.message = ""
        self.clock.start()
        self.stats.record_game_started()
        self.last_unlocked = self.stats.check_achievements(self.game)
        logger.debug("New %s game", mode.value)

    def change_mode(self, mode: GameMode) -> bool:
        if self.game is not None and self.game.mode == mode:
            return False
        self.new_game(mode)
        return True

    def update(self):
        self.clock.update(self.game)

    # ----- Undo -----
    def _push_undo(self, snapshot: SpiderGame):
        # deque(maxlen) drops the oldest snapshot
        self.undo_stack.append(snapshot)

    def can_undo(self) -> bool:
        return len(self.undo_stack) > 0

    def undo(self) -> bool:
        if not self.undo_stack:
            self.message = "Nothing to undo"
            return False
        self.game.restore_from(self.undo_stack.pop())
        # Completions already counted stay counted when they are replayed
        if not self.game.is_game_won() and not self.clock.running:
            self.clock.start()
        self.message = ""
        return True

    # ----- Actions -----
    def deal(self) -> bool:
        snapshot = self.game.copy()
        if not self.game.deal_row():
            self.message = "Cannot deal: not enough cards in the stock"
            return False
        self._push_undo(snapshot)
        self.message = ""
        self._handle_foundations_changed()
        return True

    def move(self, from_column: int, start_index: int, to_column: int) -> bool:
        if not self.game.can_drop(from_column, start_index, to_column):
            return False
        snapshot = self.game.copy()
        if not self.game.move_sequence(from_column, start_index, to_column):
            return False
        self._push_undo(snapshot)
        self.message = ""
        self.stats.record_move()
        self._handle_foundations_changed()
        return True

    def _handle_foundations_changed(self):
        if self.game.is_game_won():
            self.clock.stop()
        current = len(self.game.foundations)
        added = current - self._last_foundation_count
        if added <= 0:
            if self.game.is_game_won():
                self.message = "You won!"
            return
        # High-water mark for this game; undo never lowers it
        self._last_foundation_count = current
        self.stats.record_sequences(added)
        if self.game.is_game_won():
            # Win counters must be final before achievements are evaluated
            self.stats.record_win(self.game)
            self.last_unlocked = self.stats.check_achievements(self.game)
            self.message = "You won!"
            if self.last_unlocked:
                self.message += " Achievements unlocked: " + ", ".join(self.last_unlocked)
        else:
            self.last_unlocked = self.stats.check_achievements(self.game)

    def hint(self):
        move = self.game.find_hint()
        if move is not None:
            fi, _, ti = move
            self.message = f"Move from column {fi + 1} to column {ti + 1}"
        elif self.game.can_deal_row():
            self.message = "No moves available, try dealing a new row"
        else:
            self.message = "No moves available and the stock is empty"
        return move

    # ----- Saves -----
    def save_game(self, label: str, remark: str = "") -> bool:
        save = SaveData.capture(self.game, label, remark)
        try:
            write_save(save, self.saves_dir)
        except OSError as exc:
            logger.error("Failed to save game: %s", exc)
            self.message = f"Save failed: {exc}"
            return False
        self.message = f"Game saved: {save.label}"
        return True

    def available_saves(self) -> List[SaveData]:
        try:
            saves = list_saves(self.saves_dir)
        except OSError as exc:
            logger.error("Failed to list saves: %s", exc)
            self.message = f"Could not read saves: {exc}"
            return []
        if not saves:
            self.message = "No saved games found"
        return saves

    def load_save(self, save: SaveData):
        self.game = save.game.copy()
        self.undo_stack.clear()
        self._last_foundation_count = len(self.game.foundations)
        if self.game.is_game_won():
            self.clock.stop()
        else:
            self.clock.start()
        self.message = f"Loaded save: {save.label}"
