import json
import random
from datetime import datetime

import pytest

from spider_solitaire.game import GameMode, SpiderGame
from spider_solitaire.saves import SaveData, list_saves, write_save


def test_capture_takes_a_snapshot() -> None:
    game = SpiderGame(GameMode.TWO_SUITS, rng=random.Random(4))
    save = SaveData.capture(game, "Level 1", "almost there")
    game.deal_row()
    assert len(save.game.stock) == 50
    assert save.game is not game
    assert save.label == "Level 1"


def test_formatting() -> None:
    save = SaveData(SpiderGame(), "Label", "Remark", datetime(2024, 3, 5, 14, 7, 9))
    assert save.formatted_save_time() == "2024-03-05 14:07:09"
    assert str(save) == "[2024-03-05 14:07:09] Label (Remark)"


def test_write_and_list(tmp_path) -> None:
    game = SpiderGame(GameMode.FOUR_SUITS, rng=random.Random(8))
    game.deal_row()
    game.set_elapsed_seconds(90)
    path = write_save(SaveData.capture(game, "first"), str(tmp_path))
    assert path.startswith(str(tmp_path))
    assert path.endswith(".json")

    saves = list_saves(str(tmp_path))
    assert len(saves) == 1
    loaded = saves[0]
    assert loaded.label == "first"
    assert loaded.remark == ""
    assert loaded.game.columns == game.columns
    assert loaded.game.elapsed_seconds == 90
    assert loaded.game.mode is GameMode.FOUR_SUITS


def test_two_quick_saves_get_distinct_files(tmp_path) -> None:
    game = SpiderGame()
    p1 = write_save(SaveData.capture(game, "a"), str(tmp_path))
    p2 = write_save(SaveData.capture(game, "b"), str(tmp_path))
    assert p1 != p2
    assert sorted(s.label for s in list_saves(str(tmp_path))) == ["a", "b"]


def test_list_skips_invalid_files(tmp_path) -> None:
    write_save(SaveData.capture(SpiderGame(), "good"), str(tmp_path))
    (tmp_path / "save_1.json").write_text("{broken", encoding="utf-8")
    (tmp_path / "save_2.json").write_text(json.dumps({"label": "no game"}), encoding="utf-8")
    bad_game = SaveData.capture(SpiderGame(), "short").to_dict()
    bad_game["game"]["stock"] = []
    (tmp_path / "save_3.json").write_text(json.dumps(bad_game), encoding="utf-8")
    (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")

    assert [s.label for s in list_saves(str(tmp_path))] == ["good"]


def test_list_missing_directory(tmp_path) -> None:
    assert list_saves(str(tmp_path / "nope")) == []


def test_write_failure_raises(tmp_path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    with pytest.raises(OSError):
        write_save(SaveData.capture(SpiderGame(), "x"), str(blocker))


def test_default_directory_is_under_data_dir(data_dir) -> None:
    path = write_save(SaveData.capture(SpiderGame(), "default"))
    assert path.startswith(str(data_dir / "saves" / "spider"))
    assert [s.label for s in list_saves()] == ["default"]
