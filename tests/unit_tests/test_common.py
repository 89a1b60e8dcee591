import json

import pytest

from spider_solitaire import common as C


def test_card_suit_and_rank_are_read_only() -> None:
    card = C.Card(C.HEART, 12)
    assert not card.face_up
    card.face_up = True
    with pytest.raises(AttributeError):
        card.rank = 3  # type: ignore[misc]
    assert repr(card) == "Q♥↑"
    assert str(card) == "Q♥"
    assert card.rank_symbol() == "Q"


@pytest.mark.parametrize("suit, rank", [(4, 1), (-1, 1), (0, 0), (0, 14)])
def test_card_rejects_bad_values(suit: int, rank: int) -> None:
    with pytest.raises(ValueError):
        C.Card(suit, rank)


@pytest.mark.parametrize("suits", [(C.SPADE,), (C.SPADE, C.HEART), (C.SPADE, C.HEART, C.DIAMOND, C.CLUB)])
def test_make_deck_always_has_104_cards(suits) -> None:
    deck = C.make_deck(suits, shuffle=False)
    assert len(deck) == C.DECK_SIZE
    assert not any(c.face_up for c in deck)


def test_settings_defaults_and_persistence(data_dir) -> None:
    assert C.load_settings() == {"mode": "SINGLE_SUIT", "max_undo": 50}
    assert C.save_settings({"mode": "FOUR_SUITS", "max_undo": 20, "extra": 1})
    with open(data_dir / "settings.json", "r", encoding="utf-8") as fh:
        assert json.load(fh) == {"mode": "FOUR_SUITS", "max_undo": 20}
    C.reset_settings()
    assert C.load_settings()["mode"] == "FOUR_SUITS"


def test_bad_settings_are_ignored(data_dir) -> None:
    data_dir.mkdir()
    (data_dir / "settings.json").write_text(json.dumps({"mode": "EIGHT", "max_undo": -3}), encoding="utf-8")
    assert C.load_settings() == {"mode": "SINGLE_SUIT", "max_undo": 50}


def test_stats_path_follows_data_dir(data_dir) -> None:
    assert C.stats_path() == str(data_dir / "stats.json")


def test_saves_dir_follows_data_dir(data_dir) -> None:
    assert C.saves_dir() == str(data_dir / "saves")
    assert C.saves_dir("spider") == str(data_dir / "saves" / "spider")
