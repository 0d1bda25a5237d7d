import random

import pytest

from telegram_event_bot.errors import InvalidInput
from telegram_event_bot.utils.dice import DiceRoll, format_roll, roll_dice, rolling_frame


def test_roll_dice_stays_in_range():
    result = roll_dice(20, 10, rng=random.Random(7))
    assert len(result.rolls) == 10
    assert all(1 <= value <= 20 for value in result.rolls)
    assert result.total == sum(result.rolls)


@pytest.mark.parametrize("sides, count", [(1, 1), (101, 1), (6, 0), (6, 11)])
def test_roll_dice_rejects_out_of_range(sides, count):
    with pytest.raises(InvalidInput):
        roll_dice(sides, count)


def test_single_d6_uses_face_emoji():
    text = format_roll(DiceRoll(sides=6, rolls=(4,)))
    assert "⚃" in text
    assert "You rolled: 4" in text


def test_single_die_with_other_sides():
    text = format_roll(DiceRoll(sides=20, rolls=(17,)))
    assert "You rolled: 17" in text
    assert "(d20)" in text


def test_multiple_dice_show_total_and_average():
    text = format_roll(DiceRoll(sides=10, rolls=(3, 4)))
    assert "3, 4" in text
    assert "Total:</b> 7" in text
    assert "Average:</b> 3.5" in text


def test_d6_vanity_lines():
    sixes = format_roll(DiceRoll(sides=6, rolls=(6, 6)))
    assert "Nice! You got a 6!" in sixes
    assert "ALL SIXES" in sixes
    ones = format_roll(DiceRoll(sides=6, rolls=(1, 1, 1)))
    assert "Ouch, a 1..." in ones
    assert "all ones" in ones
    mixed = format_roll(DiceRoll(sides=6, rolls=(1, 6)))
    assert "ALL SIXES" not in mixed
    assert "Nice! You got a 6!" in mixed


def test_rolling_frame_text():
    assert rolling_frame(6, 2, 0) == "🎲 Rolling 2 6-sided dice... 🎲"
