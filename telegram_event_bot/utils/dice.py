from __future__ import annotations

import random
from dataclasses import dataclass

from aiogram.utils.markdown import hbold, hitalic

from ..errors import InvalidInput

MIN_SIDES = 2
MAX_SIDES = 100
MIN_COUNT = 1
MAX_COUNT = 10

DICE_FACES = ("⚀", "⚁", "⚂", "⚃", "⚄", "⚅")
ANIMATION_FRAMES = ("🎲", "🎯", "⭐", "✨", "💫", "🌟")


@dataclass(frozen=True, slots=True)
class DiceRoll:
    sides: int
    rolls: tuple[int, ...]

    @property
    def total(self) -> int:
        return sum(self.rolls)

    @property
    def average(self) -> float:
        return self.total / len(self.rolls)


def roll_dice(sides: int = 6, count: int = 1, *, rng: random.Random | None = None) -> DiceRoll:
    if not MIN_SIDES <= sides <= MAX_SIDES:
        raise InvalidInput(f"Sides must be between {MIN_SIDES} and {MAX_SIDES}")
    if not MIN_COUNT <= count <= MAX_COUNT:
        raise InvalidInput(f"Count must be between {MIN_COUNT} and {MAX_COUNT}")
    rng = rng or random.Random()
    return DiceRoll(sides=sides, rolls=tuple(rng.randint(1, sides) for _ in range(count)))


def rolling_frame(sides: int, count: int, frame: int) -> str:
    return f"🎲 Rolling {count} {sides}-sided dice... {ANIMATION_FRAMES[frame % len(ANIMATION_FRAMES)]}"


def format_roll(result: DiceRoll) -> str:
    lines = [f"🎲 {hbold('Dice Roll Results!')} 🎲"]
    rolls = result.rolls
    if len(rolls) == 1:
        if result.sides == 6:
            lines.append(f"{DICE_FACES[rolls[0] - 1]} {hbold(f'You rolled: {rolls[0]}')}")
        else:
            lines.append(f"🎯 {hbold(f'You rolled: {rolls[0]}')} (d{result.sides})")
    else:
        lines.append(f"🎯 {hbold('Individual rolls:')} {', '.join(map(str, rolls))}")
        lines.append(f"✨ {hbold('Total:')} {result.total}")
        lines.append(f"📊 {hbold('Average:')} {result.average:.1f}")

    if result.sides == 6:
        if 6 in rolls:
            lines.append(f"🌟 {hitalic('Nice! You got a 6!')}")
        if 1 in rolls:
            lines.append(f"😅 {hitalic('Ouch, a 1...')}")
        if len(rolls) > 1 and all(value == 6 for value in rolls):
            lines.append(f"🎉 {hbold('AMAZING! ALL SIXES!')} 🎉")
        if len(rolls) > 1 and all(value == 1 for value in rolls):
            lines.append(f"💀 {hitalic('Yikes... all ones. Better luck next time!')}")
    return "\n".join(lines)
