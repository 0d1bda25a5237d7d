"""Malmstone XP calculator for the ``/pvp`` command."""

from __future__ import annotations

import math
from dataclasses import dataclass

from aiogram.utils.markdown import hbold

from ..errors import InvalidInput

MIN_LEVEL = 1
MAX_LEVEL = 40

# Cumulative XP required to reach each level; index 0 is unused.
PVP_LEVELS = (
    0, 0, 2000, 4000, 6000, 8000, 11000, 14000, 17000, 20000, 23000, 27000,
    31000, 35000, 39000, 43000, 48500, 54000, 59500, 65000, 70500, 78000, 85500,
    93000, 100500, 108000, 118000, 128000, 138000, 148000, 158000, 178000, 198000,
    218000, 238000, 258000, 278000, 298000, 318000, 338000, 358000,
)

CRYSTALLINE_WIN = 900
CRYSTALLINE_LOSS = 700
FRONTLINE_FIRST = 1500
FRONTLINE_SECOND = 1250
FRONTLINE_THIRD = 1000
FRONTLINE_DAILY_FIRST = 3000
FRONTLINE_DAILY_SECOND = 2750
FRONTLINE_DAILY_THIRD = 2500
RIVAL_WINGS_WIN = 1250
RIVAL_WINGS_LOSS = 750


@dataclass(frozen=True, slots=True)
class PvpRequirements:
    current_level: int
    goal_level: int
    current_progress: int
    exp_needed: int

    def matches(self, xp_per_match: int) -> int:
        return math.ceil(self.exp_needed / xp_per_match)


def calculate_pvp_xp(current_level: int, goal_level: int, current_progress: int = 0) -> PvpRequirements:
    if not MIN_LEVEL <= current_level <= MAX_LEVEL:
        raise InvalidInput(f"Current level must be between {MIN_LEVEL} and {MAX_LEVEL}")
    if not MIN_LEVEL <= goal_level <= MAX_LEVEL:
        raise InvalidInput(f"Goal level must be between {MIN_LEVEL} and {MAX_LEVEL}")
    if current_level >= goal_level:
        raise InvalidInput("Goal level must be higher than current level")
    span = PVP_LEVELS[goal_level] - PVP_LEVELS[current_level]
    if not 0 <= current_progress < span:
        raise InvalidInput(f"Current progress must be between 0 and {span - 1}")
    return PvpRequirements(
        current_level=current_level,
        goal_level=goal_level,
        current_progress=current_progress,
        exp_needed=span - current_progress,
    )


def format_pvp_requirements(result: PvpRequirements) -> str:
    def row(label: str, xp: int) -> str:
        return f"   {label:<10} {result.matches(xp):,} matches"

    table = "\n".join(
        [
            "🔸 CRYSTALLINE CONFLICT",
            row("Wins:", CRYSTALLINE_WIN),
            row("Losses:", CRYSTALLINE_LOSS),
            "",
            "🔸 FRONTLINE",
            row("1st Place:", FRONTLINE_FIRST),
            row("2nd Place:", FRONTLINE_SECOND),
            row("3rd Place:", FRONTLINE_THIRD),
            "",
            "🔸 FRONTLINE (Roulette with Daily Bonus)",
            row("1st Place:", FRONTLINE_DAILY_FIRST),
            row("2nd Place:", FRONTLINE_DAILY_SECOND),
            row("3rd Place:", FRONTLINE_DAILY_THIRD),
            "",
            "🔸 RIVAL WINGS",
            row("Wins:", RIVAL_WINGS_WIN),
            row("Losses:", RIVAL_WINGS_LOSS),
        ]
    )
    lines = [
        f"⚔️ {hbold('PvP Malmstone Calculator')} ⚔️",
        f"📊 {hbold(f'From Level {result.current_level} to Level {result.goal_level}')}",
    ]
    if result.current_progress > 0:
        lines.append(f"📈 {hbold('Current Progress')}: {result.current_progress:,} XP")
    lines.append(f"🎯 {hbold('XP Needed')}: {result.exp_needed:,}")
    lines.append("")
    lines.append(hbold("📋 Matches Required:"))
    lines.append(f"<pre>{table}</pre>")
    return "\n".join(lines)
