# src/meeplescore/badges/definitions.py

"""Static badge catalogue."""

from dataclasses import dataclass

TIERS = ("none", "bronze", "silver", "gold", "platinum")


@dataclass(frozen=True)
class BadgeCriteria:
    """
    What a player must reach to earn a badge.

    `kind` is one of games, wins, streak, podiums, points, win_rate or
    variety. For win_rate the threshold is a fraction (0.5 = 50%) and
    `min_games` plays are required before it counts.
    """

    kind: str
    threshold: float
    min_games: int | None = None


@dataclass(frozen=True)
class BadgeDefinition:
    id: str
    name: str
    description: str
    icon: str
    criteria: BadgeCriteria
    tier: str | None = None


# fmt: off
BADGE_DEFINITIONS: list[BadgeDefinition] = [
    # Games played
    BadgeDefinition(
        "first-game", "First Game", "Play your first game", "🎮",
        BadgeCriteria("games", 1),
    ),
    BadgeDefinition(
        "10-games", "Getting Started", "Play 10 games", "🎯",
        BadgeCriteria("games", 10), "bronze",
    ),
    BadgeDefinition(
        "25-games", "Regular", "Play 25 games", "🎲",
        BadgeCriteria("games", 25), "silver",
    ),
    BadgeDefinition(
        "50-games", "Veteran", "Play 50 games", "⭐",
        BadgeCriteria("games", 50), "gold",
    ),
    BadgeDefinition(
        "100-games", "Legend", "Play 100 games", "🌟",
        BadgeCriteria("games", 100), "platinum",
    ),
    # Wins
    BadgeDefinition(
        "first-win", "First Blood", "Win your first game", "🏆",
        BadgeCriteria("wins", 1),
    ),
    BadgeDefinition(
        "3-wins", "Triple Threat", "Win 3 games", "🥇",
        BadgeCriteria("wins", 3), "bronze",
    ),
    BadgeDefinition(
        "10-wins", "Champion", "Win 10 games", "👑",
        BadgeCriteria("wins", 10), "silver",
    ),
    BadgeDefinition(
        "25-wins", "Dominator", "Win 25 games", "💪",
        BadgeCriteria("wins", 25), "gold",
    ),
    BadgeDefinition(
        "50-wins", "Master", "Win 50 games", "🎖️",
        BadgeCriteria("wins", 50), "platinum",
    ),
    # Win streaks
    BadgeDefinition(
        "3-streak", "On Fire", "Win 3 games in a row", "🔥",
        BadgeCriteria("streak", 3), "bronze",
    ),
    BadgeDefinition(
        "5-streak", "Unstoppable", "Win 5 games in a row", "💥",
        BadgeCriteria("streak", 5), "silver",
    ),
    BadgeDefinition(
        "10-streak", "Legendary Streak", "Win 10 games in a row", "⚡",
        BadgeCriteria("streak", 10), "gold",
    ),
    # Podiums
    BadgeDefinition(
        "10-podiums", "Bronze Star", "Finish top 3 in 10 games", "🥉",
        BadgeCriteria("podiums", 10), "bronze",
    ),
    BadgeDefinition(
        "25-podiums", "Silver Star", "Finish top 3 in 25 games", "🥈",
        BadgeCriteria("podiums", 25), "silver",
    ),
    BadgeDefinition(
        "50-podiums", "Gold Star", "Finish top 3 in 50 games", "🏅",
        BadgeCriteria("podiums", 50), "gold",
    ),
    # Points
    BadgeDefinition(
        "100-points", "Point Collector", "Earn 100 total points", "💰",
        BadgeCriteria("points", 100), "bronze",
    ),
    BadgeDefinition(
        "500-points", "Point Hoarder", "Earn 500 total points", "💎",
        BadgeCriteria("points", 500), "silver",
    ),
    BadgeDefinition(
        "1000-points", "Point Master", "Earn 1000 total points", "👛",
        BadgeCriteria("points", 1000), "gold",
    ),
    # Win rate
    BadgeDefinition(
        "50-winrate", "Sharp Shooter", "Achieve 50% win rate (min 10 games)", "🎯",
        BadgeCriteria("win_rate", 0.5, min_games=10), "bronze",
    ),
    BadgeDefinition(
        "60-winrate", "Elite", "Achieve 60% win rate (min 20 games)", "🦅",
        BadgeCriteria("win_rate", 0.6, min_games=20), "silver",
    ),
    BadgeDefinition(
        "75-winrate", "Perfectionist", "Achieve 75% win rate (min 20 games)", "💯",
        BadgeCriteria("win_rate", 0.75, min_games=20), "gold",
    ),
    # Variety
    BadgeDefinition(
        "3-variety", "Explorer", "Play 3 different games", "🗺️",
        BadgeCriteria("variety", 3), "bronze",
    ),
    BadgeDefinition(
        "5-variety", "Versatile", "Play 5 different games", "🧭",
        BadgeCriteria("variety", 5), "silver",
    ),
    BadgeDefinition(
        "10-variety", "Jack of All Trades", "Play 10 different games", "🃏",
        BadgeCriteria("variety", 10), "gold",
    ),
]
# fmt: on


def get_badge_definition(badge_id: str) -> BadgeDefinition | None:
    return next((b for b in BADGE_DEFINITIONS if b.id == badge_id), None)
