"""
Shipped Defaults

The fee schedule a new installation starts with, and the rule for
bringing newly shipped penalties and game types into an existing one.

NOTE: Users can change all of this on the settings page.
Values here only matter for first start and for definitions that are
shipped later.
"""

from kegelbuch.models.ledger import (
    Configuration,
    GameTypeDefinition,
    PenaltyDefinition,
)


DEFAULT_ENTRY_FEE = 6.0
DEFAULT_CURRENCY_SYMBOL = "€"

DEFAULT_PENALTIES = [
    {"id": "kalle", "label": "Kalle", "description": "Ball ins Aus", "unit_price": 0.5},
    {"id": "stina", "label": "Stina", "description": "Mittlere 3 Pins", "unit_price": 0.5},
    {"id": "verspaetung", "label": "Verspätung", "description": "Zu spät gekommen", "unit_price": 1.0},
    {"id": "verloren", "label": "Spiel verloren", "description": "Verlorenes Spiel", "unit_price": 0.5},
    {
        "id": "kranz",
        "label": "Kranz",
        "description": "Kranz geworfen - alle anderen zahlen",
        "unit_price": 0.5,
        "inverted": True,
    },
    {
        "id": "volle",
        "label": "Volle",
        "description": "Volle geworfen - alle anderen zahlen",
        "unit_price": 0.5,
        "inverted": True,
    },
]

DEFAULT_GAME_TYPES = [
    {"id": "wm", "label": "WM", "description": "Wachtberg Meisterschaft"},
    {"id": "gs", "label": "GS", "description": "Geldspiel"},
]


def create_default_configuration() -> Configuration:
    """Build a fresh default configuration (new objects on every call)."""
    return Configuration(
        entry_fee=DEFAULT_ENTRY_FEE,
        penalties=[PenaltyDefinition(**item) for item in DEFAULT_PENALTIES],
        game_types=[GameTypeDefinition(**item) for item in DEFAULT_GAME_TYPES],
        currency_symbol=DEFAULT_CURRENCY_SYMBOL,
    )


def merge_with_defaults(
    persisted: Configuration,
    defaults: Configuration,
) -> Configuration:
    """
    Merge shipped definitions into a loaded configuration.

    Union by id:
    - persisted penalties / game types win and keep their order
      (user prices, labels and custom entries survive a reload)
    - shipped definitions the persisted set lacks are appended,
      unless the user removed them (`retired_penalty_ids`,
      `retired_game_type_ids`)
    - entry fee and currency symbol always come from the persisted side

    Returns a new Configuration; neither input is modified.
    """
    merged = persisted.model_copy(deep=True)
    known_penalties = {p.id for p in merged.penalties}
    retired_penalties = set(merged.retired_penalty_ids)
    for penalty in defaults.penalties:
        if penalty.id not in known_penalties and penalty.id not in retired_penalties:
            merged.penalties.append(penalty.model_copy())

    known_game_types = {g.id for g in merged.game_types}
    retired_game_types = set(merged.retired_game_type_ids)
    for game_type in defaults.game_types:
        if game_type.id not in known_game_types and game_type.id not in retired_game_types:
            merged.game_types.append(game_type.model_copy())

    return merged
