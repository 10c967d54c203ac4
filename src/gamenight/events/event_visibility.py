"""Per-recipient visibility filtering of serialized game state.

A game's full state is broadcast through a per-recipient channel so that
each player only sees what they are allowed to. These helpers implement
the common case: some player fields are private to their owner.
"""

import copy
from typing import Any, Iterable


def public_players(
    players: list[dict[str, Any]],
    viewer_id: str,
    fields: Iterable[str],
) -> list[dict[str, Any]]:
    """Return player entries with `fields` nulled on everyone but the viewer.

    Args:
        players: Serialized player entries (each with an "id").
        viewer_id: The id of the player the view is for.
        fields: Names of the private fields.

    Returns:
        New list of new dicts; the input is not modified.
    """
    fields = list(fields)
    result = []
    for entry in players:
        entry = dict(entry)
        if entry.get("id") != viewer_id:
            for name in fields:
                if name in entry:
                    entry[name] = None
        result.append(entry)
    return result


def redact_player_fields(
    state: dict[str, Any],
    viewer_id: str,
    fields: Iterable[str],
) -> dict[str, Any]:
    """Return a copy of a full game state with other players' secrets hidden."""
    view = copy.deepcopy(state)
    view["players"] = public_players(view.get("players", []), viewer_id, fields)
    return view
