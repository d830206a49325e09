import logging

from playerbook.services.stores import AcademyStore, PlayerStore

logger = logging.getLogger(__name__)


def find_inconsistencies():
    """
    Report academy/player pairs that break the ownership invariant.

    Returns a dict with three lists of string ids:
    ``orphan_players`` (creator academy missing), ``unlinked_players``
    (creator exists but does not reference the player) and
    ``dangling_references`` (``(academy_id, player_id)`` pairs where the
    referenced player is gone).
    """
    academies = {academy._id: academy for academy in AcademyStore.list_all()}
    players = {player._id: player for player in PlayerStore.find_all()}

    report = {
        'orphan_players': [],
        'unlinked_players': [],
        'dangling_references': []
    }

    for player in players.values():
        academy = academies.get(player.creator)
        if academy is None:
            report['orphan_players'].append(player.id)
        elif not academy.owns_player(player._id):
            report['unlinked_players'].append(player.id)

    for academy in academies.values():
        for player_id in academy.players:
            if player_id not in players:
                report['dangling_references'].append((academy.id, str(player_id)))

    total = sum(len(items) for items in report.values())
    if total:
        logger.warning(f"Found {total} ownership inconsistencies")
    return report
