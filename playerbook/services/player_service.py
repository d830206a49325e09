import logging
from typing import List

from pymongo.errors import PyMongoError

from playerbook.models.player import Player
from playerbook.services.stores import AcademyStore, PlayerStore
from playerbook.services.transactions import run_in_transaction
from playerbook.utils.errors import NotFound, Unauthorized, TransactionFailed
from playerbook.utils.ids import same_id

logger = logging.getLogger(__name__)


class PlayerService:
    """
    Keeps players and their academies' owned-sets consistent.

    A player's ``creator`` and the academy's ``players`` entry are written
    together inside one transaction scope on create and delete, so a reader
    never sees one without the other.
    """

    @staticmethod
    def get_player(player_id) -> Player:
        player = PlayerStore.find_by_id(player_id)
        if not player:
            raise NotFound('Could not find player for the provided id.')
        return player

    @staticmethod
    def list_players_for_academy(academy_id) -> List[Player]:
        academy = AcademyStore.find_by_id(academy_id)
        if not academy or not academy.players:
            raise NotFound('Could not find players for the provided Academy id.')
        return PlayerStore.find_many(academy.players)

    @staticmethod
    def create_player(owner_academy_id, title, description, address, location=None, image=None) -> Player:
        """Insert a player and attach it to its academy atomically.

        Input is expected to be validated already. Raises NotFound if the
        academy does not exist and TransactionFailed if either write fails.
        """
        try:
            academy = AcademyStore.find_by_id(owner_academy_id)
        except PyMongoError as e:
            logger.error(f"Academy lookup failed for {owner_academy_id}: {str(e)}")
            raise TransactionFailed('Creating player failed, please try again.')

        if not academy:
            raise NotFound('Could not find academy for provided id.')

        def write(txn):
            player = Player(
                title=title,
                description=description,
                address=address,
                location=location,
                image=image,
                creator=academy._id
            )
            PlayerStore.insert(player, txn)
            AcademyStore.add_player(academy._id, player._id, txn)
            return player

        try:
            player = run_in_transaction(write, lock_key=academy._id)
        except PyMongoError as e:
            logger.error(f"Create player transaction failed for academy {academy.id}: {str(e)}")
            raise TransactionFailed('Creating player failed, please try again.')

        logger.info(f"Created player {player.id} for academy {academy.id}")
        return player

    @staticmethod
    def _find_owned_player(requester_academy_id, player_id, action) -> Player:
        try:
            player = PlayerStore.find_by_id(player_id)
        except PyMongoError as e:
            logger.error(f"Player lookup failed for {player_id}: {str(e)}")
            raise TransactionFailed(f'Something went wrong, could not {action} player.')

        if not player:
            raise NotFound('Could not find player for this id.')

        if not same_id(player.creator, requester_academy_id):
            logger.warning(f"Academy {requester_academy_id} tried to {action} player {player.id} it does not own")
            raise Unauthorized(f'You are not allowed to {action} this player.')

        return player

    @staticmethod
    def update_player(requester_academy_id, player_id, fields) -> Player:
        """Update title/description of a player owned by the requester"""
        player = PlayerService._find_owned_player(requester_academy_id, player_id, 'edit')

        allowed = {key: fields[key] for key in ('title', 'description') if key in fields}
        if not allowed:
            return player

        try:
            updated = PlayerStore.update_fields(player._id, allowed)
        except PyMongoError as e:
            logger.error(f"Update failed for player {player.id}: {str(e)}")
            raise TransactionFailed('Something went wrong, could not update player.')

        if not updated:
            raise NotFound('Could not find player for this id.')
        return updated

    @staticmethod
    def delete_player(requester_academy_id, player_id):
        """Delete an owned player and detach it from its academy atomically.

        The stored image is removed afterwards, outside the transaction; that
        step only logs on failure.
        """
        player = PlayerService._find_owned_player(requester_academy_id, player_id, 'delete')

        def write(txn):
            PlayerStore.delete(player, txn)
            AcademyStore.remove_player(player.creator, player._id, txn)

        try:
            run_in_transaction(write, lock_key=player.creator)
        except PyMongoError as e:
            logger.error(f"Delete player transaction failed for player {player.id}: {str(e)}")
            raise TransactionFailed('Something went wrong, could not delete player.')

        logger.info(f"Deleted player {player.id} of academy {player.creator}")
        PlayerService.discard_image(player.image)

    @staticmethod
    def discard_image(image_path):
        """Fire-and-forget removal of a stored image"""
        if not image_path:
            return
        from playerbook.tasks.image_tasks import delete_image
        try:
            # No publish retries: an unreachable broker must not hold up the response
            delete_image.apply_async(args=[image_path], retry=False)
        except Exception as e:
            logger.error(f"Could not schedule deletion of image {image_path}: {str(e)}")
