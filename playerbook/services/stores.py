import logging
from datetime import datetime
from typing import List, Optional

import pymongo
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from playerbook.extensions import mongo
from playerbook.models.academy import Academy
from playerbook.models.player import Player
from playerbook.services.transactions import session_kwargs
from playerbook.utils.errors import AcademyExists, NotFound
from playerbook.utils.ids import to_object_id

logger = logging.getLogger(__name__)


class AcademyStore:
    """Credential store: the ``academies`` collection"""

    @staticmethod
    def collection():
        return mongo.db.academies

    @staticmethod
    def find_by_id(academy_id, txn=None) -> Optional[Academy]:
        oid = to_object_id(academy_id)
        if oid is None:
            return None
        data = AcademyStore.collection().find_one({'_id': oid}, **session_kwargs(txn))
        return Academy.from_dict(data) if data else None

    @staticmethod
    def find_by_email(email) -> Optional[Academy]:
        data = AcademyStore.collection().find_one({'email': Academy.normalize_email(email)})
        return Academy.from_dict(data) if data else None

    @staticmethod
    def list_all() -> List[Academy]:
        cursor = AcademyStore.collection().find({}, {'password': 0}).sort('created_at', 1)
        return [Academy.from_dict(data) for data in cursor]

    @staticmethod
    def insert(academy: Academy) -> Academy:
        """Insert a new academy; the unique email index rejects duplicates"""
        try:
            result = AcademyStore.collection().insert_one(academy.to_dict(include_sensitive=True))
        except DuplicateKeyError:
            raise AcademyExists()
        academy._id = result.inserted_id
        return academy

    @staticmethod
    def add_player(academy_id, player_id, txn=None):
        """Append a player id to the academy's owned-set"""
        academy_oid = to_object_id(academy_id)
        result = AcademyStore.collection().update_one(
            {'_id': academy_oid},
            {
                '$addToSet': {'players': player_id},
                '$set': {'updated_at': datetime.utcnow()}
            },
            **session_kwargs(txn)
        )
        if result.matched_count == 0:
            raise NotFound('Could not find academy for provided id.')

        if txn is not None:
            txn.on_rollback(lambda: AcademyStore.collection().update_one(
                {'_id': academy_oid}, {'$pull': {'players': player_id}}
            ))

    @staticmethod
    def remove_player(academy_id, player_id, txn=None):
        """Remove a player id from the academy's owned-set"""
        academy_oid = to_object_id(academy_id)
        result = AcademyStore.collection().update_one(
            {'_id': academy_oid},
            {
                '$pull': {'players': player_id},
                '$set': {'updated_at': datetime.utcnow()}
            },
            **session_kwargs(txn)
        )
        if result.matched_count == 0:
            raise NotFound('Could not find academy for provided id.')

        if txn is not None and result.modified_count:
            txn.on_rollback(lambda: AcademyStore.collection().update_one(
                {'_id': academy_oid}, {'$addToSet': {'players': player_id}}
            ))


class PlayerStore:
    """Profile store: the ``players`` collection"""

    @staticmethod
    def collection():
        return mongo.db.players

    @staticmethod
    def find_by_id(player_id, txn=None) -> Optional[Player]:
        oid = to_object_id(player_id)
        if oid is None:
            return None
        data = PlayerStore.collection().find_one({'_id': oid}, **session_kwargs(txn))
        return Player.from_dict(data) if data else None

    @staticmethod
    def find_many(player_ids) -> List[Player]:
        oids = [oid for oid in (to_object_id(pid) for pid in player_ids) if oid is not None]
        if not oids:
            return []
        cursor = PlayerStore.collection().find({'_id': {'$in': oids}}).sort('created_at', 1)
        return [Player.from_dict(data) for data in cursor]

    @staticmethod
    def find_all() -> List[Player]:
        return [Player.from_dict(data) for data in PlayerStore.collection().find({})]

    @staticmethod
    def insert(player: Player, txn=None) -> Player:
        result = PlayerStore.collection().insert_one(player.to_dict(), **session_kwargs(txn))
        player._id = result.inserted_id

        if txn is not None:
            inserted_id = result.inserted_id
            txn.on_rollback(lambda: PlayerStore.collection().delete_one({'_id': inserted_id}))
        return player

    @staticmethod
    def update_fields(player_id, fields: dict) -> Optional[Player]:
        """Single-document update; returns the updated player or None"""
        updates = dict(fields)
        updates['updated_at'] = datetime.utcnow()
        data = PlayerStore.collection().find_one_and_update(
            {'_id': to_object_id(player_id)},
            {'$set': updates},
            return_document=ReturnDocument.AFTER
        )
        return Player.from_dict(data) if data else None

    @staticmethod
    def delete(player: Player, txn=None):
        result = PlayerStore.collection().delete_one({'_id': player._id}, **session_kwargs(txn))
        if result.deleted_count == 0:
            raise NotFound('Could not find player for this id.')

        if txn is not None:
            document = player.to_dict()
            txn.on_rollback(lambda: PlayerStore.collection().insert_one(document))


def ensure_indexes():
    """Create the indexes the stores rely on"""
    academies = AcademyStore.collection()
    players = PlayerStore.collection()

    academies.create_index([('email', pymongo.ASCENDING)], unique=True, name='email_unique')
    players.create_index([('creator', pymongo.ASCENDING)], name='creator_idx')
    logger.info("Ensured indexes on academies and players collections")
