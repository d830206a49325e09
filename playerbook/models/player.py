from datetime import datetime
from bson import ObjectId
from typing import Optional, Dict

class Player:
    """
    Player profile owned by exactly one academy.

    ``creator`` is the owning academy's id. It is set when the player is
    created and never changes; the academy keeps the matching reference in
    its ``players`` list.
    """
    def __init__(self,
                 title: str,
                 description: str,
                 address: str,
                 creator: ObjectId,
                 location: Optional[Dict] = None,
                 image: Optional[str] = None,
                 _id: Optional[ObjectId] = None,
                 created_at: datetime = None,
                 updated_at: datetime = None):
        self._id = _id
        self.title = title
        self.description = description
        self.address = address
        self.location = location or {}  # {'lat': float, 'lng': float}
        self.image = image
        self.creator = ObjectId(creator) if creator and not isinstance(creator, ObjectId) else creator
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @property
    def id(self) -> Optional[str]:
        return str(self._id) if self._id else None

    @classmethod
    def from_dict(cls, data: dict) -> 'Player':
        return cls(
            _id=data.get('_id'),
            title=data.get('title'),
            description=data.get('description'),
            address=data.get('address'),
            creator=data.get('creator'),
            location=data.get('location'),
            image=data.get('image'),
            created_at=data.get('created_at'),
            updated_at=data.get('updated_at')
        )

    def to_dict(self) -> dict:
        data = {
            'title': self.title,
            'description': self.description,
            'address': self.address,
            'location': self.location,
            'image': self.image,
            'creator': self.creator,
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }
        if self._id is not None:
            data['_id'] = self._id
        return data

    def to_json(self) -> dict:
        return {
            'id': self.id,
            '_id': self.id,
            'title': self.title,
            'description': self.description,
            'address': self.address,
            'location': self.location,
            'image': self.image,
            'creator': str(self.creator) if self.creator else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None
        }
