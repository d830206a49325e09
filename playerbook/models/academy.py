from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from bson import ObjectId

class Academy:
    """Academy model: the account that registers and manages players"""

    def __init__(self, name, email, password=None, image=None, players=None):
        self.name = name
        self.email = self.normalize_email(email) if email else ''
        self.password_hash = generate_password_hash(password) if password else None
        self.image = image

        # Owned-set of player ids (references only, never embedded players)
        self.players = [ObjectId(pid) if not isinstance(pid, ObjectId) else pid for pid in (players or [])]

        self.created_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()
        self._id = None

    @property
    def id(self):
        return str(self._id) if self._id else None

    @staticmethod
    def normalize_email(email):
        """Lowercase and strip an email address"""
        return email.strip().lower()

    def check_password(self, password):
        """Check password against hash"""
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def owns_player(self, player_id):
        return ObjectId(str(player_id)) in self.players

    def to_dict(self, include_sensitive=False):
        """Convert academy to a Mongo document"""
        data = {
            'name': self.name,
            'email': self.email,
            'image': self.image,
            'players': list(self.players),
            'created_at': self.created_at,
            'updated_at': self.updated_at
        }

        if include_sensitive:
            data['password'] = self.password_hash

        if self._id is not None:
            data['_id'] = self._id

        return data

    def to_json(self):
        """Render academy for API responses (never includes the password)"""
        return {
            'id': self.id,
            '_id': self.id,
            'name': self.name,
            'email': self.email,
            'image': self.image,
            'players': [str(pid) for pid in self.players],
            'created_at': self.created_at.isoformat() if self.created_at else None
        }

    @classmethod
    def from_dict(cls, data):
        """Create academy from a Mongo document"""
        academy = cls(
            name=data.get('name', ''),
            email=data.get('email', ''),
            image=data.get('image'),
            players=data.get('players', [])
        )

        if 'password' in data:
            academy.password_hash = data['password']
        if '_id' in data:
            academy._id = data['_id']
        if 'created_at' in data:
            academy.created_at = data['created_at']
        if 'updated_at' in data:
            academy.updated_at = data['updated_at']

        return academy
