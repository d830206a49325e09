from flask_pymongo import PyMongo
from flask_jwt_extended import JWTManager
from flask_cors import CORS
from celery import Celery, Task

# Initialize extensions
mongo = PyMongo()
jwt = JWTManager()
cors = CORS()


class FlaskTask(Task):
    """Celery task that runs inside the bound Flask app's context."""

    def __call__(self, *args, **kwargs):
        flask_app = getattr(self.app, 'flask_app', None)
        if flask_app is None:
            return self.run(*args, **kwargs)
        with flask_app.app_context():
            return self.run(*args, **kwargs)


celery = Celery('playerbook', task_cls=FlaskTask)


def init_celery(app):
    """Tie the shared Celery object to the app's config."""
    celery.conf.update(
        broker_url=app.config['CELERY_BROKER_URL'],
        result_backend=app.config['CELERY_RESULT_BACKEND'],
        task_always_eager=app.config.get('CELERY_TASK_ALWAYS_EAGER', False),
        task_ignore_result=True,
        include=['playerbook.tasks.image_tasks'],
    )
    celery.flask_app = app
    return celery


def init_extensions(app):
    """Initialize Flask extensions."""
    mongo.init_app(app, serverSelectionTimeoutMS=app.config.get('MONGO_TIMEOUT_MS', 5000))
    jwt.init_app(app)
    cors.init_app(app)
    init_celery(app)


def ensure_collection_exists(collection_name):
    """Create a collection if it does not exist yet"""
    try:
        if collection_name in mongo.db.list_collection_names():
            return True, f"Collection '{collection_name}' already exists"
        mongo.db.create_collection(collection_name)
        return True, f"Created collection '{collection_name}'"
    except Exception as e:
        return False, f"Failed to create collection '{collection_name}': {str(e)}"
