import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    """Base configuration class"""
    SECRET_KEY = os.environ.get('SECRET_KEY')

    # Flask-PyMongo expects MONGO_URI with database name
    @staticmethod
    def get_mongo_uri():
        """Get MongoDB URI with database name for Flask-PyMongo"""
        uri = os.environ.get('MONGODB_URI') or os.environ.get('MONGO_URI') or 'mongodb://localhost:27017/playerbook'

        # If it's a MongoDB Atlas URI without database name, add 'playerbook'
        if 'mongodb.net/' in uri and '?' in uri:
            base_uri, params = uri.split('?', 1)
            if not base_uri.endswith('/'):
                base_uri += '/'
            if base_uri.endswith('mongodb.net/'):
                uri = f"{base_uri}playerbook?{params}"

        return uri

    MONGO_URI = get_mongo_uri.__func__()
    MONGO_TIMEOUT_MS = int(os.environ.get('MONGO_TIMEOUT_MS') or 5000)
    # 'native' needs a replica set or mongos; 'compensating' works on a standalone server
    MONGO_TRANSACTION_MODE = os.environ.get('MONGO_TRANSACTION_MODE') or 'native'

    # Signing secret is never defaulted; create_app refuses to start without it
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY')
    JWT_ACCESS_TOKEN_EXPIRES = int(os.environ.get('JWT_ACCESS_TOKEN_EXPIRES') or 3600)  # 1 hour

    # Geocoding Configuration
    GOOGLE_API_KEY = os.environ.get('GOOGLE_API_KEY')
    GEOCODING_URL = os.environ.get('GEOCODING_URL') or 'https://maps.googleapis.com/maps/api/geocode/json'
    GEOCODING_TIMEOUT = float(os.environ.get('GEOCODING_TIMEOUT') or 10)

    # Image Upload Configuration
    IMAGE_STORAGE_BACKEND = os.environ.get('IMAGE_STORAGE_BACKEND') or 'local'  # 'local' or 's3'
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or 'uploads'
    MAX_IMAGE_SIZE = int(os.environ.get('MAX_IMAGE_SIZE') or 500000)
    IMAGE_MAX_DIMENSION = int(os.environ.get('IMAGE_MAX_DIMENSION') or 1200)
    IMAGE_MAX_PIXELS = int(os.environ.get('IMAGE_MAX_PIXELS') or 0) or None  # defaults to (5 * IMAGE_MAX_DIMENSION) ** 2

    # AWS S3 Configuration
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = os.environ.get('AWS_REGION') or 'us-east-1'
    AWS_S3_BUCKET = os.environ.get('AWS_S3_BUCKET')

    # Celery Configuration
    CELERY_BROKER_URL = os.environ.get('CELERY_BROKER_URL') or 'redis://localhost:6379/0'
    CELERY_RESULT_BACKEND = os.environ.get('CELERY_RESULT_BACKEND') or 'redis://localhost:6379/0'
    CELERY_TASK_ALWAYS_EAGER = False

    # App Configuration
    APP_HOST = os.environ.get('APP_HOST') or '0.0.0.0'
    APP_PORT = int(os.environ.get('APP_PORT') or 5000)
    LOG_LEVEL = os.environ.get('LOG_LEVEL') or 'INFO'

class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    FLASK_ENV = 'development'

class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    FLASK_ENV = 'production'

class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    MONGO_URI = 'mongodb://localhost:27017/playerbook_test'
    MONGO_TRANSACTION_MODE = 'compensating'
    SECRET_KEY = 'testing-secret-key'
    JWT_SECRET_KEY = 'testing-jwt-secret-key-with-enough-length'
    GOOGLE_API_KEY = 'testing-google-api-key'
    CELERY_TASK_ALWAYS_EAGER = True
    CELERY_BROKER_URL = 'memory://'
    CELERY_RESULT_BACKEND = 'cache+memory://'

config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
