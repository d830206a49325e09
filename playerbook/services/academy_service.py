import logging
from flask_jwt_extended import create_access_token
from pymongo.errors import PyMongoError

from playerbook.models.academy import Academy
from playerbook.services.stores import AcademyStore
from playerbook.utils.errors import AcademyExists, InvalidCredentials, TransactionFailed

logger = logging.getLogger(__name__)


class AcademyService:
    """Signup, login and listing for academies"""

    @staticmethod
    def create_token(academy):
        """Signed access token; identity is the academy id"""
        return create_access_token(
            identity=academy.id,
            additional_claims={'email': academy.email}
        )

    @staticmethod
    def auth_payload(academy):
        return {
            'academyId': academy.id,
            'email': academy.email,
            'token': AcademyService.create_token(academy)
        }

    @staticmethod
    def list_academies():
        try:
            return AcademyStore.list_all()
        except PyMongoError as e:
            logger.error(f"Fetching academies failed: {str(e)}")
            raise TransactionFailed('Fetching academies failed, please try again later.')

    @staticmethod
    def signup(name, email, password, image):
        """Register a new academy and return its auth payload"""
        try:
            if AcademyStore.find_by_email(email):
                raise AcademyExists()

            academy = Academy(name=name, email=email, password=password, image=image)
            AcademyStore.insert(academy)
        except PyMongoError as e:
            logger.error(f"Signing up failed: {str(e)}")
            raise TransactionFailed('Signing up failed, please try again later.')

        logger.info(f"Academy {academy.id} signed up")
        return AcademyService.auth_payload(academy)

    @staticmethod
    def login(email, password):
        """Verify credentials and return the auth payload"""
        try:
            academy = AcademyStore.find_by_email(email)
        except PyMongoError as e:
            logger.error(f"Logging in failed: {str(e)}")
            raise TransactionFailed('Logging in failed, please try again later.')

        if not academy or not academy.check_password(password):
            raise InvalidCredentials()

        return AcademyService.auth_payload(academy)
