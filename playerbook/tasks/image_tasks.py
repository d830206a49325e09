"""
Image Celery Tasks
Best-effort removal of stored images after their owner record is gone
"""

import logging

from playerbook.extensions import celery
from playerbook.services.image_storage import ImageStorage

logger = logging.getLogger(__name__)

@celery.task(name='playerbook.delete_image', ignore_result=True)
def delete_image(path):
    """Delete a stored image; failures are logged, never raised"""
    try:
        deleted = ImageStorage().delete(path)
    except Exception as e:
        logger.error(f"Image deletion failed for {path}: {str(e)}")
        return False

    if not deleted:
        logger.warning(f"Image {path} was not deleted")
    return deleted
