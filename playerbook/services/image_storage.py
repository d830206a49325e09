import os
import uuid
import io
from datetime import datetime
from typing import Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError
from flask import current_app
from werkzeug.utils import secure_filename
from PIL import Image, UnidentifiedImageError

from playerbook.utils.errors import InvalidImage

class ImageStorage:
    """Stores uploaded academy and player images on local disk or S3"""

    ALLOWED_IMAGE_EXTENSIONS = {'.png', '.jpg', '.jpeg'}
    ALLOWED_MIMETYPES = {'image/png', 'image/jpeg', 'image/jpg'}
    PIL_FORMATS = {'.png': 'PNG', '.jpg': 'JPEG', '.jpeg': 'JPEG'}

    def __init__(self):
        config = current_app.config
        self.backend = config.get('IMAGE_STORAGE_BACKEND', 'local')
        self.upload_folder = config.get('UPLOAD_FOLDER', 'uploads')
        self.max_size = config.get('MAX_IMAGE_SIZE', 500000)
        self.max_dimension = config.get('IMAGE_MAX_DIMENSION', 1200)
        # Decoded size cap; larger images are rejected before their pixels are read
        self.max_pixels = config.get('IMAGE_MAX_PIXELS') or (self.max_dimension * 5) ** 2
        self.bucket_name = config.get('AWS_S3_BUCKET')
        self.region = config.get('AWS_REGION', 'us-east-1')
        self.s3_client = None

        if self.backend == 's3':
            self._init_s3_client(config)

    def _init_s3_client(self, config):
        """Initialize AWS S3 client"""
        try:
            if config.get('AWS_ACCESS_KEY_ID') and config.get('AWS_SECRET_ACCESS_KEY'):
                self.s3_client = boto3.client(
                    's3',
                    aws_access_key_id=config['AWS_ACCESS_KEY_ID'],
                    aws_secret_access_key=config['AWS_SECRET_ACCESS_KEY'],
                    region_name=self.region
                )
            else:
                # Default AWS credentials (IAM role, etc.)
                self.s3_client = boto3.client('s3', region_name=self.region)
        except (NoCredentialsError, BotoCoreError) as e:
            current_app.logger.error(f"Failed to initialize AWS S3 client: {str(e)}")
            self.s3_client = None

    @property
    def images_folder(self):
        return os.path.join(self.upload_folder, 'images')

    def _validate_file(self, file) -> str:
        """Validate file type and size; returns the normalized extension"""
        if not file or not file.filename:
            raise InvalidImage('No image provided.')

        filename = secure_filename(file.filename)
        file_ext = os.path.splitext(filename)[1].lower()

        if file_ext not in self.ALLOWED_IMAGE_EXTENSIONS:
            raise InvalidImage('Invalid mime type! Allowed: png, jpg, jpeg.')
        if file.mimetype and file.mimetype not in self.ALLOWED_MIMETYPES:
            raise InvalidImage('Invalid mime type! Allowed: png, jpg, jpeg.')

        file.seek(0, os.SEEK_END)
        file_size = file.tell()
        file.seek(0)

        if file_size > self.max_size:
            raise InvalidImage(f'File too large. Maximum size: {self.max_size} bytes.')

        return file_ext

    def _process_image(self, file, file_ext) -> bytes:
        """Check the payload is a real image and downscale oversized ones"""
        try:
            image = Image.open(file.stream)
            if image.width * image.height > self.max_pixels:
                raise InvalidImage(f'Image too large. Maximum: {self.max_pixels} pixels.')
            image.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError):
            raise InvalidImage('Uploaded file is not a valid image.')

        width, height = image.size
        if width > self.max_dimension or height > self.max_dimension:
            ratio = min(self.max_dimension / width, self.max_dimension / height)
            image = image.resize((int(width * ratio), int(height * ratio)), Image.Resampling.LANCZOS)

        pil_format = self.PIL_FORMATS[file_ext]
        if pil_format == 'JPEG' and image.mode not in ('RGB', 'L'):
            image = image.convert('RGB')

        output = io.BytesIO()
        image.save(output, format=pil_format)
        return output.getvalue()

    def save(self, file) -> str:
        """Validate and store an uploaded image; returns its stored path or URL"""
        file_ext = self._validate_file(file)
        data = self._process_image(file, file_ext)
        filename = f"{uuid.uuid4()}{file_ext}"

        if self.backend == 's3':
            return self._save_s3(filename, data, file_ext)

        os.makedirs(self.images_folder, exist_ok=True)
        path = os.path.join(self.images_folder, filename)
        with open(path, 'wb') as out:
            out.write(data)

        current_app.logger.info(f"Image stored: {path}")
        return path

    def _save_s3(self, filename, data, file_ext) -> str:
        if not self.s3_client or not self.bucket_name:
            raise InvalidImage('Image storage is not available.', status_code=503)

        s3_key = f"images/{filename}"
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=s3_key,
                Body=data,
                ContentType='image/png' if file_ext == '.png' else 'image/jpeg',
                CacheControl='max-age=31536000',
                Metadata={'uploaded_at': datetime.utcnow().isoformat()}
            )
        except (ClientError, BotoCoreError) as e:
            current_app.logger.error(f"AWS S3 error: {str(e)}")
            raise InvalidImage('Could not store image, please try again.', status_code=503)

        current_app.logger.info(f"Image uploaded to S3: {s3_key}")
        return f"https://{self.bucket_name}.s3.{self.region}.amazonaws.com/{s3_key}"

    def _s3_key(self, file_url: str) -> Optional[str]:
        marker = f"s3.{self.region}.amazonaws.com/"
        if marker not in file_url:
            return None
        return file_url.split(marker, 1)[1]

    def delete(self, path: str) -> bool:
        """Delete a stored image; logs and returns False on failure"""
        if not path:
            return False

        if path.startswith('https://'):
            s3_key = self._s3_key(path)
            if not self.s3_client or not s3_key:
                current_app.logger.error(f"Cannot delete image, invalid S3 URL or no client: {path}")
                return False
            try:
                self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
            except (ClientError, BotoCoreError) as e:
                current_app.logger.error(f"Error deleting image {s3_key}: {str(e)}")
                return False
            current_app.logger.info(f"Image deleted from S3: {s3_key}")
            return True

        images_root = os.path.realpath(self.images_folder)
        real_path = os.path.realpath(path)
        if os.path.commonpath([images_root, real_path]) != images_root:
            current_app.logger.error(f"Refusing to delete file outside the upload folder: {path}")
            return False

        try:
            os.remove(real_path)
        except OSError as e:
            current_app.logger.error(f"Error deleting image {path}: {str(e)}")
            return False

        current_app.logger.info(f"Image deleted: {path}")
        return True
