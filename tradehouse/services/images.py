"""Image hosting adapter.

Callers see two operations, ``upload(file, folder)`` returning an
``UploadedImage`` and ``delete(public_id)``. Any failure of the host is
raised as ``UpstreamFailure``.
"""

import logging
import os
import uuid
from datetime import datetime

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from slugify import slugify
from werkzeug.utils import secure_filename

from tradehouse.errors import UpstreamFailure

logger = logging.getLogger(__name__)


class UploadedImage:
    """Where an uploaded image lives and the handle needed to delete it."""

    def __init__(self, url, public_id):
        self.url = url
        self.public_id = public_id

    def __repr__(self):
        return f'<UploadedImage {self.public_id}>'


class ImageStore:
    def upload(self, file, folder):
        raise NotImplementedError

    def delete(self, public_id):
        raise NotImplementedError


def _extension(filename):
    if filename and '.' in filename:
        return filename.rsplit('.', 1)[1].lower()
    return 'jpg'


class S3ImageStore(ImageStore):
    """Stores images in an S3 bucket.

    Returned URLs point at ``public_url``; the bucket policy (or a CDN in
    front of it) must allow public reads.
    """

    def __init__(self, bucket, region, access_key=None, secret_key=None,
                 public_url=None, timeout=10, client=None):
        self.bucket = bucket
        self.region = region
        self.public_url = (public_url or f'https://{bucket}.s3.{region}.amazonaws.com').rstrip('/')
        self.client = client or boto3.client(
            's3',
            aws_access_key_id=access_key,
            aws_secret_access_key=secret_key,
            region_name=region,
            config=Config(
                signature_version='s3v4',
                connect_timeout=timeout,
                read_timeout=timeout,
                retries={'max_attempts': 2},
            ),
        )

    def object_key(self, filename, folder):
        stem = filename.rsplit('.', 1)[0] if filename else ''
        name = slugify(stem) or 'image'
        return f'{folder}/{name}-{uuid.uuid4().hex[:12]}.{_extension(filename)}'

    def upload(self, file, folder):
        key = self.object_key(file.filename, folder)
        try:
            file.stream.seek(0)
            self.client.upload_fileobj(
                file.stream, self.bucket, key,
                ExtraArgs={'ContentType': file.mimetype or 'application/octet-stream'}
            )
        except (BotoCoreError, ClientError) as e:
            logger.error('S3 upload of %s failed: %s', key, e)
            raise UpstreamFailure(f'Image upload failed: {e}')
        return UploadedImage(f'{self.public_url}/{key}', key)

    def delete(self, public_id):
        try:
            self.client.delete_object(Bucket=self.bucket, Key=public_id)
        except (BotoCoreError, ClientError) as e:
            raise UpstreamFailure(f'Image delete failed: {e}')


class LocalImageStore(ImageStore):
    """Saves images under UPLOAD_FOLDER, served from /uploads."""

    def __init__(self, root, base_url='/uploads'):
        self.root = root
        self.base_url = base_url.rstrip('/')

    def upload(self, file, folder):
        filename = secure_filename(file.filename or '') or f'image.{_extension(file.filename)}'
        timestamp = datetime.utcnow().strftime('%Y%m%d%H%M%S')
        filename = f"{timestamp}_{uuid.uuid4().hex[:8]}_{filename}"
        public_id = f'{folder}/{filename}'
        try:
            os.makedirs(os.path.join(self.root, folder), exist_ok=True)
            file.save(os.path.join(self.root, folder, filename))
        except OSError as e:
            raise UpstreamFailure(f'Image upload failed: {e}')
        return UploadedImage(f'{self.base_url}/{public_id}', public_id)

    def delete(self, public_id):
        path = os.path.join(self.root, *public_id.split('/'))
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            raise UpstreamFailure(f'Image delete failed: {e}')


def build_image_store(app):
    """Create the store selected by IMAGE_STORE."""
    config = app.config
    if config.get('IMAGE_STORE') == 's3':
        return S3ImageStore(
            bucket=config['S3_BUCKET'],
            region=config['AWS_REGION'],
            access_key=config.get('AWS_ACCESS_KEY_ID'),
            secret_key=config.get('AWS_SECRET_ACCESS_KEY'),
            public_url=config.get('S3_PUBLIC_URL'),
            timeout=config['IMAGE_UPLOAD_TIMEOUT'],
        )
    return LocalImageStore(config['UPLOAD_FOLDER'])


def discard_image(store, public_id):
    """Delete an image, logging rather than raising on failure."""
    if not public_id:
        return False
    try:
        store.delete(public_id)
        return True
    except UpstreamFailure as e:
        logger.warning('Failed to delete image %s: %s', public_id, e.message)
        return False


def replace_image(store, record, file, folder):
    """Upload ``file`` and point ``record`` at it.

    The upload happens first, so a failure leaves the record untouched.
    Returns the previous deletion handle; the caller deletes it once the
    record change is committed.
    """
    uploaded = store.upload(file, folder)
    previous = record.image_id
    record.image = uploaded.url
    record.image_id = uploaded.public_id
    return previous
