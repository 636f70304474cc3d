"""
Blob storage for uploaded documents.

The store never interprets the bytes it is given; callers hand it ciphertext
and get back a reference URL.
"""
import logging
import os
from pathlib import Path

from trustnest.errors import StorageError

logger = logging.getLogger('trustnest.storage')


class LocalBlobStore:
    """Filesystem-backed store, laid out as <root>/<key>"""

    def __init__(self, root=None, base_url='/files'):
        self.root = Path(root) if root else None
        self.base_url = base_url.rstrip('/')

    def init_app(self, app, root=None):
        self.root = Path(root or app.config['UPLOAD_FOLDER'])
        self.base_url = app.config.get('STORAGE_BASE_URL', '/files').rstrip('/')

    def _path_for(self, key):
        if self.root is None:
            raise StorageError('Blob store is not configured')
        root = self.root.resolve()
        path = (root / key).resolve()
        if root not in path.parents:
            raise StorageError(f'Invalid storage key: {key}')
        return path

    def _url_for(self, key):
        return f"{self.base_url}/{key}"

    def put(self, key, data, content_type):
        path = self._path_for(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = path.with_name(path.name + '.part')
            with open(tmp_path, 'wb') as f:
                f.write(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Blob put failed for {key}: {e}")
            raise StorageError('Failed to store file') from e

        logger.info(f"Stored blob {key} ({len(data)} bytes, {content_type})")
        return {'key': key, 'url': self._url_for(key)}

    def get(self, key):
        path = self._path_for(key)
        if not path.exists():
            raise StorageError(f'Blob not found: {key}')
        return {'key': key, 'url': self._url_for(key)}

    def read(self, key):
        path = self._path_for(key)
        try:
            with open(path, 'rb') as f:
                return f.read()
        except OSError as e:
            logger.error(f"Blob read failed for {key}: {e}")
            raise StorageError('Failed to read file') from e

    def delete(self, key):
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Blob delete failed for {key}: {e}")
            raise StorageError('Failed to delete file') from e
