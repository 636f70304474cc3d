"""Flask extensions, bound to the app in create_app()"""
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

from trustnest.utils.cache_manager import CacheManager
from trustnest.utils.storage import LocalBlobStore

db = SQLAlchemy()
migrate = Migrate()
cors = CORS()
limiter = Limiter(key_func=get_remote_address)
cache = CacheManager()
blob_store = LocalBlobStore()
