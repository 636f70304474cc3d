from types import SimpleNamespace

from trustnest.extensions import db, cache, blob_store
from trustnest.services.admin_service import AdminService
from trustnest.services.document_service import DocumentService
from trustnest.services.matching_service import MatchingService
from trustnest.services.messaging_service import MessagingService
from trustnest.services.profile_service import ProfileService
from trustnest.services.property_service import PropertyService
from trustnest.services.verification_service import VerificationService
from trustnest.utils.security import build_fernet


def build_services(app, logger):
    """Wire the service objects for one app; stored on app.extensions['services']"""
    verification = VerificationService(db, logger, cache=cache)
    documents = DocumentService(
        db, logger, blob_store,
        build_fernet(app.config['DOCUMENT_ENCRYPTION_KEY']),
        key_id=app.config['DOCUMENT_ENCRYPTION_KEY_ID'],
        verification_service=verification
    )
    messaging = MessagingService(db, logger)

    return SimpleNamespace(
        profiles=ProfileService(db, logger),
        matching=MatchingService(db, logger),
        verification=verification,
        documents=documents,
        messaging=messaging,
        properties=PropertyService(db, logger, document_service=documents),
        admin=AdminService(db, logger, verification, messaging)
    )
