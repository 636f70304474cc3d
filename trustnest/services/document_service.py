"""
Document upload pipeline: validate, encrypt, store, record.

Bytes are encrypted before they reach the blob store, and the blob store is
written before the database row. The Document row commits in the same
transaction as the sub-check it moves, and the blob is removed again if
that transaction fails.
"""
from sqlalchemy.exc import SQLAlchemyError

from trustnest.errors import ForbiddenError, NotFoundError, TrustNestError, ValidationError
from trustnest.models.document import Document, DocumentType, ALLOWED_MIME_TYPES, MAX_FILE_SIZES, MB
from trustnest.models.verification import VerificationRecord
from trustnest.services.audit_service import AuditService
from trustnest.utils.helpers import generate_storage_key
from trustnest.utils.logging_config import log_error, log_user_action
from trustnest.utils.security import (
    ENCRYPTION_ALGORITHM, encrypt_document, decrypt_document, sanitize_filename
)

STORED_CONTENT_TYPE = 'application/octet-stream'

# Sub-check an upload moves. No liveness check yet, so an uploaded selfie
# counts; a new government ID needs review before it does.
UPLOAD_CHECKS = {
    DocumentType.SELFIE: ('selfie', True),
    DocumentType.GOVERNMENT_ID: ('id', False),
}


def parse_document_type(value):
    try:
        return value if isinstance(value, DocumentType) else DocumentType(value)
    except ValueError:
        raise ValidationError(
            f'Unknown document type: {value}',
            details={'field': 'document_type', 'allowed': [t.value for t in DocumentType]}
        )


class DocumentService:
    def __init__(self, db, logger, blob_store, fernet, key_id='default', verification_service=None):
        self.db = db
        self.logger = logger
        self.blob_store = blob_store
        self.fernet = fernet
        self.key_id = key_id
        self.verification_service = verification_service
        self.audit = AuditService(db, logger)

    def validate(self, document_type, mime_type, size):
        """Check a proposed upload against the per-type allow-list and size cap"""
        document_type = parse_document_type(document_type)

        allowed = ALLOWED_MIME_TYPES[document_type]
        if mime_type not in allowed:
            raise ValidationError(
                f'File type {mime_type} not allowed for {document_type.value}',
                details={'field': 'file', 'allowed': list(allowed)}
            )

        if size <= 0:
            raise ValidationError('File is empty', details={'field': 'file'})

        max_size = MAX_FILE_SIZES[document_type]
        if size > max_size:
            raise ValidationError(
                f'File too large. Maximum size for {document_type.value} is {max_size // MB}MB',
                details={'field': 'file', 'max_bytes': max_size}
            )

        return document_type

    def _commit_document(self, document):
        effect = UPLOAD_CHECKS.get(document.document_type)
        if effect is None or self.verification_service is None:
            verification = VerificationRecord.query.filter_by(user_id=document.user_id).first()
            document.verification_id = verification.id if verification else None
            self.db.session.add(document)
            self.db.session.commit()
            return

        def stage(record):
            document.verification_id = record.id
            self.db.session.add(document)

        check, value = effect
        self.verification_service.record_sub_check(document.user_id, check, value, stage=stage)

    def upload(self, user, document_type, filename, mime_type, data, property_id=None):
        document_type = self.validate(document_type, mime_type, len(data or b''))

        ciphertext = encrypt_document(data, self.fernet)
        key = generate_storage_key('documents', user.id, document_type.value)
        stored = self.blob_store.put(key, ciphertext, STORED_CONTENT_TYPE)

        document = Document(
            user_id=user.id,
            document_type=document_type,
            file_key=stored['key'],
            file_url=stored['url'],
            file_name=sanitize_filename(filename),
            mime_type=mime_type,
            file_size=len(data),
            encryption_algorithm=ENCRYPTION_ALGORITHM,
            encryption_key_id=self.key_id,
            property_id=property_id
        )
        try:
            self._commit_document(document)
        except (SQLAlchemyError, TrustNestError) as e:
            self.db.session.rollback()
            log_error(self.logger, e, {'key': key, 'action': 'removing orphaned blob'})
            self.blob_store.delete(key)
            raise

        log_user_action(self.logger, user.id, 'document.upload', {
            'document_id': document.id,
            'document_type': document_type.value,
            'size': document.file_size
        })
        return document

    def list_documents(self, user_id, document_type=None):
        query = Document.query.filter_by(user_id=user_id)
        if document_type is not None:
            query = query.filter_by(document_type=parse_document_type(document_type))
        return query.order_by(Document.created_at.desc(), Document.id.desc()).all()

    def _get_for(self, user, document_id):
        document = self.db.session.get(Document, document_id)
        if not document:
            raise NotFoundError('Document not found')
        if document.user_id != user.id and not user.is_admin:
            raise ForbiddenError('Access denied')
        return document

    def get_document_url(self, user, document_id):
        document = self._get_for(user, document_id)
        return self.blob_store.get(document.file_key)['url']

    def read_document(self, user, document_id):
        """Decrypted bytes and the original content type"""
        document = self._get_for(user, document_id)
        ciphertext = self.blob_store.read(document.file_key)
        return decrypt_document(ciphertext, self.fernet), document.mime_type

    def delete_document(self, user, document_id):
        document = self._get_for(user, document_id)
        key = document.file_key

        if user.is_admin and document.user_id != user.id:
            self.audit.append(
                admin_id=user.id,
                action='DELETE_DOCUMENT',
                target_user_id=document.user_id,
                target_type='document',
                target_id=document.id,
                details={'document_type': document.document_type.value}
            )

        self.db.session.delete(document)
        self.db.session.commit()
        self.blob_store.delete(key)

        self.logger.info(f"Document {document_id} deleted by user {user.id}")
        return True
