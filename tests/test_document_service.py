"""
Tests for document validation, encrypted storage and sub-check effects.
"""
from unittest.mock import patch

import pytest
from sqlalchemy.orm.exc import StaleDataError

from trustnest.errors import (
    DependencyError, ForbiddenError, NotFoundError, StorageError, ValidationError
)
from trustnest.extensions import blob_store, db
from trustnest.models.audit import AuditLogEntry
from trustnest.models.document import Document, DocumentType

from tests.conftest import MB, PNG_BYTES


class TestValidate:
    @pytest.mark.parametrize('document_type, mime_type, size', [
        ('government_id', 'application/pdf', 10 * MB),
        ('selfie', 'image/jpeg', 5 * MB),
        ('property_photo', 'image/webp', 1024),
        ('other', 'application/pdf', 15 * MB),
    ])
    def test_accepts_allowed_uploads(self, services, document_type, mime_type, size):
        assert services.documents.validate(document_type, mime_type, size) is DocumentType(document_type)

    @pytest.mark.parametrize('document_type', ['government_id', 'selfie', 'property_photo', 'other'])
    def test_rejects_executables(self, services, document_type):
        with pytest.raises(ValidationError):
            services.documents.validate(document_type, 'application/exe', 1024)

    @pytest.mark.parametrize('document_type, size', [
        ('government_id', 10 * MB + 1),
        ('selfie', 5 * MB + 1),
        ('property_photo', 10 * MB + 1),
        ('other', 15 * MB + 1),
    ])
    def test_rejects_oversize(self, services, document_type, size):
        with pytest.raises(ValidationError):
            services.documents.validate(document_type, 'image/png', size)

    def test_rejects_mime_allowed_elsewhere(self, services):
        with pytest.raises(ValidationError):
            services.documents.validate('selfie', 'application/pdf', 1024)

    def test_rejects_unknown_type_and_empty_file(self, services):
        with pytest.raises(ValidationError):
            services.documents.validate('passport_scan', 'image/png', 1024)
        with pytest.raises(ValidationError):
            services.documents.validate('selfie', 'image/png', 0)


class TestUpload:
    def test_oversize_selfie_creates_nothing(self, services, user, tmp_path):
        with patch.object(blob_store, 'put', wraps=blob_store.put) as put:
            with pytest.raises(ValidationError):
                services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', b'\x00' * (12 * MB))

        put.assert_not_called()
        assert Document.query.count() == 0

    def test_executable_is_rejected(self, services, user):
        with pytest.raises(ValidationError):
            services.documents.upload(user, 'other', 'setup.exe', 'application/exe', b'MZ' + b'\x00' * 64)
        assert Document.query.count() == 0

    def test_stores_ciphertext_once(self, services, user):
        with patch.object(blob_store, 'put', wraps=blob_store.put) as put:
            document = services.documents.upload(user, 'other', 'lease.png', 'image/png', PNG_BYTES)

        put.assert_called_once()
        key, stored_bytes, content_type = put.call_args[0]
        assert key.startswith(f'documents/{user.id}/other/')
        assert stored_bytes != PNG_BYTES
        assert content_type == 'application/octet-stream'
        assert blob_store.read(document.file_key) == stored_bytes
        assert document.encryption_algorithm == 'fernet-aes128-cbc-hmac-sha256'
        assert document.file_size == len(PNG_BYTES)

    def test_round_trip_through_read_document(self, services, user):
        document = services.documents.upload(user, 'other', 'lease.png', 'image/png', PNG_BYTES)
        data, mime_type = services.documents.read_document(user, document.id)

        assert data == PNG_BYTES
        assert mime_type == 'image/png'

    def test_tampered_blob_fails_integrity_check(self, services, user):
        document = services.documents.upload(user, 'other', 'lease.png', 'image/png', PNG_BYTES)
        blob_store.put(document.file_key, b'garbage', 'application/octet-stream')

        with pytest.raises(StorageError):
            services.documents.read_document(user, document.id)

    def test_selfie_marks_selfie_check(self, services, user):
        services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', PNG_BYTES)
        assert services.verification.get_status(user.id)['selfie_verified'] is True

    def test_government_id_waits_for_review(self, services, user):
        services.verification.record_sub_check(user.id, 'id', True)
        services.documents.upload(user, 'government_id', 'id.pdf', 'application/pdf', b'%PDF-1.4 test')

        assert services.verification.get_status(user.id)['id_verified'] is False

    def test_storage_failure_leaves_no_trace(self, services, user):
        with patch.object(blob_store, 'put', side_effect=StorageError('disk full')):
            with pytest.raises(StorageError) as excinfo:
                services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', PNG_BYTES)

        assert excinfo.value.retryable is True
        assert Document.query.count() == 0
        assert services.verification.get_status(user.id)['selfie_verified'] is False

    def test_failed_sub_check_write_leaves_no_document(self, services, user):
        with patch.object(blob_store, 'put', wraps=blob_store.put) as put, \
                patch.object(db.session, 'commit', side_effect=StaleDataError('row version changed')):
            with pytest.raises(DependencyError):
                services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', PNG_BYTES)

        key = put.call_args[0][0]
        assert Document.query.count() == 0
        with pytest.raises(StorageError):
            blob_store.get(key)
        assert services.verification.get_status(user.id)['selfie_verified'] is False

    def test_retry_after_failed_upload_stores_one_document(self, services, user):
        with patch.object(db.session, 'commit', side_effect=StaleDataError('row version changed')):
            with pytest.raises(DependencyError):
                services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', PNG_BYTES)

        services.documents.upload(user, 'selfie', 'me.jpg', 'image/jpeg', PNG_BYTES)

        assert Document.query.count() == 1
        assert services.verification.get_status(user.id)['selfie_verified'] is True

    def test_filename_is_sanitized(self, services, user):
        document = services.documents.upload(user, 'other', '../../etc/pass wd.png', 'image/png', PNG_BYTES)
        assert document.file_name == 'passwd.png'


class TestAccess:
    def test_list_omits_urls(self, services, user):
        services.documents.upload(user, 'other', 'a.png', 'image/png', PNG_BYTES)
        services.documents.upload(user, 'selfie', 'b.png', 'image/png', PNG_BYTES)

        documents = services.documents.list_documents(user.id)

        assert len(documents) == 2
        assert all('file_url' not in doc.to_dict() for doc in documents)
        assert len(services.documents.list_documents(user.id, document_type='selfie')) == 1

    def test_url_for_owner_and_admin_only(self, services, user, other_user, admin):
        document = services.documents.upload(user, 'other', 'a.png', 'image/png', PNG_BYTES)

        assert services.documents.get_document_url(user, document.id).endswith(document.file_key)
        assert services.documents.get_document_url(admin, document.id) == document.file_url
        with pytest.raises(ForbiddenError):
            services.documents.get_document_url(other_user, document.id)
        with pytest.raises(NotFoundError):
            services.documents.get_document_url(user, 999)

    def test_owner_delete_removes_blob(self, services, user):
        document = services.documents.upload(user, 'other', 'a.png', 'image/png', PNG_BYTES)
        key = document.file_key

        services.documents.delete_document(user, document.id)

        assert Document.query.count() == 0
        with pytest.raises(StorageError):
            blob_store.get(key)
        assert AuditLogEntry.query.count() == 0

    def test_admin_delete_is_audited(self, services, user, admin):
        document = services.documents.upload(user, 'other', 'a.png', 'image/png', PNG_BYTES)
        document_id = document.id

        services.documents.delete_document(admin, document_id)

        entry = AuditLogEntry.query.one()
        assert entry.action == 'DELETE_DOCUMENT'
        assert entry.target_id == document_id
        assert entry.target_user_id == user.id

    def test_stranger_cannot_delete(self, services, user, other_user):
        document = services.documents.upload(user, 'other', 'a.png', 'image/png', PNG_BYTES)
        with pytest.raises(ForbiddenError):
            services.documents.delete_document(other_user, document.id)
        assert Document.query.count() == 1
