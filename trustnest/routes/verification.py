from flask import Blueprint, jsonify, request

from trustnest.auth.decorators import require_auth
from trustnest.extensions import limiter
from trustnest.models.document import DocumentType
from trustnest.routes.common import services, json_body, uploaded_file

verification_bp = Blueprint('verification', __name__, url_prefix='/verification')


@verification_bp.route('/status', methods=['GET'])
@require_auth()
def get_status():
    return jsonify(services().verification.get_status(request.current_user.id))


@verification_bp.route('/email', methods=['POST'])
@require_auth()
@limiter.limit("10 per hour")
def verify_email():
    data = json_body()
    email = data.get('email', request.current_user.email)
    record = services().verification.verify_email(request.current_user.id, email)
    return jsonify({'success': True, 'verification': record.to_dict()})


@verification_bp.route('/phone', methods=['POST'])
@require_auth()
@limiter.limit("10 per hour")
def verify_phone():
    data = json_body()
    record = services().verification.verify_phone_otp(
        request.current_user.id,
        data.get('phone_number'),
        data.get('otp')
    )
    return jsonify({'success': True, 'verification': record.to_dict()})


def _upload_evidence(document_type):
    filename, mime_type, data = uploaded_file()
    svc = services()
    document = svc.documents.upload(request.current_user, document_type, filename, mime_type, data)
    return jsonify({
        'success': True,
        'document': document.to_dict(),
        'verification': svc.verification.get_status(request.current_user.id)
    }), 201


@verification_bp.route('/government-id', methods=['POST'])
@require_auth()
@limiter.limit("20 per hour")
def upload_government_id():
    return _upload_evidence(DocumentType.GOVERNMENT_ID)


@verification_bp.route('/selfie', methods=['POST'])
@require_auth()
@limiter.limit("20 per hour")
def upload_selfie():
    return _upload_evidence(DocumentType.SELFIE)


@verification_bp.route('/documents', methods=['GET'])
@require_auth()
def get_verification_documents():
    documents = [
        doc for doc in services().documents.list_documents(request.current_user.id)
        if doc.document_type in (DocumentType.GOVERNMENT_ID, DocumentType.SELFIE)
    ]
    return jsonify({'documents': [doc.to_dict() for doc in documents]})
