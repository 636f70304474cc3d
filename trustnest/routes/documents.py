from io import BytesIO

from flask import Blueprint, jsonify, request, send_file

from trustnest.auth.decorators import require_auth
from trustnest.extensions import limiter
from trustnest.routes.common import services, uploaded_file

documents_bp = Blueprint('documents', __name__, url_prefix='/documents')


@documents_bp.route('', methods=['POST'])
@require_auth()
@limiter.limit("20 per hour")
def upload_document():
    filename, mime_type, data = uploaded_file()
    document = services().documents.upload(
        request.current_user,
        request.form.get('document_type'),
        filename,
        mime_type,
        data
    )
    return jsonify({'success': True, 'document': document.to_dict()}), 201


@documents_bp.route('', methods=['GET'])
@require_auth()
def list_documents():
    documents = services().documents.list_documents(
        request.current_user.id,
        document_type=request.args.get('document_type')
    )
    return jsonify({'documents': [doc.to_dict() for doc in documents]})


@documents_bp.route('/<int:document_id>/url', methods=['GET'])
@require_auth()
def get_document_url(document_id):
    url = services().documents.get_document_url(request.current_user, document_id)
    return jsonify({'url': url})


@documents_bp.route('/<int:document_id>/content', methods=['GET'])
@require_auth()
def get_document_content(document_id):
    data, mime_type = services().documents.read_document(request.current_user, document_id)
    return send_file(BytesIO(data), mimetype=mime_type)


@documents_bp.route('/<int:document_id>', methods=['DELETE'])
@require_auth()
def delete_document(document_id):
    services().documents.delete_document(request.current_user, document_id)
    return jsonify({'success': True})
