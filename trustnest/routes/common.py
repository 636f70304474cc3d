from flask import current_app, request

from trustnest.errors import ValidationError


def services():
    return current_app.extensions['services']


def json_body():
    """Request JSON as a dict; a missing body counts as empty"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object')
    return data


def uploaded_file():
    """(filename, mime_type, bytes) of the multipart ``file`` field"""
    file = request.files.get('file')
    if file is None or not file.filename:
        raise ValidationError('No file provided', details={'field': 'file'})
    return file.filename, file.mimetype, file.read()
