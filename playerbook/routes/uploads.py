import os
from flask import Blueprint, current_app, send_from_directory

uploads_bp = Blueprint('uploads', __name__, url_prefix='/uploads')

@uploads_bp.route('/images/<path:filename>', methods=['GET'])
def serve_image(filename):
    """Serve a locally stored image"""
    images_folder = os.path.abspath(os.path.join(current_app.config['UPLOAD_FOLDER'], 'images'))
    return send_from_directory(images_folder, filename)
