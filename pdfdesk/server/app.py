"""
HTTP processing service.

Exposes the processing functions at POST /functions/v1/<name> and serves
their results from GET /storage/<name>. Every function answers with JSON
carrying 'success'; failures also carry 'error'.
"""
import argparse
import logging
import os
from typing import Callable, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request, send_from_directory

from ..core.errors import ProcessingError
from ..utils.log import LOG_LEVELS, configure_logging
from .config import ServiceConfig
from .processing import compress_pdf, compression_ratio, images_to_pdf, merge_pdfs, split_pdf
from .storage import LocalStorage

logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type',
    'Access-Control-Allow-Methods': 'POST, OPTIONS',
}


def _bad_request(message: str) -> ProcessingError:
    return ProcessingError(message, status_code=400)


def _uploads(*keys: str) -> List[Tuple[str, bytes]]:
    """Read uploaded files under the first key that has any."""
    for key in keys:
        uploads = [f for f in request.files.getlist(key) if f and f.filename]
        if uploads:
            return [(os.path.basename(f.filename), f.read()) for f in uploads]
    return []


def create_app(config: Optional[ServiceConfig] = None) -> Flask:
    """
    Build the Flask application.

    Args:
        config: Service settings; read from the environment when omitted
    """
    config = config or ServiceConfig.from_env()
    storage = LocalStorage(config.storage_dir)

    app = Flask(__name__)
    app.config['SERVICE_CONFIG'] = config

    def download_url(stored_name: str) -> str:
        base = config.public_url or request.host_url.rstrip('/')
        return f"{base}/storage/{stored_name}"

    def authorized() -> bool:
        if not config.api_key:
            return True
        if request.headers.get('apikey') == config.api_key:
            return True
        return request.headers.get('Authorization') == f"Bearer {config.api_key}"

    def run_compress():
        uploads = _uploads('file', 'files')
        if not uploads:
            raise _bad_request('No file provided')
        name, data = uploads[0]

        compressed = compress_pdf(data, name)
        stored = storage.save('compressed', name, compressed)
        return {
            'success': True,
            'fileName': stored,
            'downloadUrl': download_url(stored),
            'originalSize': len(data),
            'compressedSize': len(compressed),
            'compressionRatio': compression_ratio(len(data), len(compressed)),
        }

    def run_merge():
        uploads = _uploads('files', 'file')
        if len(uploads) < 2:
            raise _bad_request('At least 2 PDF files required for merging')

        merged = merge_pdfs(uploads)
        stored = storage.save('merged', 'merged.pdf', merged)
        return {
            'success': True,
            'fileName': stored,
            'downloadUrl': download_url(stored),
            'filesMerged': len(uploads),
            'totalSize': sum(len(data) for _, data in uploads),
        }

    def run_split():
        uploads = _uploads('file', 'files')
        if not uploads:
            raise _bad_request('No file provided')
        name, data = uploads[0]

        try:
            pages_per_file = int(request.form.get('pagesPerFile', 1))
        except ValueError:
            raise _bad_request('pagesPerFile must be a number')

        split_files = []
        for part_name, label, content in split_pdf(data, pages_per_file, name):
            stored = storage.save('split', part_name, content)
            split_files.append({
                'fileName': part_name,
                'pages': label,
                'downloadUrl': download_url(stored),
            })
        return {'success': True, 'splitFiles': split_files}

    def run_image_to_pdf():
        uploads = _uploads('files', 'file')
        if not uploads:
            raise _bad_request('No images provided')

        pdf = images_to_pdf(uploads)
        stored = storage.save('converted', 'converted.pdf', pdf)
        return {
            'success': True,
            'fileName': stored,
            'imagesProcessed': len(uploads),
            'downloadUrl': download_url(stored),
        }

    functions: Dict[str, Callable[[], dict]] = {
        'compress-pdf': run_compress,
        'merge-pdf': run_merge,
        'split-pdf': run_split,
        'image-to-pdf': run_image_to_pdf,
    }

    @app.after_request
    def add_cors_headers(response):
        response.headers.update(CORS_HEADERS)
        return response

    @app.route('/functions/v1/<name>', methods=['POST', 'OPTIONS'])
    def call_function(name: str):
        if request.method == 'OPTIONS':
            return 'ok'

        handler = functions.get(name)
        if handler is None:
            return jsonify({'success': False, 'error': f'Unknown function: {name}'}), 404
        if not authorized():
            return jsonify({'success': False, 'error': 'Unauthorized'}), 401

        try:
            payload = handler()
        except ProcessingError as exc:
            status = exc.status_code or 500
            logger.warning("%s failed (%d): %s", name, status, exc)
            return jsonify({'success': False, 'error': str(exc)}), status
        except Exception:
            logger.exception("%s failed", name)
            return jsonify({'success': False, 'error': 'Internal server error'}), 500

        logger.info("%s succeeded", name)
        return jsonify(payload)

    @app.get('/storage/<name>')
    def download(name: str):
        if not storage.exists(name):
            return jsonify({'success': False, 'error': 'Not Found'}), 404
        return send_from_directory(storage.root, storage.path(name).name, as_attachment=True)

    return app


def main(argv=None):
    parser = argparse.ArgumentParser(description="PDFDesk processing service")
    parser.add_argument('--host', default='127.0.0.1', help='Interface to bind (default: 127.0.0.1)')
    parser.add_argument('--port', type=int, default=None, help='Port to listen on (default: $PORT or 8080)')
    parser.add_argument(
        '--log-level',
        choices=LOG_LEVELS,
        default='INFO',
        help='Set logging level (default: INFO)'
    )
    args = parser.parse_args(argv)

    configure_logging(args.log_level)
    config = ServiceConfig.from_env()
    app = create_app(config)
    port = args.port or config.port
    logger.info("Serving results from %s", config.storage_dir)
    app.run(host=args.host, port=port)


if __name__ == '__main__':
    main()
