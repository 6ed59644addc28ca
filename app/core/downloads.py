from __future__ import annotations

from pathlib import Path

from flask import Response, current_app, stream_with_context

STREAM_CHUNK_SIZE = 64 * 1024


def stream_file(path: Path, mimetype: str, download_name: str) -> Response:
    # Opening happens before the response starts so a failure still becomes a 500.
    handle = path.open("rb")

    def generate():
        try:
            while True:
                chunk = handle.read(STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        except OSError:
            # Headers are already sent; the failure can only be logged.
            current_app.logger.exception("Error al leer %s durante la descarga", path.name)
        finally:
            handle.close()

    response = Response(stream_with_context(generate()), mimetype=mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{download_name}"'
    return response
