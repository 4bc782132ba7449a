"""Flask application factory for the giftune web UI."""

import logging
import shutil
import tempfile
from pathlib import Path

from flask import Flask, jsonify

logger = logging.getLogger(__name__)

JOB_STORE_KEY = "giftune.jobs"

DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024 * 1024  # 2 GB
DEFAULT_PROGRESS_TIMEOUT = 120.0


def discard_jobs(app: Flask) -> int:
    """Forget every job of *app* and delete its working files."""
    jobs: dict[str, dict] = app.extensions[JOB_STORE_KEY]
    count = len(jobs)
    for job in jobs.values():
        shutil.rmtree(job["dir"], ignore_errors=True)
    jobs.clear()
    return count


def create_app(
    work_dir: Path | None = None,
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    progress_timeout: float = DEFAULT_PROGRESS_TIMEOUT,
) -> Flask:
    app = Flask(__name__)
    app.config["WORK_DIR"] = work_dir or Path(tempfile.mkdtemp(prefix="giftune_"))
    app.config["MAX_CONTENT_LENGTH"] = max_upload_bytes
    app.config["PROGRESS_TIMEOUT"] = progress_timeout

    # Jobs live for the lifetime of the app; each app gets its own store.
    app.extensions[JOB_STORE_KEY] = {}
    logger.debug("giftune web work dir: %s", app.config["WORK_DIR"])

    from giftune.web.routes import bp
    app.register_blueprint(bp)

    @app.errorhandler(413)
    def request_entity_too_large(error):
        limit_mb = app.config["MAX_CONTENT_LENGTH"] / (1024 * 1024)
        return jsonify({"error": f"File too large (limit {limit_mb:.0f}MB)"}), 413

    return app
