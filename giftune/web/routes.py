"""Web UI routes for giftune."""

import json
import logging
import queue
import shutil
import subprocess
import threading
import uuid
from dataclasses import asdict
from pathlib import Path

from flask import (
    Blueprint,
    Response,
    current_app,
    jsonify,
    render_template,
    request,
    send_file,
)

from giftune import ffutil
from giftune.engine import process, recommend, resolve_time_range
from giftune.manifest import ConversionManifest, RangeConfig, SettingsOverride
from giftune.validation import validate_video_file
from giftune.web import JOB_STORE_KEY, discard_jobs

logger = logging.getLogger(__name__)

bp = Blueprint("web", __name__, template_folder="templates")


def _job_store() -> dict[str, dict]:
    """In-memory job store of the current app: job_id -> job dict."""
    return current_app.extensions[JOB_STORE_KEY]


def _parse_request(config) -> tuple[RangeConfig, SettingsOverride]:
    if not isinstance(config, dict):
        raise ValueError("Request body must be a JSON object")
    rc = config.get("range") or {}
    sc = config.get("settings") or {}
    if not isinstance(rc, dict) or not isinstance(sc, dict):
        raise ValueError("'range' and 'settings' must be JSON objects")
    range_cfg = RangeConfig(
        start=float(rc["start"]) if rc.get("start") is not None else None,
        end=float(rc["end"]) if rc.get("end") is not None else None,
    )
    overrides = SettingsOverride(
        fps=int(sc["fps"]) if sc.get("fps") is not None else None,
        width=int(sc["width"]) if sc.get("width") is not None else None,
        quality=sc.get("quality"),
    )
    return range_cfg, overrides


def _recommendation(job: dict, range_cfg: RangeConfig, overrides: SettingsOverride) -> dict:
    metadata = job["metadata"]
    time_range = resolve_time_range(metadata, range_cfg)
    settings, report = recommend(metadata, time_range, overrides)
    return {
        "range": asdict(time_range),
        "settings": asdict(settings),
        "estimate": asdict(report),
    }


@bp.route("/")
def index():
    return render_template("index.html")


@bp.route("/api/upload", methods=["POST"])
def upload():
    if "file" not in request.files:
        return jsonify({"error": "No file provided"}), 400

    f = request.files["file"]
    if not f.filename:
        return jsonify({"error": "Empty filename"}), 400

    job_id = uuid.uuid4().hex[:12]
    job_dir = Path(current_app.config["WORK_DIR"]) / job_id
    job_dir.mkdir(parents=True, exist_ok=True)

    ext = Path(f.filename).suffix or ".mp4"
    input_path = job_dir / f"input{ext}"
    f.save(input_path)

    check = validate_video_file(f.mimetype, input_path.stat().st_size)
    if not check.valid:
        shutil.rmtree(job_dir, ignore_errors=True)
        return jsonify({"error": check.message}), 400

    try:
        metadata = ffutil.probe(input_path)
    except (subprocess.CalledProcessError, ValueError, KeyError) as e:
        logger.warning("Could not read metadata from %s: %s", f.filename, e)
        shutil.rmtree(job_dir, ignore_errors=True)
        return jsonify({"error": "Failed to load video metadata"}), 400
    metadata.file_name = f.filename
    metadata.mime_type = f.mimetype

    _job_store()[job_id] = {
        "dir": job_dir,
        "input_path": input_path,
        "filename": f.filename,
        "metadata": metadata,
        "status": "uploaded",
    }

    resp = {
        "job_id": job_id,
        "filename": f.filename,
        "metadata": asdict(metadata),
        **_recommendation(_job_store()[job_id], RangeConfig(), SettingsOverride()),
    }
    if check.message:
        resp["warning"] = check.message
    return jsonify(resp)


@bp.route("/api/jobs/<job_id>/estimate", methods=["POST"])
def estimate(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    try:
        range_cfg, overrides = _parse_request(request.get_json() or {})
        return jsonify(_recommendation(_job_store()[job_id], range_cfg, overrides))
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400


@bp.route("/api/jobs/<job_id>/convert", methods=["POST"])
def start_convert(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    job = _job_store()[job_id]
    if job["status"] not in ("uploaded", "done", "error"):
        return jsonify({"error": f"Job is already {job['status']}"}), 409

    try:
        range_cfg, overrides = _parse_request(request.get_json() or {})
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    manifest = ConversionManifest(
        input=job["input_path"],
        output=job["dir"] / "output.gif",
        range=range_cfg,
        settings=overrides,
    )

    progress_queue: queue.Queue = queue.Queue()
    job["progress_queue"] = progress_queue
    job["status"] = "processing"
    job["error"] = None

    def run():
        try:
            def on_progress(stage: str, frac: float):
                progress_queue.put({"stage": stage, "progress": round(frac, 3)})

            result = process(manifest, on_progress=on_progress)
            job["result"] = {
                "output_path": str(result.output_path),
                "settings": asdict(result.settings),
                "range": asdict(result.time_range),
                "estimate_label": result.estimate_label,
                "exceeds_budget": result.exceeds_budget,
                "actual_bytes": result.actual_bytes,
            }
            job["status"] = "done"
        except ffutil.ConversionError as e:
            job["status"] = "error"
            job["error"] = str(e)
        except Exception as e:
            logger.exception("Conversion of job %s failed", job_id)
            job["status"] = "error"
            job["error"] = str(e)
        finally:
            progress_queue.put(None)  # sentinel

    threading.Thread(target=run, daemon=True).start()
    return jsonify({"status": "started"})


@bp.route("/api/jobs/<job_id>/progress")
def progress_stream(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    job = _job_store()[job_id]
    q = job.get("progress_queue")
    timeout = current_app.config["PROGRESS_TIMEOUT"]

    if q is None:
        return jsonify({"error": "No conversion in progress"}), 409

    def generate():
        while True:
            try:
                msg = q.get(timeout=timeout)
            except queue.Empty:
                yield "data: {\"error\": \"timeout\"}\n\n"
                break
            if msg is None:
                if job["status"] == "error":
                    data = json.dumps({"error": job["error"]})
                else:
                    data = json.dumps({
                        "stage": "complete",
                        "progress": 1.0,
                        "result": job.get("result"),
                    })
                yield f"data: {data}\n\n"
                break
            yield f"data: {json.dumps(msg)}\n\n"

    return Response(generate(), mimetype="text/event-stream")


@bp.route("/api/jobs/<job_id>/result")
def download_result(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    job = _job_store()[job_id]
    if job["status"] != "done":
        return jsonify({"error": "Job not complete"}), 409

    output_path = Path(job["result"]["output_path"])
    download = request.args.get("download") == "1"
    name = Path(job["filename"]).with_suffix(".gif").name
    return send_file(
        output_path, mimetype="image/gif", as_attachment=download, download_name=name
    )


@bp.route("/api/jobs/<job_id>/status")
def job_status(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    job = _job_store()[job_id]
    resp = {"status": job["status"], "filename": job.get("filename")}
    if job["status"] == "done":
        resp["result"] = job.get("result")
    if job["status"] == "error":
        resp["error"] = job.get("error")
    return jsonify(resp)


@bp.route("/api/jobs/<job_id>", methods=["DELETE"])
def discard_job(job_id: str):
    if job_id not in _job_store():
        return jsonify({"error": "Job not found"}), 404

    job = _job_store()[job_id]
    if job["status"] == "processing":
        return jsonify({"error": "Job is already processing"}), 409

    _job_store().pop(job_id)
    shutil.rmtree(job["dir"], ignore_errors=True)
    return jsonify({"status": "discarded"})


@bp.route("/api/jobs", methods=["DELETE"])
def discard_all_jobs():
    if any(job["status"] == "processing" for job in _job_store().values()):
        return jsonify({"error": "A job is still processing"}), 409
    return jsonify({"discarded": discard_jobs(current_app)})
