#!/usr/bin/env python3
from fastapi import FastAPI, UploadFile, File, Form, HTTPException
from fastapi.responses import JSONResponse, Response
from fastapi.concurrency import run_in_threadpool
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
import json, logging, tempfile, os
from pathlib import Path

from . import csv_stream, json_stream
from .config import ExtractionOptions, upload_chunk_bytes
from .errors import RowStreamError

app = FastAPI(title="rowstream")
logger = logging.getLogger(__name__)

request_counter = Counter("rowstream_requests_total", "Total extraction uploads", ["kind"])
rows_counter = Counter("rowstream_rows_total", "Rows delivered by extractions", ["kind"])
failure_counter = Counter("rowstream_failures_total", "Extractions rejected", ["kind"])
process_duration = Histogram("rowstream_process_seconds", "Time spent extracting")


@app.get("/health", tags=["ops"])
def health():
    return {"status": "healthy"}


@app.get("/metrics", tags=["ops"])
def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)


async def spool(file: UploadFile) -> Path:
    """Copy the upload to a temporary file without holding it in memory."""
    chunk_size = upload_chunk_bytes()
    with tempfile.NamedTemporaryFile(delete=False) as tmp:
        while True:
            chunk = await file.read(chunk_size)
            if not chunk:
                break
            tmp.write(chunk)
        return Path(tmp.name)


def _reject(kind, e: RowStreamError):
    failure_counter.labels(kind).inc()
    logger.warning("rejected %s upload: %s", kind, e)
    raise HTTPException(status_code=422, detail=str(e))


@app.post("/extract/json", tags=["extract"])
async def extract_json(file: UploadFile = File(...), mapping: str = Form(...)):
    request_counter.labels("json").inc()
    try:
        options = ExtractionOptions.from_mapping(json.loads(mapping))
    except json.JSONDecodeError as e:
        failure_counter.labels("json").inc()
        raise HTTPException(status_code=422, detail=f"mapping is not valid JSON: {e}")
    except RowStreamError as e:
        _reject("json", e)
    tmp_path = await spool(file)
    rows = []
    try:
        with process_duration.time():
            count = await run_in_threadpool(
                json_stream.parse, tmp_path, lambda h: None, lambda node, h, line: line,
                rows.append, **options.parse_args())
    except RowStreamError as e:
        _reject("json", e)
    except Exception as e:
        logger.exception("json extraction failed")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        tmp_path.unlink()
    rows_counter.labels("json").inc(count)
    return JSONResponse({"filename": file.filename, "headers": options.output_headers,
                         "rows": rows, "count": count})


@app.post("/extract/csv", tags=["extract"])
async def extract_csv(file: UploadFile = File(...)):
    request_counter.labels("csv").inc()
    tmp_path = await spool(file)
    headers, rows = [], []
    try:
        with process_duration.time():
            count = await run_in_threadpool(
                csv_stream.parse, tmp_path, headers.extend, lambda h, line: line, rows.append)
    except RowStreamError as e:
        _reject("csv", e)
    except Exception as e:
        logger.exception("csv extraction failed")
        raise HTTPException(status_code=500, detail=str(e))
    finally:
        tmp_path.unlink()
    rows_counter.labels("csv").inc(count)
    return JSONResponse({"filename": file.filename, "headers": headers, "rows": rows,
                         "count": count})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8000")))
