from typing import List, Optional

from fastapi import FastAPI, UploadFile, File, HTTPException
from .models import ConvertResponse, HealthResponse
from .convert import convert_bytes
from .errors import ConfigurationError, SniffError, TabclipError
from .rules import DEFAULT_FORMAT, VERSION
from .sniff import parse_delimiter, parse_format, preferring

app = FastAPI(
    title="tabclip",
    description="Delimited table files to pasteable HTML tables",
    version=VERSION,
)

@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}

@app.post("/convert", response_model=ConvertResponse)
async def convert(
    files: List[UploadFile] = File(...),
    format: str = DEFAULT_FORMAT,
    join: bool = False,
    prefer: Optional[str] = None,
):
    try:
        selector = parse_format(format)
        strategy = preferring(parse_delimiter(prefer))
    except ConfigurationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))

    payloads = []
    for upload in files:
        payloads.append((upload.filename or "-", await upload.read()))

    try:
        return convert_bytes(payloads, selector, join=join, strategy=strategy)
    except SniffError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except TabclipError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
