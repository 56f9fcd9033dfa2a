from __future__ import annotations
import datetime
import logging

from fastapi import FastAPI, HTTPException, status
from fastapi.responses import JSONResponse

from .crypto import H
from .logutil import setup_logging
from .merkle import EmptyInputError, MerkleError, build_root
from .models import DistributorInfo, RootRequest
from .report import vacuous_report, verify_distribution
from .settings import settings
from .middleware.size_limit import SizeLimitMiddleware

setup_logging(settings.log_level)
log = logging.getLogger(__name__)

app = FastAPI(title="distcheck")
app.add_middleware(SizeLimitMiddleware)


@app.get("/healthz")
async def healthz():
    return {"ok": True, "ts": datetime.datetime.now(datetime.timezone.utc).isoformat()}


@app.post("/distributions/verify")
def distributions_verify(info: DistributorInfo):
    if info.is_empty and not info.recipients:
        return JSONResponse(vacuous_report().model_dump())
    try:
        dist = info.to_distribution()
    except MerkleError as e:
        log.info("rejected distribution %r: %s", info.description, e)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    report = verify_distribution(dist)
    return JSONResponse(report.model_dump())


@app.post("/distributions/root")
def distributions_root(req: RootRequest):
    try:
        root = build_root(req.entries)
    except EmptyInputError:
        raise HTTPException(status_code=422, detail="no entries")
    return {"root": H(root), "entry_count": len(req.entries)}
