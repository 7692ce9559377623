import logging
from typing import Iterator, List, Literal, Optional

from fastapi import Depends, FastAPI, File, Header, Query, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from . import kpis, sample_data, service, user_settings
from .backend import BackendClient
from .config import Settings
from .errors import (
    BackendError,
    BizdashError,
    FormatError,
    NoDataError,
    UnknownTableError,
    UnsupportedFormat,
)
from .models import (
    ClearDataResponse,
    ErrorResponse,
    HealthResponse,
    ImportResponse,
    SampleDataRequest,
    SampleDataResponse,
    TableInfo,
)
from .rules import TABLES
from .user_settings import PreferencesUpdate, UserPreferences

settings = Settings.from_env()
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="bizdash",
    description="Data import/export, KPIs and settings for the small-business dashboard",
    version="0.1.0",
    responses={422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)

_STATUS_CODES = (
    (UnsupportedFormat, 422),
    (FormatError, 422),
    (NoDataError, 404),
    (UnknownTableError, 404),
    (BackendError, 502),
)


@app.exception_handler(BizdashError)
async def bizdash_error(request: Request, exc: BizdashError):
    status = next((code for kind, code in _STATUS_CODES if isinstance(exc, kind)), 400)
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status, content={"detail": str(exc)})


def get_backend(authorization: Optional[str] = Header(default=None)) -> Iterator[BackendClient]:
    token = None
    if authorization and authorization.lower().startswith("bearer "):
        token = authorization[7:]
    backend = BackendClient.from_settings(settings, access_token=token)
    try:
        yield backend
    finally:
        backend.close()


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.get("/tables", response_model=List[TableInfo])
def list_tables():
    return [{"value": value, "label": label} for value, label in TABLES.items()]


@app.get("/tables/{table}/export")
def export_table(
    table: str,
    fmt: Literal["csv", "json"] = Query("csv", alias="format"),
    backend: BackendClient = Depends(get_backend),
):
    exported = service.export_table(backend, table, fmt)
    return Response(
        content=exported.content,
        media_type=exported.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{exported.filename}"',
            "X-Record-Count": str(exported.records),
        },
    )


@app.post("/tables/{table}/import", response_model=ImportResponse)
async def import_table(
    table: str,
    file: UploadFile = File(...),
    backend: BackendClient = Depends(get_backend),
):
    raw = await file.read()
    result = service.import_file(backend, table, file.filename, raw)
    return {"table": result.table, "records": result.records}


@app.get("/kpis/{kind}")
def kpi_summary(kind: str, backend: BackendClient = Depends(get_backend)):
    return kpis.summarize(backend, kind)


@app.post("/sample-data", response_model=SampleDataResponse)
def seed_sample_data(req: SampleDataRequest, backend: BackendClient = Depends(get_backend)):
    return {"inserted": sample_data.seed(backend, req.kind, req.count)}


@app.delete("/sample-data", response_model=ClearDataResponse)
def clear_sample_data(
    kind: Literal["all", "sales", "traffic", "performance"] = "all",
    backend: BackendClient = Depends(get_backend),
):
    return {"cleared": sample_data.clear(backend, kind)}


@app.get("/users/{user_id}/settings", response_model=UserPreferences)
def get_user_settings(
    user_id: str,
    email: str = "",
    full_name: str = "",
    backend: BackendClient = Depends(get_backend),
):
    return user_settings.load(backend, user_id, email=email, full_name=full_name)


@app.put("/users/{user_id}/settings", response_model=UserPreferences)
def put_user_settings(
    user_id: str,
    update: PreferencesUpdate,
    email: str = "",
    full_name: str = "",
    backend: BackendClient = Depends(get_backend),
):
    changes = update.model_dump(by_alias=True, exclude_unset=True)
    user_settings.save(backend, user_id, changes)
    return user_settings.load(backend, user_id, email=email, full_name=full_name)
