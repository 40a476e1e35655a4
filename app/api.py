"""HTTP route definitions for the service."""

from __future__ import annotations

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.schemas import ChartPayload, DataPointsResponse, ImportResult, ReadingSnapshot
from services.charts import ChartService, build_default_chart_service
from services.errors import InvalidPeriod, StoreUnavailable
from services.ingest import ReadingImporter

router = APIRouter()


def get_chart_service() -> ChartService:
    return build_default_chart_service()


def get_importer(service: ChartService = Depends(get_chart_service)) -> ReadingImporter:
    return ReadingImporter(service.store)


def _bad_request(exc: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _store_unavailable() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Reading store is unavailable.",
    )


@router.get(
    "/charts/day/{day}",
    response_model=ChartPayload,
    response_model_exclude_none=True,
    summary="Hourly temperature and humidity aggregates for one UTC calendar day.",
)
def get_day_chart(
    day: str,
    service: ChartService = Depends(get_chart_service),
) -> ChartPayload:
    try:
        return service.compute_day_chart(day)
    except InvalidPeriod as exc:
        raise _bad_request(exc) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc


@router.get(
    "/charts/month/{year}/{month}",
    response_model=ChartPayload,
    response_model_exclude_none=True,
    summary="Daily aggregates for one calendar month.",
)
def get_month_chart(
    year: str,
    month: str,
    service: ChartService = Depends(get_chart_service),
) -> ChartPayload:
    try:
        return service.compute_month_chart(year, month)
    except InvalidPeriod as exc:
        raise _bad_request(exc) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc


@router.get(
    "/charts/year/{year}",
    response_model=ChartPayload,
    response_model_exclude_none=True,
    summary="Monthly aggregates for one calendar year.",
)
def get_year_chart(
    year: str,
    service: ChartService = Depends(get_chart_service),
) -> ChartPayload:
    try:
        return service.compute_year_chart(year)
    except InvalidPeriod as exc:
        raise _bad_request(exc) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc


@router.get(
    "/dates/{day}/data-points",
    response_model=DataPointsResponse,
    summary="Timestamps holding readings within one UTC calendar day.",
)
def get_data_points(
    day: str,
    service: ChartService = Depends(get_chart_service),
) -> DataPointsResponse:
    try:
        timestamps = service.data_points_for_date(day)
    except InvalidPeriod as exc:
        raise _bad_request(exc) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc
    return DataPointsResponse(timestamps=timestamps)


@router.get(
    "/data/current",
    response_model=ReadingSnapshot,
    summary="Most recent readings from every sensor.",
)
def get_current_data(
    service: ChartService = Depends(get_chart_service),
) -> ReadingSnapshot:
    try:
        return service.current_reading()
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0],
        ) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc


@router.get(
    "/data/{timestamp}",
    response_model=ReadingSnapshot,
    summary="Readings recorded at an exact timestamp.",
)
def get_data_at(
    timestamp: int,
    service: ChartService = Depends(get_chart_service),
) -> ReadingSnapshot:
    try:
        return service.reading_at(timestamp)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=exc.args[0],
        ) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc


@router.post(
    "/readings",
    response_model=ImportResult,
    status_code=status.HTTP_201_CREATED,
    summary="Import a CSV file of sensor readings.",
)
async def import_readings(
    file: UploadFile = File(..., description="CSV file containing sensor readings."),
    importer: ReadingImporter = Depends(get_importer),
) -> ImportResult:
    contents = await file.read()
    try:
        return importer.import_csv(contents)
    except ValueError as exc:
        raise _bad_request(exc) from exc
    except StoreUnavailable as exc:
        raise _store_unavailable() from exc
    finally:
        await file.close()


@router.get(
    "/health",
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.get(
    "/",
    summary="Root endpoint mirrors health information.",
    status_code=status.HTTP_200_OK,
)
async def root() -> dict[str, str]:
    return {"status": "ok", "detail": "See /health for service status."}
