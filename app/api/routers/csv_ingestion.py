"""
app/api/routers/csv_ingestion.py

CSV ingestion HTTP endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Form, HTTPException, Query, UploadFile, status

from app.api.dependencies import get_csv_upload
from app.domain.errors import IngestionError, UnrecognizedSchemaError
from app.schemas.csv_ingestion import IngestionReportResponse
from app.services.csv_ingestion_service import CSVIngestionService, get_csv_ingestion_service

router = APIRouter(tags=["ingestion"])


@router.post("/upload", response_model=IngestionReportResponse)
def upload_csv(
    file: UploadFile = Depends(get_csv_upload),
    start_date: str | None = Form(default=None, alias="startDate"),
    end_date: str | None = Form(default=None, alias="endDate"),
    force: bool = Query(default=False, description="Ingest even when headers look unrelated to air quality"),
    ingestion_service: CSVIngestionService = Depends(get_csv_ingestion_service),
) -> IngestionReportResponse:
    """
    Ingest one air-quality CSV export.

    Partial batch failures still return 200; inspect ``totalFailed``.
    """

    try:
        report = ingestion_service.ingest_upload(
            upload_file=file,
            start_date=start_date,
            end_date=end_date,
            skip_schema_check=force,
        )
    except UnrecognizedSchemaError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=exc.to_dict(),
        ) from exc
    except IngestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    return IngestionReportResponse.from_domain(report)
