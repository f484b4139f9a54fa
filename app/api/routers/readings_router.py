"""
Stored-reading stats and filter endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.errors import InvalidDateRangeError
from app.schemas.readings import ReadingFilterRequest, ReadingPageResponse, ReadingStatsResponse
from app.services.reading_query_service import ReadingQueryService, get_reading_query_service

router = APIRouter(tags=["readings"])


@router.get("/data-stats", response_model=ReadingStatsResponse)
def get_data_stats(
    query_service: ReadingQueryService = Depends(get_reading_query_service),
) -> ReadingStatsResponse:
    return ReadingStatsResponse.from_domain(query_service.get_stats())


@router.post("/data/filter", response_model=ReadingPageResponse)
def filter_data(
    body: ReadingFilterRequest,
    query_service: ReadingQueryService = Depends(get_reading_query_service),
) -> ReadingPageResponse:
    try:
        page = query_service.filter_readings(
            start_date=body.start_date,
            end_date=body.end_date,
            limit=body.limit,
            offset=body.offset,
        )
    except InvalidDateRangeError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc

    return ReadingPageResponse.from_domain(page, start_date=body.start_date, end_date=body.end_date)
