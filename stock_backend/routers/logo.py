from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from stock_backend.dependencies import get_current_user_id, get_logo_service
from stock_backend.errors import AnalysisError, ValidationError
from stock_backend.schemas.logo import (
    CompanyAnalysisRequest,
    CompanyAnalysisResponse,
    DetectedLogoResponse,
)
from stock_backend.services.logo_service import LogoDetectionService
from stock_backend.utils.logger import create_logger

logger = create_logger(__name__)
router = APIRouter(prefix="/v1/logo", tags=["Logo Detection"])


@router.post(
    "/detect",
    response_model=List[DetectedLogoResponse],
    summary="Detect company logos in an uploaded image",
    responses={400: {"description": "Missing, empty or oversized image."}, 502: {"description": "Vision API failure."}},
)
async def detect_logos(
    image: UploadFile = File(...),
    user_id: int = Depends(get_current_user_id),
    logos: LogoDetectionService = Depends(get_logo_service),
):
    image_data = await image.read()

    try:
        detected = logos.detect_logos(image_data)
    except ValidationError as e:
        logger.warning(f"Invalid logo detection upload: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AnalysisError as e:
        logger.error(f"Logo detection failed: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="logo detection failed")

    return [DetectedLogoResponse(name=logo.name, confidence=logo.confidence) for logo in detected]


@router.post(
    "/analyze",
    response_model=CompanyAnalysisResponse,
    summary="Generate a company analysis",
    responses={400: {"description": "Invalid company name."}, 502: {"description": "Gemini failure."}},
)
def analyze_company(
    body: CompanyAnalysisRequest,
    user_id: int = Depends(get_current_user_id),
    logos: LogoDetectionService = Depends(get_logo_service),
):
    try:
        analysis = logos.analyze_company(body.company_name)
    except ValidationError as e:
        logger.warning(f"Invalid company analysis request: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AnalysisError as e:
        logger.error(f"Company analysis failed for {body.company_name}: {e}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="company analysis failed")

    return CompanyAnalysisResponse(company_name=analysis.company_name, summary=analysis.summary)
