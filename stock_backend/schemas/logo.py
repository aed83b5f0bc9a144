from pydantic import BaseModel, Field


class DetectedLogoResponse(BaseModel):
    name: str
    confidence: float = Field(..., description="Detection score between 0.0 and 1.0.")


class CompanyAnalysisRequest(BaseModel):
    company_name: str = Field(..., min_length=1, description="Company to analyze.")


class CompanyAnalysisResponse(BaseModel):
    company_name: str
    summary: str
