"""
FastAPI application for the GETS Readiness Analyzer.

Provides REST API endpoints for:
- Health check
- GETS catalogue and rule listing
- Readiness analysis of JSON rows or an uploaded CSV/JSON file
"""

from typing import Optional

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from .config import logger, API_HOST, API_PORT, MAX_UPLOAD_SIZE_MB
from .gets_schema import GETS_SCHEMA, GETS_VERSION
from .loader import RowLoadError, parse_rows
from .report import analyze_rows
from .rules import VALIDATION_RULES
from .schemas import AnalyzeRequest, Questionnaire


# ============================================================================
# FastAPI App Configuration
# ============================================================================

app = FastAPI(
    title="GETS Readiness API",
    description="""
    GETS e-invoicing readiness analysis API.

    Scores a batch of invoice records on how ready they are for the GETS
    data format.

    ## Scores

    - **Data** (25%): populated and plausibly typed fields
    - **Coverage** (35%): GETS fields found in the data
    - **Rules** (30%): business rules passed
    - **Posture** (10%): self-reported integration capabilities
    """,
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================================
# Response Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    version: str


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check() -> HealthResponse:
    """
    Health check endpoint.

    Returns the service status and version information.
    """
    from . import __version__
    return HealthResponse(status="ok", version=__version__)


@app.get("/schema", tags=["System"])
async def get_schema():
    """List the GETS fields coverage is measured against."""
    return {
        "version": GETS_VERSION,
        "fields": [field.model_dump(mode="json") for field in GETS_SCHEMA],
    }


@app.get("/rules", tags=["System"])
async def list_rules():
    """List the business rules applied to every upload, in reporting order."""
    return {
        "total_rules": len(VALIDATION_RULES),
        "rules": [
            {"name": rule.name.value, "description": rule.description}
            for rule in VALIDATION_RULES
        ],
    }


@app.post("/analyze", tags=["Analysis"], summary="Analyse invoice rows")
async def analyze(request: AnalyzeRequest):
    """
    Analyse parsed invoice rows for GETS readiness.

    Returns scores, field coverage, rule findings and the list of gaps.
    """
    if not request.rows:
        raise HTTPException(status_code=400, detail="No data to analyze")

    logger.info(f"Received analysis request for {len(request.rows)} rows")
    report = analyze_rows(
        request.rows,
        request.questionnaire,
        country=request.country,
        erp=request.erp,
    )
    return report.to_json_dict()


@app.post("/analyze-file", tags=["Analysis"], summary="Analyse an uploaded export")
async def analyze_file(
    file: UploadFile = File(..., description="CSV or JSON invoice export"),
    webhooks: bool = Form(False),
    sandbox_env: bool = Form(False),
    retries: bool = Form(False),
    country: Optional[str] = Form(None),
    erp: Optional[str] = Form(None),
):
    """
    Parse an uploaded CSV or JSON export and analyse it.

    **Limitations:**
    - Maximum file size: MAX_UPLOAD_SIZE_MB (5MB by default)
    - Only the first 200 rows are analysed
    """
    content = await file.read()
    if len(content) > MAX_UPLOAD_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Maximum size is {MAX_UPLOAD_SIZE_MB}MB.",
        )

    try:
        rows = parse_rows(content.decode("utf-8-sig"), file.filename)
    except (RowLoadError, UnicodeDecodeError) as e:
        logger.error(f"Failed to parse {file.filename}: {e}")
        raise HTTPException(status_code=400, detail=f"Failed to process upload: {e}")

    if not rows:
        raise HTTPException(status_code=400, detail="No data to analyze")

    questionnaire = Questionnaire(webhooks=webhooks, sandbox_env=sandbox_env, retries=retries)
    report = analyze_rows(rows, questionnaire, country=country, erp=erp)
    return report.to_json_dict()


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(Exception)
async def generic_exception_handler(request, exc):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )


# ============================================================================
# Main Entry Point
# ============================================================================

def run_server():
    """Run the API server using uvicorn."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)


if __name__ == "__main__":
    run_server()
