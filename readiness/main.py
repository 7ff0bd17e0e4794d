import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import Body, Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .config import Settings, get_settings
from .errors import InvalidInput, ReadinessError
from .llm import NarrativeClient
from .renderer import PdfRenderer
from .report import assemble, render_html, report_filename, templates
from .schemas import AssessmentReport, ErrorResponse, StudentResults
from .scoring import score_assessment

logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)

app = FastAPI(title="Study Abroad Readiness Report", version="0.1.0")
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


def get_narrative_client(settings: Settings = Depends(get_settings)) -> NarrativeClient:
    return NarrativeClient(settings)


def get_renderer(settings: Settings = Depends(get_settings)) -> PdfRenderer:
    return PdfRenderer(settings)


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(
        {
            "error": "RateLimitExceeded",
            "detail": "Rate limit exceeded. Please slow down and try again later.",
        },
        status_code=429,
    )


@app.exception_handler(ReadinessError)
async def readiness_error_handler(request: Request, exc: ReadinessError):
    logger.warning("%s %s failed: %s: %s", request.method, request.url.path, exc.kind, exc.detail)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    problems = []
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        problems.append(f"{'.'.join(loc) or 'body'}: {error.get('msg', 'invalid value')}")
    return await readiness_error_handler(
        request, InvalidInput("Invalid request body: " + "; ".join(problems))
    )


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/score", response_model=AssessmentReport, responses=ERROR_RESPONSES)
async def score(payload: StudentResults):
    """Score quiz results locally, without the language model."""
    return score_assessment(payload)


@app.post("/analyze-results", responses=ERROR_RESPONSES)
@limiter.limit(lambda: get_settings().rate_limit_analyze)
async def analyze_results(
    request: Request,
    payload: StudentResults,
    client: NarrativeClient = Depends(get_narrative_client),
):
    if not payload.user_name.strip():
        raise InvalidInput("Missing user name")
    return await client.analyze(payload)


@app.post("/generate-html", response_class=HTMLResponse, responses=ERROR_RESPONSES)
async def generate_html(request: Request, payload: dict = Body(...)):
    document = assemble(payload)
    return templates.TemplateResponse(request, "report.html", {"report": document})


@app.post("/generate-pdf", responses=ERROR_RESPONSES)
async def generate_pdf(
    payload: dict = Body(...),
    renderer: PdfRenderer = Depends(get_renderer),
):
    document = assemble(payload)
    html = render_html(document)
    logger.info("Generated HTML content length: %d", len(html))

    pdf = await renderer.render(html)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": (
                f'attachment; filename="{report_filename(document.student_name)}"'
            ),
        },
    )
