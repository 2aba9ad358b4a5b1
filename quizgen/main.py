import logging
from typing import Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from quizgen.config import load_settings
from quizgen.models import ErrorResponse, QuizRequest, QuizResponse
from quizgen.providers import create_provider
from quizgen.services import InvalidRequest, ProviderCallFailure, QuizBatchGenerator

settings = load_settings()

logging.basicConfig(
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    level=getattr(logging, settings.log_level, logging.INFO)
)
logger = logging.getLogger(__name__)

REQUIRED_FIELDS_ERROR = "Topic and number of questions are required"
INVALID_BODY_ERROR = "Invalid request body"
REQUIRED_FIELDS = {"topic", "numQuestions"}

app = FastAPI(
    title="Quiz Generator API",
    description="Generate AI-powered multiple choice quiz questions in batches",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.generator = None


@app.on_event("startup")
async def startup_event():
    try:
        provider = create_provider(settings)
    except Exception as e:
        # Keep serving /api/health; quiz requests report the problem as a 500.
        logger.error(f"Could not initialize completion provider: {e}")
        return

    app.state.generator = QuizBatchGenerator(
        provider,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        parse_fallback=settings.parse_fallback,
    )


def get_generator(request: Request) -> Optional[QuizBatchGenerator]:
    return request.app.state.generator


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning(f"Rejected request body: {errors}")
    if errors and all(REQUIRED_FIELDS & set(map(str, error.get("loc", ()))) for error in errors):
        message = REQUIRED_FIELDS_ERROR
    else:
        message = INVALID_BODY_ERROR
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/")
async def root():
    return {
        "message": "Quiz Generator API",
        "status": "running",
        "endpoints": {
            "generate_quiz": "/api/generate-quiz",
            "health": "/api/health"
        }
    }


@app.get("/api/health")
async def health():
    return {"status": "OK", "message": "Server is running"}


@app.post(
    "/api/generate-quiz",
    response_model=QuizResponse,
    response_model_by_alias=True,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_quiz(
    request: QuizRequest,
    generator: Optional[QuizBatchGenerator] = Depends(get_generator)
):
    """
    Generate one batch of quiz questions

    - **topic**: Subject for the quiz (e.g., "React", "graphs")
    - **numQuestions**: Questions wanted; at most 10 are generated per batch
    - **batch**: 1-based batch number, controls question IDs
    - **totalQuestions**: Size of the whole quiz, used for hasMoreBatches
    """
    try:
        if generator is None:
            raise ProviderCallFailure("Completion provider is not configured")
        return await generator.generate(
            topic=request.topic,
            num_questions=request.num_questions,
            batch=request.batch,
            total_questions=request.total_questions,
        )
    except InvalidRequest as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"Error generating quiz questions: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to generate quiz questions", "details": str(e)},
        )


def run():
    import uvicorn
    logger.info(f"Server running on port {settings.port}")
    logger.info(f"Quiz API available at http://localhost:{settings.port}/api/generate-quiz")
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
