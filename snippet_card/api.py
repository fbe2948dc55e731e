"""FastAPI server for the snippet card generator."""

from contextlib import asynccontextmanager
from typing import Iterator, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import settings
from .errors import SnippetCardError, UnexpectedError
from .fonts import load_fonts
from .pipeline import SnippetCardGenerator
from .utils import get_logger, setup_logging

logger = get_logger(__name__)


class GenerateRequest(BaseModel):
    """Body of ``POST /api/generate``."""

    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    include_author: bool = Field(default=True, alias="includeAuthor")
    include_date: bool = Field(default=True, alias="includeDate")


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(level=settings.log_level)
    # Fail startup, not the first request, when fonts are missing
    load_fonts()
    logger.info("Snippet card API ready")
    yield


app = FastAPI(
    title="Snippet Card API",
    description="Turns news article URLs into shareable snippet card images",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


def get_generator() -> Iterator[SnippetCardGenerator]:
    """A fresh generator per request; its HTTP session is closed afterwards."""
    generator = SnippetCardGenerator()
    try:
        yield generator
    finally:
        generator.fetcher.close()


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    logger.warning(f"Rejected generate request: {errors}")
    # A missing or unparseable body also means there is no URL
    url_failed = any(error["loc"] and error["loc"][-1] in ("url", "body") for error in errors)
    message = "URL is required" if url_failed else "Invalid request body"
    return JSONResponse(status_code=400, content={"error": message})


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.post("/api/generate")
def generate(
    body: GenerateRequest,
    generator: SnippetCardGenerator = Depends(get_generator),
) -> JSONResponse:
    """Generate a snippet card for the posted article URL."""
    try:
        result = generator.generate(
            body.url,
            include_author=body.include_author,
            include_date=body.include_date,
        )
    except SnippetCardError as e:
        logger.warning(f"Card generation failed ({e.status_code}): {e.message}")
        return JSONResponse(status_code=e.status_code, content=e.to_dict())
    except Exception:
        logger.exception("Unexpected error generating card")
        error = UnexpectedError()
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    return JSONResponse(content=result.to_response())


def run() -> None:
    """Serve the API with uvicorn."""
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
