"""Точка входа FastAPI."""
import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from studysphere.api.errors import ApiError
from studysphere.api.routes import router
from studysphere.upstream.rag_client import UpstreamError

logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s %(message)s")
logging.getLogger("studysphere").setLevel(logging.INFO)
logging.getLogger("httpx").setLevel(logging.WARNING)

app = FastAPI(title="StudySphere", description="Summaries, quizzes and Q&A over uploaded PDFs via a RAG API")
app.include_router(router, prefix="", tags=["study"])


@app.exception_handler(ApiError)
def handle_api_error(_request, exc: ApiError):
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_content(),
    )


@app.exception_handler(UpstreamError)
def handle_upstream_error(_request, exc: UpstreamError):
    return JSONResponse(
        status_code=502,
        content={"error": "Upstream RAG API error", "details": str(exc)},
    )


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    # pdf пришёл обычным полем формы, а не файлом
    if any(tuple(err.get("loc", ()))[-1:] == ("pdf",) for err in exc.errors()):
        error = ApiError(400, "No PDF file provided")
        return JSONResponse(status_code=error.status_code, content=error.to_content())
    return await request_validation_exception_handler(request, exc)
