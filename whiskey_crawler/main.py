"""
Whiskey Product Crawler - FastAPI Application
Main entry point with REST API endpoints.
"""
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from whiskey_crawler import __version__
from whiskey_crawler.config import config
from whiskey_crawler.utils.logger import get_logger, set_trace_id
from whiskey_crawler.adapters.fetcher import PageFetcher, is_supported_url
from whiskey_crawler.exceptions import FetchError, UnsupportedURLError
from whiskey_crawler.layers.extraction import ExtractionLayer


# Initialize FastAPI app
app = FastAPI(
    title="Whiskey Product Crawler",
    description="Extracts normalized whiskey product records from shop product pages",
    version=__version__,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize layers
fetcher = PageFetcher()
extraction_layer = ExtractionLayer()

logger = get_logger("main")


# Request/Response models
class CrawlRequest(BaseModel):
    """Request model for crawling a product page by URL."""
    url: str
    debug: bool = False


class ExtractRequest(BaseModel):
    """Request model for extracting from already-fetched HTML."""
    html: str
    url: str
    debug: bool = False


class ExtractionResponse(BaseModel):
    """Response model for both crawl and extract; record is null when nothing was found."""
    url: str
    found: bool
    record: Optional[Dict[str, Any]] = None
    trace_id: str


def _build_response(url: str, html: str, debug: bool, trace_id: str) -> ExtractionResponse:
    record = extraction_layer.extract(html, url, debug=debug)

    logger.info(
        "extraction_response",
        url=url,
        found=record is not None,
        fields_missing=record.get_missing_fields() if record else None,
    )

    return ExtractionResponse(
        url=url,
        found=record is not None,
        record=record.to_document() if record else None,
        trace_id=trace_id,
    )


# API Routes
@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": __version__}


@app.post("/api/crawl", response_model=ExtractionResponse)
async def crawl(request: CrawlRequest):
    """
    Fetch a product page and extract its record.

    Only URLs on supported hosts are accepted.
    """
    trace_id = set_trace_id()

    logger.info("crawl_request", url=request.url, debug=request.debug, trace_id=trace_id)

    if not is_supported_url(request.url):
        raise HTTPException(status_code=400, detail=f"Unsupported URL: {request.url}")

    try:
        page = await fetcher.fetch(request.url)
    except UnsupportedURLError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except FetchError as e:
        logger.error("crawl_fetch_error", error=str(e), url=request.url)
        raise HTTPException(status_code=502, detail=str(e))

    return _build_response(page.url, page.html, request.debug, trace_id)


@app.post("/api/extract", response_model=ExtractionResponse)
async def extract_html(request: ExtractRequest):
    """
    Extract a record from supplied page HTML.

    The URL is attached to the record as provenance and is not fetched.
    """
    trace_id = set_trace_id()

    logger.info("extract_request", url=request.url, html_length=len(request.html), trace_id=trace_id)

    return _build_response(request.url, request.html, request.debug, trace_id)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT)
