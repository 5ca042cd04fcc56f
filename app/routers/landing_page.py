"""Landing-page endpoints: render a PageSpec (given directly or produced by the
language model from free text) and deploy it as an inline ``/index.html``."""

import logging

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_netlify_client, get_producer
from app.errors import InvalidInputError, pipeline_errors
from app.limiter import limiter
from app.models.page_spec import PageSpec
from app.models.requests import NaturalLanguageRequest
from app.models.responses import ErrorResponse, LandingPageResponse
from app.services.netlify import InlineFileUpload, NetlifyClient
from app.services.producer import ContentProducer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Landing pages"])

_ERROR_RESPONSES = {400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}


@router.post(
    "/generate-landing-page",
    response_model=LandingPageResponse,
    responses=_ERROR_RESPONSES,
    summary="Render a landing page from structured data and deploy it",
)
@limiter.limit("10/minute")
async def generate_landing_page(
    request: Request,
    spec: PageSpec,
    producer: ContentProducer = Depends(get_producer),
    netlify: NetlifyClient = Depends(get_netlify_client),
) -> LandingPageResponse:
    logger.info("Landing page request received", extra={"subject": spec.subject.name})

    with pipeline_errors("Something went wrong"):
        html = producer.from_spec(spec)
        result = await netlify.deploy(InlineFileUpload.for_index(html))

    return LandingPageResponse(success=True, netlify_url=result.preview_url)


@router.post(
    "/nl-generate-landing-page",
    response_model=LandingPageResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate a landing page from a natural-language description and deploy it",
)
@limiter.limit("5/minute")
async def nl_generate_landing_page(
    request: Request,
    body: NaturalLanguageRequest,
    producer: ContentProducer = Depends(get_producer),
    netlify: NetlifyClient = Depends(get_netlify_client),
) -> LandingPageResponse:
    """Ask the language model to structure ``textPrompt``, then render and deploy.

    A model reply that is not valid JSON yields a 500 whose ``raw`` field
    holds the unparsed reply.
    """
    if not body.text_prompt or not body.text_prompt.strip():
        raise InvalidInputError('Missing "textPrompt" field')

    logger.info("Natural-language request received", extra={"prompt_chars": len(body.text_prompt)})

    with pipeline_errors("Error processing natural language prompt"):
        html = await producer.from_text(body.text_prompt)
        result = await netlify.deploy(InlineFileUpload.for_index(html))

    return LandingPageResponse(success=True, netlify_url=result.preview_url)
