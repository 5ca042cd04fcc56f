import logging

from fastapi import APIRouter, Depends, Request

from app.dependencies import get_netlify_client, get_producer
from app.errors import InvalidInputError, pipeline_errors
from app.limiter import limiter
from app.models.requests import DeployRequest
from app.models.responses import DeployResponse, ErrorResponse
from app.services.netlify import ArchiveUpload, NetlifyClient
from app.services.packager import pack
from app.services.producer import ContentProducer

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Deploy"])


@router.post(
    "/deploy",
    response_model=DeployResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Deploy an existing web page",
)
@limiter.limit("10/minute")
async def deploy_url(
    request: Request,
    body: DeployRequest,
    producer: ContentProducer = Depends(get_producer),
    netlify: NetlifyClient = Depends(get_netlify_client),
) -> DeployResponse:
    """Fetch *url* verbatim, zip it as ``index.html`` and upload the archive.

    Without a configured site id Netlify creates a new site for the archive.
    """
    if not body.url:
        raise InvalidInputError("Missing 'url' in request body.")

    url = body.url
    logger.info("Deploy request received", extra={"url": url})

    with pipeline_errors("Deployment failed"):
        html = await producer.from_url(url)
        archive = pack("index.html", html)
        result = await netlify.deploy(ArchiveUpload(archive))

    return DeployResponse(
        message="Deployment success!",
        netlify_data=result.raw,
        preview_url=result.preview_url,
        site_url=result.site_url,
    )
