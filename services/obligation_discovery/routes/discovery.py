"""
Discovery Routes
================

HTTP entry point for obligation discovery.

Version: 0.1.0
"""

import uuid

from fastapi import APIRouter, Depends

from services.obligation_discovery.models import DiscoveryRequest, DiscoveryResult
from services.obligation_discovery.pipeline import ObligationDiscoveryPipeline, get_pipeline
from shared.logging import bind_context, clear_context, get_logger


logger = get_logger(__name__)

router = APIRouter()


@router.post("/scrape", response_model=DiscoveryResult)
async def scrape(
    payload: DiscoveryRequest,
    pipeline: ObligationDiscoveryPipeline = Depends(get_pipeline),
) -> DiscoveryResult:
    """
    Discover licences, permits and registrations for a business.

    Searches ABLIS for the postcode and activity (plus the ANZSIC code and
    any declared controlled substances) and returns the obligations found,
    grouped into local, state, federal and unknown.

    Missing ``postcode`` or ``activityDescription`` is rejected with 400;
    a browser that cannot be started yields 503.
    """
    bind_context(run_id=uuid.uuid4().hex[:12])
    logger.info("discovery_requested", postcode=payload.postcode)
    try:
        return await pipeline.discover(payload)
    finally:
        clear_context()
