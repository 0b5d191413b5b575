from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response

from beacon_app.config import settings
from beacon_app.dependencies import get_client_ip, get_metric_aggregator
from beacon_app.schemas.beacon import render_jsonp
from beacon_app.services.hit_decomposer import decompose_hit
from beacon_app.services.metric_aggregator import MetricAggregator

router = APIRouter(tags=["beacon"])


@router.get("/")
async def count_hit(
    request: Request,
    callback: Optional[str] = Query(None, alias="jsonpCallback"),
    aggregator: MetricAggregator = Depends(get_metric_aggregator)
):
    """
    Count one page view and answer with JSONP.
    
    Flow:
    1. Decompose the request into site, page and client (rejects bad hits)
    2. Update site_uv, site_pv and page_pv concurrently
    3. Return try{<callback>({...})}catch(e){}
    
    Store failures don't fail the request; the affected count is 0.
    """
    hit = decompose_hit(
        referrer=request.headers.get("referer"),
        callback=callback,
        client_id=get_client_ip(request),
        strict_callback=settings.strict_callback,
    )
    
    counts = await aggregator.aggregate(hit)
    
    return Response(
        content=render_jsonp(hit.callback, counts),
        media_type="application/javascript; charset=utf-8"
    )
