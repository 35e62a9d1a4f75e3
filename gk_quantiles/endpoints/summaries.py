import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, HTTPException, Query, Response
from pydantic import BaseModel, Field, FiniteFloat

from gk_quantiles.exceptions import ConfigurationError, EmptySummaryError, InvalidArgumentError
from gk_quantiles.service.exceptions import SummaryExistsError, SummaryNotFoundError
from gk_quantiles.service.summary_registry import SummaryRegistry, get_shared_summary_registry

router = APIRouter()
logger = logging.getLogger(__name__)


def get_registry() -> SummaryRegistry:
    """Get the shared summary registry instance."""
    return get_shared_summary_registry()


class CreateSummaryRequest(BaseModel):
    name: str = Field(min_length=1)
    epsilon: Optional[float] = Field(default=None, description="Error factor in (0, 1); service default if omitted")


class ObservationsRequest(BaseModel):
    # NaN has no order and would unsort the summary
    values: List[FiniteFloat]


class MergeRequest(BaseModel):
    target: str = Field(min_length=1)
    sources: List[str]
    epsilon: Optional[float] = None


class SummaryDescription(BaseModel):
    name: str
    epsilon: float
    n: int
    size: int
    min: Optional[float] = None
    max: Optional[float] = None


def _to_http_exception(operation: str, e: Exception) -> HTTPException:
    if isinstance(e, SummaryNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, EmptySummaryError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, (ConfigurationError, InvalidArgumentError, SummaryExistsError)):
        return HTTPException(status_code=400, detail=str(e))

    logger.error(f"Error during {operation}: {str(e)}")
    return HTTPException(status_code=500, detail=f"Error during {operation}: {str(e)}")


@router.get("/summaries/definition")
async def get_summary_definition() -> Dict[str, str]:
    """Provide a general definition of the quantile summaries."""
    description = """A Greenwald–Khanna quantile summary keeps a bounded number of
    (value, g, delta) entries from a stream of observations. A query for the phi-quantile
    returns a value whose rank is within epsilon * n of phi * n, where n is the number of
    observations. Summaries built separately can be merged, in which case the merged
    summary carries the largest epsilon of its inputs."""
    return {"name": "Greenwald-Khanna Quantile Summary", "description": description}


@router.get("/summaries")
async def list_summaries() -> Dict[str, List[str]]:
    return {"summaries": get_registry().names()}


@router.post("/summaries", status_code=201, response_model=SummaryDescription)
async def create_summary(request: CreateSummaryRequest) -> Dict[str, Any]:
    """Register a new empty summary."""
    registry = get_registry()
    try:
        registry.create(request.name, request.epsilon)
        return registry.describe(request.name)
    except Exception as e:
        raise _to_http_exception("summary creation", e)


@router.get("/summaries/{name}", response_model=SummaryDescription)
async def describe_summary(name: str) -> Dict[str, Any]:
    try:
        return get_registry().describe(name)
    except Exception as e:
        raise _to_http_exception("summary lookup", e)


@router.post("/summaries/{name}/observations", response_model=SummaryDescription)
async def insert_observations(name: str, request: ObservationsRequest) -> Dict[str, Any]:
    """Insert a batch of observations into a summary."""
    try:
        logger.debug(f"Inserting {len(request.values)} observations into {name}")
        return get_registry().insert(name, request.values)
    except Exception as e:
        raise _to_http_exception("observation insert", e)


@router.get("/summaries/{name}/quantiles")
async def get_quantiles(name: str, phi: List[float] = Query(default=[0.5])) -> Dict[str, Any]:
    """Approximate the requested quantiles of a summary."""
    try:
        values = get_registry().quantiles(name, phi)
        return {"name": name, "quantiles": {str(p): v for p, v in values.items()}}
    except Exception as e:
        raise _to_http_exception("quantile query", e)


@router.get("/summaries/{name}/rank")
async def get_rank(name: str, value: FiniteFloat) -> Dict[str, Any]:
    """Estimate the rank and CDF of a value."""
    try:
        result = get_registry().rank(name, value)
        return {"name": name, "value": value, **result}
    except Exception as e:
        raise _to_http_exception("rank query", e)


@router.post("/summaries/merge", response_model=SummaryDescription)
async def merge_summaries(request: MergeRequest) -> Dict[str, Any]:
    """Merge source summaries into a target summary, leaving the sources untouched."""
    try:
        return get_registry().merge(request.target, request.sources, request.epsilon)
    except Exception as e:
        raise _to_http_exception("summary merge", e)


@router.delete("/summaries/{name}", status_code=204)
async def delete_summary(name: str) -> Response:
    try:
        get_registry().delete(name)
    except Exception as e:
        raise _to_http_exception("summary deletion", e)
    return Response(status_code=204)
