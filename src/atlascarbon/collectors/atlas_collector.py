# src/atlascarbon/collectors/atlas_collector.py
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from ..core.config import config
from ..core.exceptions import TelemetryFetchFailure
from ..models.atlas import Cluster, MeasurementSet, MeasurementWindow, Project
from ..utils.http_client import get_async_http_client
from .base_collector import BaseCollector

logger = logging.getLogger(__name__)


class AtlasCollector(BaseCollector):
    """
    Collects projects, clusters and process measurements from the MongoDB
    Atlas Admin API (v1.0), authenticating with an API key pair over HTTP
    digest.

    Every failure (transport error, non-2xx status, or a payload carrying an
    `error` field) is raised as TelemetryFetchFailure.
    """

    def __init__(
        self,
        public_key: Optional[str] = None,
        private_key: Optional[str] = None,
        base_url: Optional[str] = None,
        window: Optional[MeasurementWindow] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.base_url = (base_url or config.ATLAS_BASE_URL).rstrip("/")
        self.window = window or MeasurementWindow(
            granularity=config.MEASUREMENT_GRANULARITY,
            period=config.MEASUREMENT_PERIOD,
        )
        self.items_per_page = config.ATLAS_ITEMS_PER_PAGE

        public_key = public_key if public_key is not None else config.ATLAS_PUBLIC_KEY
        private_key = private_key if private_key is not None else config.ATLAS_PRIVATE_KEY
        auth = None
        if public_key and private_key:
            auth = httpx.DigestAuth(public_key, private_key)
        else:
            logger.warning("Atlas API keys are not configured; requests will be unauthenticated.")

        self._owns_client = client is None
        self._client = client or get_async_http_client(auth=auth, verify=config.ATLAS_VERIFY_CERTS)

    async def close(self):
        if self._owns_client:
            await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("Fetching data from %s", url)

        try:
            resp = await self._client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise TelemetryFetchFailure(f"Request to {url} failed: {exc}") from exc

        try:
            payload = resp.json()
        except ValueError:
            logger.debug("Raw response content from %s: %s", url, resp.text[:500])
            payload = None

        if isinstance(payload, dict) and "error" in payload:
            detail = payload.get("detail") or payload.get("reason")
            raise TelemetryFetchFailure(
                f"Atlas API error {payload.get('error')} for {url}: {detail}",
                status_code=resp.status_code,
                detail=detail,
            )
        if resp.is_error:
            raise TelemetryFetchFailure(
                f"Atlas API returned HTTP {resp.status_code} for {url}",
                status_code=resp.status_code,
            )
        if payload is None:
            raise TelemetryFetchFailure(
                f"Atlas API returned a non-JSON response for {url}", status_code=resp.status_code
            )

        logger.debug("Received response from %s", url)
        return payload

    async def _get_all(self, path: str) -> List[Dict[str, Any]]:
        """Follows the `next` links of a paginated list endpoint."""
        items: List[Dict[str, Any]] = []
        page_num = 1
        while True:
            payload = await self._get(path, params={"itemsPerPage": self.items_per_page, "pageNum": page_num})
            if isinstance(payload, list):
                return payload
            if "results" not in payload:
                return [payload]

            page = payload.get("results") or []
            items.extend(page)

            has_next = any(link.get("rel") == "next" for link in payload.get("links") or [])
            total = payload.get("totalCount")
            if not page or not has_next or (total is not None and len(items) >= total):
                return items
            page_num += 1

    @staticmethod
    def _parse(model, item: Dict[str, Any], what: str):
        try:
            return model.model_validate(item)
        except ValidationError as e:
            raise TelemetryFetchFailure(f"Unexpected {what} payload from Atlas: {e}") from e

    async def list_projects(self) -> List[Project]:
        logger.info("Fetching Atlas projects...")
        projects = [self._parse(Project, item, "project") for item in await self._get_all("groups")]
        logger.info("Found %d projects", len(projects))
        return projects

    async def list_clusters(self, project_id: str) -> List[Cluster]:
        logger.debug("Fetching clusters for project %s", project_id)
        items = await self._get_all(f"groups/{project_id}/clusters")
        clusters = [self._parse(Cluster, item, "cluster") for item in items]
        logger.debug("Found %d clusters", len(clusters))
        return clusters

    async def list_measurements(self, project_id: str, process_id: str) -> MeasurementSet:
        logger.debug("Fetching measurements for process %s", process_id)
        payload = await self._get(
            f"groups/{project_id}/processes/{process_id}/measurements",
            params=self.window.as_params(),
        )
        return self._parse(MeasurementSet, payload, "measurements")
