"""Client for the waybill document-merge service."""

from typing import List, Optional

import httpx

from tiktok_proxy.config.constants import MERGE_SERVICE_TIMEOUT
from tiktok_proxy.core.logger import setup_logger

logger = setup_logger(__name__)


class DocumentMergeClient:
    """Merges several shipping-label PDFs into one document.

    ``merge`` never raises: a None result tells the caller to fall back to
    opening the documents one by one.
    """

    def __init__(
        self,
        merge_url: Optional[str] = None,
        api_key: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize merge client.

        Args:
            merge_url: Merge service endpoint (None = disabled)
            api_key: Optional bearer key for the merge service
            client: Optional pre-built AsyncClient
        """
        self.merge_url = merge_url
        self.api_key = api_key
        self.client = client
        self.enabled = bool(merge_url)

        if not self.enabled:
            logger.info("Document merge disabled (no MERGE_SERVICE_URL configured)")

    async def merge(self, document_urls: List[str]) -> Optional[bytes]:
        """
        Merge documents by URL.

        Returns:
            Merged PDF bytes, or None if merging is disabled or failed
        """
        if not self.enabled or not document_urls:
            return None

        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            logger.info(f"Merging {len(document_urls)} documents")
            if self.client is not None:
                response = await self.client.post(
                    self.merge_url, json={"waybillUrls": document_urls}, headers=headers
                )
            else:
                async with httpx.AsyncClient(timeout=MERGE_SERVICE_TIMEOUT) as client:
                    response = await client.post(
                        self.merge_url, json={"waybillUrls": document_urls}, headers=headers
                    )

            response.raise_for_status()

            if not response.content:
                logger.warning("Merge service returned an empty document")
                return None

            logger.info(f"Merged document received ({len(response.content)} bytes)")
            return response.content

        except httpx.HTTPStatusError as e:
            logger.error(f"Merge service HTTP {e.response.status_code}: {e.response.text[:200]}")
            return None
        except httpx.HTTPError as e:
            logger.error(f"Merge service unreachable: {type(e).__name__}: {e}")
            return None
