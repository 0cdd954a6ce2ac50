"""Solicitation document downloads.

Only HTTPS URLs on allow-listed hosts are fetched. Downloads run with a small
fixed fan-out and each result lands in its own slot keyed by document id.
Redirects are followed only to allow-listed URLs. Transport errors are
retried; HTTP errors and policy rejections are not.
"""

import asyncio
from typing import Optional, Sequence
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from proposal_engine.config.settings import Settings, get_settings
from proposal_engine.enrichment.pdf_text import extract_pdf_text
from proposal_engine.errors import DocumentFetchError, EnrichmentError
from proposal_engine.models.enrichment import DocumentFetchResult, DocumentInfo

logger = structlog.get_logger(__name__)

USER_AGENT = "rfq-proposal-engine/0.1"
MAX_REDIRECTS = 5


def is_allowed_url(url: str, allowed_hosts: Sequence[str]) -> bool:
    """True for https URLs whose host is, or is a subdomain of, an allowed host."""
    try:
        parsed = urlparse(url)
    except ValueError:
        return False

    if parsed.scheme != "https" or not parsed.hostname:
        return False

    host = parsed.hostname.lower()
    return any(host == allowed or host.endswith("." + allowed) for allowed in allowed_hosts)


def _declared_length(response: httpx.Response) -> int:
    """Content-Length as sent; malformed values count as unknown."""
    try:
        return int(response.headers.get("content-length") or 0)
    except ValueError:
        return 0


def _is_pdf(document: DocumentInfo, content_type: str) -> bool:
    return "pdf" in content_type or document.filename.lower().endswith(".pdf")


def _is_text(document: DocumentInfo, content_type: str) -> bool:
    return "text" in content_type or document.filename.lower().endswith((".txt", ".md"))


class DocumentFetcher:
    """Downloads documents and converts them to text.

    Args:
        settings: Limits and allow-list; defaults to the cached settings.
        transport: Optional httpx transport, e.g. ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.settings.document_fetch_timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=False,
            transport=self.transport,
        )

    async def fetch_documents(
        self, documents: Sequence[DocumentInfo]
    ) -> dict[str, DocumentFetchResult]:
        """Fetch all documents; returns id -> result in input order."""
        semaphore = asyncio.Semaphore(self.settings.document_fetch_concurrency)
        logger.info("document_fetch_start", documents=len(documents))

        async with self._client() as client:

            async def fetch_one(document: DocumentInfo) -> tuple[str, DocumentFetchResult]:
                async with semaphore:
                    return document.id, await self.fetch_document(client, document)

            pairs = await asyncio.gather(*(fetch_one(d) for d in documents))

        results = dict(pairs)
        logger.info(
            "document_fetch_complete",
            documents=len(documents),
            succeeded=sum(1 for r in results.values() if r.success),
        )
        return results

    async def fetch_document(
        self, client: httpx.AsyncClient, document: DocumentInfo
    ) -> DocumentFetchResult:
        """Fetch one document; failures are returned, never raised."""
        try:
            return await self._fetch(client, document)
        except EnrichmentError as e:
            logger.warning("document_fetch_rejected", document=document.filename, error=str(e))
            return DocumentFetchResult(success=False, error=str(e))
        except httpx.HTTPError as e:
            logger.warning("document_fetch_failed", document=document.filename, error=str(e))
            return DocumentFetchResult(success=False, error=f"{type(e).__name__}: {e}")
        except Exception as e:
            logger.exception("document_fetch_error", document=document.filename)
            return DocumentFetchResult(success=False, error=f"{type(e).__name__}: {e}")

    async def _fetch(self, client: httpx.AsyncClient, document: DocumentInfo) -> DocumentFetchResult:
        if not is_allowed_url(document.url, self.settings.document_allowed_hosts):
            raise DocumentFetchError(f"Invalid or unsafe URL: {document.url}", document.id)

        retrying = AsyncRetrying(
            retry=retry_if_exception_type(httpx.TransportError),
            stop=stop_after_attempt(self.settings.document_fetch_attempts),
            wait=wait_exponential(multiplier=self.settings.document_fetch_backoff, max=10),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                content_type, data = await self._download(client, document)

        if _is_pdf(document, content_type):
            text, pages = extract_pdf_text(data, source=document.filename)
            return DocumentFetchResult(
                success=True,
                content=text,
                size_bytes=len(data),
                content_type="pdf",
                pages=pages,
            )

        if _is_text(document, content_type):
            return DocumentFetchResult(
                success=True,
                content=data.decode("utf-8", errors="replace"),
                size_bytes=len(data),
                content_type="text",
            )

        raise DocumentFetchError(
            f"Unsupported content type '{content_type or 'unknown'}' for {document.filename}",
            document.id,
        )

    async def _download(self, client: httpx.AsyncClient, document: DocumentInfo) -> tuple[str, bytes]:
        url = httpx.URL(document.url)

        # Redirects are followed by hand so every hop passes the allow-list
        for _ in range(MAX_REDIRECTS + 1):
            async with client.stream("GET", url) as response:
                if response.is_redirect:
                    url = self._redirect_target(response, document)
                    continue
                return await self._read_body(response, document)

        raise DocumentFetchError(f"Too many redirects for {document.url}", document.id)

    def _redirect_target(self, response: httpx.Response, document: DocumentInfo) -> httpx.URL:
        target = response.url.join(response.headers["location"])
        if not is_allowed_url(str(target), self.settings.document_allowed_hosts):
            raise DocumentFetchError(f"Redirect to disallowed URL: {target}", document.id)
        logger.debug("document_redirect", document=document.filename, location=str(target))
        return target

    async def _read_body(self, response: httpx.Response, document: DocumentInfo) -> tuple[str, bytes]:
        limit = self.settings.document_max_bytes
        limit_mb = limit // (1024 * 1024)

        if response.status_code >= 400:
            raise DocumentFetchError(
                f"Failed to fetch document: {response.status_code} {response.reason_phrase}",
                document.id,
            )

        if _declared_length(response) > limit:
            raise DocumentFetchError(f"Document too large (max {limit_mb}MB)", document.id)

        chunks = []
        received = 0
        async for chunk in response.aiter_bytes():
            received += len(chunk)
            if received > limit:
                raise DocumentFetchError(f"Document too large (max {limit_mb}MB)", document.id)
            chunks.append(chunk)

        content_type = response.headers.get("content-type", "").lower()
        logger.debug("document_downloaded", document=document.filename, size_bytes=received)
        return content_type, b"".join(chunks)
