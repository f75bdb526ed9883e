"""Remote fetch adapter: turns a URL into an input file under a tool's policy."""

import mimetypes
from typing import Optional

import httpx

from .exceptions import NetworkFailedError, RemoteTooLargeError, RemoteTypeMismatchError
from .models import ConversionPolicy, InputFile, normalize_media_type
from .observability import LogContext
from .protocols import LoggerProtocol
from .validation import format_size_limit, media_type_matches

# Extensions mimetypes does not know on every platform.
EXTRA_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/jpg": ".jpg",
    "image/webp": ".webp",
    "image/avif": ".avif",
    "image/heic": ".heic",
    "image/heif": ".heif",
    "image/svg+xml": ".svg",
    "image/x-icon": ".ico",
    "application/json": ".json",
    "text/plain": ".txt",
}

DEFAULT_TIMEOUT = 15.0


def extension_for(media_type: str) -> str:
    """Best-effort file extension for a media type, ``.bin`` when unknown."""
    media_type = normalize_media_type(media_type)
    if media_type in EXTRA_EXTENSIONS:
        return EXTRA_EXTENSIONS[media_type]
    return mimetypes.guess_extension(media_type) or ".bin"


class RemoteFetchAdapter:
    """
    Fetch a URL and hand back an ``InputFile`` that obeys the same policy as
    local uploads.

    Redirects are not followed. Only this call carries a timeout; local
    conversions never do.
    """

    def __init__(
        self,
        logger: LoggerProtocol,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._logger = logger
        self._client = client
        self._timeout = timeout

    async def fetch(self, url: str, policy: ConversionPolicy) -> InputFile:
        """
        Download ``url`` and verify its type and size.

        Raises:
            NetworkFailedError: Transport error, timeout or non-2xx status
            RemoteTypeMismatchError: Content type not accepted by the policy
            RemoteTooLargeError: Payload larger than the policy allows
        """
        context = LogContext(operation="fetch_url", component="remote_fetch").with_metadata(
            url=url
        )
        self._logger.debug("Fetching remote input", context)

        if self._client is not None:
            return await self._fetch_with(self._client, url, policy, context)

        async with httpx.AsyncClient(
            timeout=self._timeout, follow_redirects=False
        ) as client:
            return await self._fetch_with(client, url, policy, context)

    async def _fetch_with(
        self,
        client: httpx.AsyncClient,
        url: str,
        policy: ConversionPolicy,
        context: LogContext,
    ) -> InputFile:
        limit = policy.max_item_size_bytes
        try:
            async with client.stream(
                "GET", url, timeout=self._timeout, follow_redirects=False
            ) as response:
                if not response.is_success:
                    raise NetworkFailedError(
                        f"Failed to fetch URL (HTTP {response.status_code})"
                    )

                content_type = normalize_media_type(
                    response.headers.get("content-type", "")
                )
                if not media_type_matches(content_type, policy.media_type_patterns):
                    raise RemoteTypeMismatchError(
                        f"URL must point to a {policy.describe_types()} file"
                        f" (got {content_type or 'no content type'})"
                    )

                declared_length = response.headers.get("content-length")
                if declared_length and declared_length.isdigit() and int(declared_length) > limit:
                    raise RemoteTooLargeError(
                        f"Remote file exceeds {format_size_limit(limit)} limit"
                    )

                body = bytearray()
                async for chunk in response.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > limit:
                        raise RemoteTooLargeError(
                            f"Remote file exceeds {format_size_limit(limit)} limit"
                        )
        except httpx.TimeoutException as exc:
            self._logger.warning("Remote fetch timed out", context)
            raise NetworkFailedError(f"Timed out fetching {url}") from exc
        except httpx.HTTPError as exc:
            self._logger.warning("Remote fetch failed", context, error=str(exc))
            raise NetworkFailedError(f"Failed to fetch URL: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise NetworkFailedError(f"Invalid URL: {url}") from exc

        self._logger.info("Fetched remote input", context, bytes=len(body))
        return InputFile(
            name=f"from-url{extension_for(content_type)}",
            media_type=content_type,
            data=bytes(body),
        )
