"""
Single-shot HTTP client for JSON, multipart and binary endpoints.

Every request either returns one complete ``HttpResponse`` or raises exactly
one ``VeniceError``.
"""

from __future__ import annotations

import json
import time
from dataclasses import replace
from typing import Any

import httpx

from ..events import ErrorEvent, RequestEvent, ResponseEvent, notify
from ..exceptions import (
    VeniceAPIError,
    VeniceCancelledError,
    VeniceError,
    VeniceValidationError,
)
from ..logging_utils import elapsed_ms, operation_context
from ..models import HttpMethod, HttpResponse, RequestOptions, ResponseType
from ..rate_limiting.models import RateLimitInfo
from .base import BaseHttpClient
from .middleware import (
    ErrorContext,
    MiddlewareManager,
    RequestContext,
    ResponseContext,
)


def build_envelope(response: httpx.Response, data: Any) -> HttpResponse[Any]:
    """Build the response envelope from an already-read response."""
    headers = {name.lower(): value for name, value in response.headers.items()}
    rate_limit = (
        RateLimitInfo.from_headers(headers)
        if RateLimitInfo.present_in(headers)
        else None
    )
    return HttpResponse(
        status=response.status_code,
        status_text=response.reason_phrase,
        headers=headers,
        data=data,
        rate_limit=rate_limit,
    )


class StandardHttpClient(BaseHttpClient):
    """
    Rate-limited request pipeline with middleware.

    Features:
    - Per-request headers merged over a dispatch-time snapshot of the defaults
    - JSON bodies, or multipart bodies when a ``MultipartForm`` is given
    - Transport wrapped in the shared rate limiter
    - Typed errors for every failure
    """

    def __init__(
        self,
        *args: Any,
        middleware: MiddlewareManager | None = None,
        **kwargs: Any,
    ):
        super().__init__(*args, **kwargs)
        self.middleware = (
            middleware if middleware is not None else MiddlewareManager()
        )

    async def request(
        self, path: str, options: RequestOptions | None = None
    ) -> HttpResponse[Any]:
        """
        Send one request through middleware, the rate limiter and the transport.

        Args:
            path: Path relative to the API base URL
            options: Method, headers, body and other per-request settings

        Returns:
            The response envelope

        Raises:
            VeniceError: Exactly one typed error for any failure
        """
        options = options or RequestOptions()
        if options.response_type is ResponseType.STREAM:
            raise VeniceValidationError(
                "Streaming responses are served by StreamingHttpClient",
                details={"response_type": "stream is not supported here"},
            )

        start_time = time.perf_counter()
        started_at = time.time()
        options = replace(
            options, headers=self.merge_headers(self.get_headers(), options.headers)
        )

        context = await self.middleware.run_request(
            RequestContext(path=path, options=options, timestamp=started_at)
        )
        path, options = context.path, context.options
        method = options.method.value
        notify(self.observer, "on_request", RequestEvent(method=method, path=path))

        try:
            if context.response is not None:
                response = context.response
            else:
                request = self._build_request(path, options)
                response = await self.rate_limiter.add(
                    lambda: self._send(request, options)
                )
        except VeniceError as e:
            duration = elapsed_ms(start_time)
            notify(
                self.observer,
                "on_error",
                ErrorEvent(method=method, path=path, error=e, duration_ms=duration),
            )
            recovered = await self.middleware.run_error(
                ErrorContext(
                    path=path,
                    options=options,
                    error=e,
                    timestamp=started_at,
                    duration_ms=duration,
                    metadata=context.metadata,
                )
            )
            if recovered is None:
                raise
            response = recovered

        duration = elapsed_ms(start_time)
        response_context = await self.middleware.run_response(
            ResponseContext(
                path=path,
                options=options,
                response=response,
                timestamp=started_at,
                duration_ms=duration,
                metadata=context.metadata,
            )
        )
        notify(
            self.observer,
            "on_response",
            ResponseEvent(
                method=method,
                path=path,
                status=response_context.response.status,
                duration_ms=duration,
            ),
        )
        return response_context.response

    async def get(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        options: RequestOptions | None = None,
    ) -> HttpResponse[Any]:
        options = replace(options or RequestOptions(), method=HttpMethod.GET)
        if query is not None:
            options.query = query
        return await self.request(path, options)

    async def post(
        self, path: str, body: Any = None, options: RequestOptions | None = None
    ) -> HttpResponse[Any]:
        options = replace(
            options or RequestOptions(), method=HttpMethod.POST, body=body
        )
        return await self.request(path, options)

    async def patch(
        self, path: str, body: Any = None, options: RequestOptions | None = None
    ) -> HttpResponse[Any]:
        options = replace(
            options or RequestOptions(), method=HttpMethod.PATCH, body=body
        )
        return await self.request(path, options)

    async def delete(
        self,
        path: str,
        query: dict[str, Any] | None = None,
        options: RequestOptions | None = None,
    ) -> HttpResponse[Any]:
        options = replace(options or RequestOptions(), method=HttpMethod.DELETE)
        if query is not None:
            options.query = query
        return await self.request(path, options)

    def _build_request(self, path: str, options: RequestOptions) -> httpx.Request:
        headers = dict(options.headers)
        content: dict[str, Any] = {}

        if options.is_multipart:
            # httpx writes the multipart Content-Type with its boundary
            headers = {
                name: value
                for name, value in headers.items()
                if name.lower() != "content-type"
            }
            content["data"] = dict(options.body.fields)
            content["files"] = dict(options.body.files)
        elif options.body is not None:
            content["json"] = options.body

        params = None
        if options.query:
            params = {k: v for k, v in options.query.items() if v is not None}

        try:
            return self.http_client.build_request(
                options.method.value,
                self.build_url(path),
                headers=headers,
                params=params,
                timeout=(
                    options.timeout if options.timeout is not None else self.timeout
                ),
                **content,
            )
        except (TypeError, ValueError, httpx.InvalidURL) as e:
            raise self.error_handler.factory.validation_error(
                f"Could not build request: {e}",
                details={"path": path, "error_type": type(e).__name__},
            ) from e

    async def _send(
        self, request: httpx.Request, options: RequestOptions
    ) -> HttpResponse[Any]:
        async with operation_context(
            "http_request",
            context={"method": request.method, "url": str(request.url)},
        ) as log:
            log.debug("Sending request", multipart=options.is_multipart)

            try:
                response = await self.run_cancellable(
                    self.http_client.send(request), options.cancel_event
                )
            except VeniceCancelledError:
                raise
            except (httpx.TransportError, OSError, TimeoutError) as e:
                self.error_handler.handle_request_error(e)

            await self.error_handler.handle_response_error(response)
            data = self._decode_body(response, options.response_type)
            return build_envelope(response, data)

    @staticmethod
    def _decode_body(response: httpx.Response, response_type: ResponseType) -> Any:
        if response_type is ResponseType.ARRAYBUFFER:
            return response.content
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise VeniceAPIError(
                f"Invalid JSON in response body: {e}", response.status_code
            ) from e
