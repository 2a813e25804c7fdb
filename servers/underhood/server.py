"""Underhood gateway HTTP server."""

import json
import logging
import logging.handlers
import os
import time
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram, generate_latest

from backends.content_fetcher import AbstractContentFetcher, ZoektContentFetcher
from backends.search import AbstractSearchClient, SearchClientFactory
from core.declarations import DeclarationClassifier
from core.errors import GatewayError, RequestParameterError
from core.filetree import assemble_filetree
from core.limiters import MatchLimiter
from core.models import DecorResponse, SearchFileResult
from core.query import Casing, XrefMode, is_repository_only
from core.snippets import file_snippets
from core.tickets import Ticket
from core.xref import search_xref
from servers.underhood.config import ServerConfig

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Status of every error response. Unusual on purpose, so the client can tell
# gateway errors apart from proxies and the like.
ERROR_STATUS = 418

DEFAULT_NUM_RESULTS = 50


class UTF8JSONResponse(JSONResponse):
    media_type = "application/json; charset=UTF-8"


class TelemetryManager:
    """Telemetry manager for OpenTelemetry tracing."""

    def __init__(self, config: ServerConfig) -> None:
        """Initialize telemetry manager."""
        self.config = config
        self.enabled = config.otel_enabled
        if self.enabled:
            self._setup()

    def _setup(self) -> None:
        """Setup telemetry."""
        provider = TracerProvider()
        provider.add_span_processor(
            SimpleSpanProcessor(
                OTLPSpanExporter(endpoint=f"{self.config.otel_endpoint.rstrip('/')}/v1/traces")
            )
        )
        trace.set_tracer_provider(provider)

    def get_tracer(self, name: str) -> trace.Tracer:
        """Get tracer instance."""
        if self.enabled:
            return trace.get_tracer(name)
        else:
            # Return a no-op tracer when disabled
            return trace.get_tracer(name, tracer_provider=TracerProvider())


def setup_logging(config: ServerConfig) -> None:
    """Divert logs to a rotating file under the log directory, if one is set."""
    if not config.log_dir:
        return
    if not os.path.isdir(config.log_dir):
        raise ValueError(f"{config.log_dir} is not a directory")

    filename = os.path.join(config.log_dir, f"zoekt-underhood.{os.getpid()}.log")
    handler = logging.handlers.TimedRotatingFileHandler(
        filename, when="h", interval=config.log_refresh_hours
    )
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    logger.info(f"Writing logs to {filename}")


def _set_span_attributes(
    span: trace.Span, input_data: Dict[str, Any], output_data: Dict[str, Any]
) -> None:
    """Set span attributes for telemetry."""
    try:
        span.set_attribute("underhood.tags", ["zoekt-underhood"])
        span.set_attribute("input", json.dumps(input_data))
        span.set_attribute("output", json.dumps(output_data))
    except (TypeError, ValueError) as exc:
        logger.error(f"Error setting span attributes: {exc}")


def _single_param(request: Request, name: str, required: bool = True) -> Optional[str]:
    """Get a query parameter expected at most once.

    Raises:
        RequestParameterError: If the parameter is repeated, or required but missing
    """
    values = request.query_params.getlist(name)
    if len(values) > 1:
        raise RequestParameterError(f"expected a single {name} parameter")
    value = values[0] if values else None
    if required and not value:
        raise RequestParameterError(f"expected {name} parameter")
    return value


def create_app(
    search_client: AbstractSearchClient,
    config: ServerConfig,
    content_fetcher: Optional[AbstractContentFetcher] = None,
    classifier: Optional[DeclarationClassifier] = None,
) -> FastAPI:
    """Create the gateway application.

    Args:
        search_client: Client used to query the search backend
        config: Server configuration
        content_fetcher: Fetcher of whole files, searching through ``search_client`` by default
        classifier: Declaration heuristic, the bundled one by default

    Returns:
        FastAPI application
    """
    content_fetcher = content_fetcher or ZoektContentFetcher(
        search_client, max_wall_time=config.max_wall_time
    )
    classifier = classifier or DeclarationClassifier.default()
    tracer = TelemetryManager(config).get_tracer("zoekt-underhood")

    app = FastAPI(title="Zoekt Underhood", default_response_class=UTF8JSONResponse)

    # One registry per app, so several apps can live in one process.
    registry = CollectorRegistry()
    request_count = Counter(
        "underhood_requests",
        "Requests served, by endpoint and status",
        ["endpoint", "status"],
        registry=registry,
    )
    request_latency = Histogram(
        "underhood_request_duration_seconds",
        "Request latency, by endpoint",
        ["endpoint"],
        registry=registry,
    )

    @app.middleware("http")
    async def record_metrics(request: Request, call_next):
        path = request.url.path
        if path == "/metrics":
            return await call_next(request)
        # Unknown paths share a label to bound cardinality.
        endpoint = path if path in {route.path for route in app.routes} else "other"
        start = time.perf_counter()
        status = ERROR_STATUS
        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            request_latency.labels(endpoint=endpoint).observe(time.perf_counter() - start)
            request_count.labels(endpoint=endpoint, status=str(status)).inc()

    @app.get("/metrics")
    def metrics() -> Response:
        """Expose request metrics in the Prometheus text format."""
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> PlainTextResponse:
        logger.warning(f"{request.url.path}: {exc}")
        return PlainTextResponse(str(exc), status_code=ERROR_STATUS)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
        logger.exception(f"Unexpected error serving {request.url.path}")
        return PlainTextResponse(str(exc), status_code=ERROR_STATUS)

    @app.get("/api/filetree")
    def filetree(request: Request) -> Dict[str, Any]:
        """List one level of the file tree below the ``top`` ticket."""
        logger.info(f"request: {request.url}")
        top = Ticket.parse(_single_param(request, "top", required=False))
        with tracer.start_as_current_span("Underhood:filetree") as span:
            tree = assemble_filetree(top, search_client, max_wall_time=config.max_wall_time)
            _set_span_attributes(span, {"top": top.format()}, {"children": len(tree.children)})
        return tree.model_dump(by_alias=True)

    @app.get("/api/source")
    def source(request: Request) -> Response:
        """Serve the raw content of the file addressed by ``ticket``."""
        logger.info(f"request: {request.url}")
        ticket = Ticket.parse(_single_param(request, "ticket"))
        with tracer.start_as_current_span("Underhood:source") as span:
            content = content_fetcher.get_content(ticket)
            _set_span_attributes(span, {"ticket": ticket.format()}, {"bytes": len(content)})
        return Response(content=content, media_type="text/plain; charset=UTF-8")

    @app.get("/api/decor")
    def decor() -> Dict[str, Any]:
        """Decorations need pre-computed references, which are not available."""
        return DecorResponse().model_dump(by_alias=True)

    @app.get("/api/search-xref")
    def xref(request: Request) -> Dict[str, Any]:
        """Search references of the selected text."""
        logger.info(f"request: {request.url}")
        selection = _single_param(request, "selection")
        ticket_text = _single_param(request, "ticket", required=False)
        ticket = Ticket.parse(ticket_text) if ticket_text else None
        mode = XrefMode.parse(_single_param(request, "mode", required=False))
        casing = Casing.parse(_single_param(request, "casing", required=False))

        with tracer.start_as_current_span("Underhood:search_xref") as span:
            response = search_xref(
                search_client,
                selection,
                ticket=ticket,
                mode=mode,
                casing=casing,
                max_files=config.xref_max_files,
                max_wall_time=config.max_wall_time,
                classifier=classifier,
            )
            _set_span_attributes(
                span,
                {"selection": selection, "mode": mode.value, "casing": casing.value},
                {"files": response.ref_counts.files, "groups": len(response.refs)},
            )
        return response.model_dump(by_alias=True)

    @app.get("/search")
    def search(request: Request) -> List[Dict[str, Any]]:
        """Run a raw backend query and list the matched files."""
        logger.info(f"request: {request.url}")
        query = _single_param(request, "q")
        if is_repository_only(query):
            raise RequestParameterError("repo-only query not supported")
        try:
            num = int(_single_param(request, "num", required=False) or 0)
        except ValueError:
            num = 0
        if num <= 0:
            num = DEFAULT_NUM_RESULTS

        with tracer.start_as_current_span("Underhood:search") as span:
            limiter = MatchLimiter(num_results=num, max_wall_time=config.max_wall_time)
            result = search_client.search_with_estimate(query, limiter)
            _set_span_attributes(span, {"q": query, "num": num}, {"files": len(result.files)})
        return [
            SearchFileResult(
                repository=f.repository, file_name=f.filename, snippets=file_snippets(f)
            ).model_dump(by_alias=True)
            for f in result.files[:num]
        ]

    @app.get("/healthz")
    def health() -> Dict[str, str]:
        return {"status": "ok"}

    return app


def main() -> None:
    """Main entry point."""
    config = ServerConfig()
    setup_logging(config)

    search_client = SearchClientFactory.create_client(
        backend=config.search_backend, base_url=config.zoekt_api_url
    )
    logger.info(f"Using {config.search_backend} search backend at {config.zoekt_api_url}")
    app = create_app(search_client, config)

    ssl_options = {}
    if config.ssl_cert or config.ssl_key:
        ssl_options = {"ssl_certfile": config.ssl_cert, "ssl_keyfile": config.ssl_key}
        logger.info(f"serving HTTPS on {config.host}:{config.port}")
    else:
        logger.info(f"serving HTTP on {config.host}:{config.port}")

    try:
        uvicorn.run(app, host=config.host, port=config.port, log_config=None, **ssl_options)
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt (CTRL+C)")
    finally:
        logger.info("Server has shut down.")


if __name__ == "__main__":
    main()
