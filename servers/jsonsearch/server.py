"""JSON search MCP server."""

import asyncio
import json
import logging
import os
import signal
from typing import Any, Dict

from dotenv import load_dotenv
from fastmcp import FastMCP
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from pydantic import ValidationError

from backends.locator import LineLocatorFactory
from backends.search import SearchEngineFactory
from core.config import SearchConfig
from core.exceptions import SearchRootError
from core.models import FileQueryRequest, SearchRequest
from core.reporting import report_to_dict

load_dotenv()

search_config = SearchConfig()
logging.basicConfig(level=search_config.logging_level)
logger = logging.getLogger(__name__)


class ServerConfig:
    """MCP server settings read from the environment."""

    def __init__(self) -> None:
        """Read server settings from the environment."""
        self.host = os.getenv("MCP_HOST", "0.0.0.0")
        self.sse_port = int(os.getenv("MCP_SSE_PORT", "8000"))
        self.streamable_http_port = int(os.getenv("MCP_STREAMABLE_HTTP_PORT", "8080"))

        # Results returned per tool call; searches over large trees are cut off here.
        self.max_results = int(os.getenv("MCP_MAX_RESULTS", "500"))

        # OpenTelemetry configuration (optional)
        self.otel_enabled = os.getenv("OTEL_ENABLED", "false").lower() == "true"
        if self.otel_enabled:
            self.otel_endpoint = self._get_required_env("OTEL_EXPORTER_OTLP_ENDPOINT")
        else:
            self.otel_endpoint = ""

    @staticmethod
    def _get_required_env(key: str) -> str:
        """Get required environment variable or raise descriptive error."""
        value = os.getenv(key)
        if not value:
            raise ValueError(f"Required environment variable {key} is not set")
        return value


class TelemetryManager:
    """Sets up OTLP trace export when tracing is enabled."""

    def __init__(self, config: ServerConfig) -> None:
        """Install the tracer provider if tracing is enabled."""
        self.config = config
        self._setup_telemetry()

    def _setup_telemetry(self) -> None:
        """Setup telemetry."""
        if not self.config.otel_enabled:
            return

        # The exporter reads OTEL_EXPORTER_OTLP_ENDPOINT itself.
        trace_provider = TracerProvider()
        trace_provider.add_span_processor(SimpleSpanProcessor(OTLPSpanExporter()))
        trace.set_tracer_provider(trace_provider)
        logger.info(f"Exporting traces to {self.config.otel_endpoint}")

    @staticmethod
    def get_tracer(name: str) -> trace.Tracer:
        """Get tracer instance."""
        return trace.get_tracer(name)


config = ServerConfig()
telemetry = TelemetryManager(config)
tracer = telemetry.get_tracer("jsonsearch-mcp")

server = FastMCP(name="jsonsearch")

locator = LineLocatorFactory.create_locator(search_config.locator_backend)
logger.info(f"Using {search_config.locator_backend} line locator")

_shutdown_requested = False


def signal_handler(sig: int, frame: Any) -> None:
    """Handle termination signals for graceful shutdown."""
    global _shutdown_requested
    logger.info(f"Received signal {sig}, initiating graceful shutdown...")
    _shutdown_requested = True


def _set_span_attributes(span: trace.Span, input_data: Dict[str, Any], output_data: Dict[str, Any]) -> None:
    """Record tool input and output on a span."""
    try:
        span.set_attribute("jsonsearch.tags", ["jsonsearch-mcp"])
        span.set_attribute("input", json.dumps(input_data))
        span.set_attribute("output", json.dumps(output_data))
    except (TypeError, ValueError) as exc:
        logger.error(f"Error setting span attributes: {exc}")


def _validation_message(exc: ValidationError) -> str:
    return "; ".join(error["msg"] for error in exc.errors())


def run_search(directory: str, query: str, max_results: int = 0) -> Dict[str, Any]:
    """Search a directory and return the report as a JSON-ready dict."""
    try:
        request = SearchRequest(directory=directory, query=query, max_results=max_results)
    except ValidationError as exc:
        return {"error": _validation_message(exc)}

    limit = request.max_results or config.max_results
    engine = SearchEngineFactory.create_engine(search_config, max_results=limit)
    with tracer.start_as_current_span("JsonSearchMcp:search") as span:
        try:
            report = engine.search_with_report(request.directory, request.query)
        except SearchRootError as exc:
            logger.warning(f"Search root error: {exc}")
            return {"error": str(exc)}

        payload = report_to_dict(report)
        _set_span_attributes(
            span,
            {"directory": request.directory, "query": request.query},
            {"matches": report.match_count, "skipped": report.skipped_count},
        )
        return payload


def run_query_file(path: str, query: str) -> Dict[str, Any]:
    """Query one file and return its matches as a JSON-ready dict."""
    try:
        request = FileQueryRequest(path=path, query=query)
    except ValidationError as exc:
        return {"error": _validation_message(exc)}

    engine = SearchEngineFactory.create_engine(search_config)
    with tracer.start_as_current_span("JsonSearchMcp:query_file") as span:
        outcome = engine.search_file(request.path, request.query)
        if not outcome.ok:
            return {"error": outcome.skipped.message, "reason": outcome.skipped.reason.value}

        _set_span_attributes(
            span,
            {"path": request.path, "query": request.query},
            {"matches": len(outcome.matches)},
        )
        return {"path": request.path, "query": request.query, "matches": [m.to_dict() for m in outcome.matches]}


def run_locate_value(path: str, value: str) -> Dict[str, Any]:
    """Locate a JSON-encoded value in a file."""
    try:
        parsed = json.loads(value)
    except ValueError as exc:
        return {"error": f"value must be JSON: {exc}"}

    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as exc:
        logger.warning(f"Error reading {path}: {exc}")
        return {"error": str(exc)}

    return {"path": path, "lineNumber": locator.locate(text, parsed)}


@server.tool()
def search(directory: str, query: str, max_results: int = 0) -> Dict[str, Any]:
    """Run a JSONPath query against every .json file below a directory."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        return {"error": "server is shutting down"}

    logger.info(f"Search query: {query} in {directory}")
    return run_search(directory, query, max_results)


@server.tool()
def query_file(path: str, query: str) -> Dict[str, Any]:
    """Run a JSONPath query against a single JSON file."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        return {"error": "server is shutting down"}

    return run_query_file(path, query)


@server.tool()
def locate_value(path: str, value: str) -> Dict[str, Any]:
    """Find the line of a JSON file where a JSON-encoded value appears."""
    if _shutdown_requested:
        logger.info("Shutdown in progress, declining new requests")
        return {"error": "server is shutting down"}

    return run_locate_value(path, value)


async def _run_server() -> None:
    """Serve the JSON search tools over streamable HTTP and SSE."""
    tasks = [
        server.run_http_async(
            transport="streamable-http",
            host=config.host,
            path="/jsonsearch/mcp",
            port=config.streamable_http_port,
        ),
        server.run_http_async(
            transport="sse",
            host=config.host,
            path="/jsonsearch/sse",
            port=config.sse_port,
        ),
    ]
    await asyncio.gather(*tasks)


def main() -> None:
    """Main entry point."""
    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        logger.info("Starting JSON Search MCP server...")
        asyncio.run(_run_server())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt (CTRL+C)")
    except Exception as exc:
        logger.error(f"Server error: {exc}")
        raise
    finally:
        logger.info("Server has shut down.")


if __name__ == "__main__":
    main()
