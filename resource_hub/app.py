"""
HTTP API server
Starlette application exposing health, resource listing and chat endpoints
"""
import uuid
from contextlib import asynccontextmanager
from typing import Any, Optional

from pydantic import ValidationError as PydanticValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Mount, Route

from .config import get_settings, get_security_config, Settings
from .models import (
    ChatRequest, ResourceQuery,
    ConfigurationError, ValidationError,
    handle_unexpected_error,
)
from .monitoring import HealthChecker, MetricsCollector, create_metrics_app
from .services import (
    ResourceAggregator, GeminiChatService, ChatFailedError,
    get_aggregator, get_chat_service,
)
from .services.chat import mock_reply
from .utils import (
    setup_logging, get_logger, get_audit_logger, get_request_id,
    set_request_context, clear_request_context,
)

logger = get_logger(__name__)


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the logging context and echoes it back"""

    def __init__(self, app, header_name: str = "X-Request-ID"):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(self.header_name) or uuid.uuid4().hex
        set_request_context(request_id=request_id)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[self.header_name] = request_id
        return response


async def health(request: Request) -> JSONResponse:
    checker: HealthChecker = request.app.state.health_checker
    return JSONResponse({"ok": True, "uptime": checker.uptime()})


async def health_details(request: Request) -> JSONResponse:
    checker: HealthChecker = request.app.state.health_checker
    result = await checker.check_health()
    return JSONResponse(result.model_dump(mode='json'))


async def list_resources(request: Request) -> JSONResponse:
    """GET /api/resources: always a PaginatedResult unless the handler itself breaks"""
    settings: Settings = request.app.state.settings
    aggregator: ResourceAggregator = request.app.state.aggregator

    try:
        query = ResourceQuery.from_params(
            request.query_params,
            tags=request.query_params.getlist("tags"),
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
            max_query_length=get_security_config().max_query_length,
        )
        result = await aggregator.search(query)
    except Exception as e:
        handle_unexpected_error(e, request_id=get_request_id(), context={'path': request.url.path})
        MetricsCollector.record_error(error_type=type(e).__name__, source="resources")
        get_audit_logger().log_error(
            error_type=type(e).__name__,
            error_message=str(e),
            source="resources",
            metadata={'request_id': get_request_id()}
        )
        return JSONResponse({"error": "Failed to fetch resources"}, status_code=500)

    return JSONResponse(result.to_json())


def parse_chat_request(payload: Any) -> ChatRequest:
    if not isinstance(payload, dict) or not isinstance(payload.get("messages"), list) or not payload["messages"]:
        raise ValidationError("Request body must include non-empty messages array", field="messages")
    try:
        return ChatRequest.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid chat request: {e.errors()[0]['msg']}", field="messages")


async def chat(request: Request) -> JSONResponse:
    """POST /api/chat"""
    settings: Settings = request.app.state.settings
    service: GeminiChatService = request.app.state.chat_service

    try:
        payload = await request.json()
    except ValueError:
        payload = None

    try:
        chat_request = parse_chat_request(payload)
    except ValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)

    audit_logger = get_audit_logger()
    try:
        response = await service.complete(chat_request)
    except ConfigurationError as e:
        e.log_error(request_id=get_request_id())
        audit_logger.log_error(error_type=e.error_code, error_message=e.message, source="chat")
        return JSONResponse({"error": e.message}, status_code=500)
    except ChatFailedError as e:
        audit_logger.log_error(
            error_type="CHAT_UPSTREAM_ERROR",
            error_message=str(e),
            source="chat",
            metadata={'status_code': e.status_code}
        )
        return JSONResponse(
            {"error": "Failed to get chat response", "details": e.payload},
            status_code=e.status_code
        )
    except Exception as e:
        audit_logger.log_error(error_type=type(e).__name__, error_message=str(e), source="chat")
        if settings.chatbot_mock_on_failure:
            return JSONResponse(mock_reply(chat_request.messages).model_dump())
        error = handle_unexpected_error(e, request_id=get_request_id(), context={'path': request.url.path})
        return JSONResponse(
            {"error": "Failed to get chat response", "details": {"error": error.message}},
            status_code=500
        )

    return JSONResponse(response.model_dump())


def create_app(
    settings: Optional[Settings] = None,
    aggregator: Optional[ResourceAggregator] = None,
    chat_service: Optional[GeminiChatService] = None,
    health_checker: Optional[HealthChecker] = None
) -> Starlette:
    """Build the ASGI application; collaborators may be injected"""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info(f"DevResourceHub API starting in {settings.environment} mode")
        yield
        await app.state.aggregator.close()
        await app.state.chat_service.close()

    routes = [
        Route("/api/health", health, methods=["GET"]),
        Route("/api/health/details", health_details, methods=["GET"]),
        Route("/api/resources", list_resources, methods=["GET"]),
        Route("/api/chat", chat, methods=["POST"]),
    ]
    if settings.metrics_enabled:
        routes.append(Mount("/metrics", app=create_metrics_app()))

    middleware = [
        Middleware(
            CORSMiddleware,
            allow_origins=settings.get_cors_origins(),
            allow_methods=["*"],
            allow_headers=["*"],
        ),
        Middleware(RequestContextMiddleware, header_name=settings.request_id_header),
    ]

    app = Starlette(debug=settings.debug, routes=routes, middleware=middleware, lifespan=lifespan)
    app.state.settings = settings
    app.state.aggregator = aggregator or get_aggregator()
    app.state.chat_service = chat_service or get_chat_service()
    app.state.health_checker = health_checker or HealthChecker()
    return app


def run_server():
    """Run the API with uvicorn"""
    import uvicorn

    setup_logging()

    settings = get_settings()
    logger.info(f"DevResourceHub API server running on http://{settings.host}:{settings.port}")

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower()
    )


if __name__ == "__main__":
    run_server()
