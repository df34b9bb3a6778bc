"""FastAPI application exposing the chat relay webhook."""

from __future__ import annotations

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.audit.logger import AuditLogger
from src.clients.anthropic import AnthropicClient
from src.clients.base import AIResponder, ChatNotifier
from src.clients.synochat import SynologyChatClient
from src.config import RelayConfig
from src.webhook.models import RelayOutcome
from src.webhook.relay import WebhookRelayHandler

WEBHOOK_PATH = "/webhook"

# Methods outside this list (TRACE, CONNECT, ...) are answered by the
# 405 exception handler below with the same plain-text body.
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"]


def create_app_from_env() -> FastAPI:
    """Factory for uvicorn --factory: reads config from environment variables."""
    return create_app(RelayConfig.from_env())


def build_handler(
    config: RelayConfig,
    ai_responder: AIResponder | None = None,
    chat_notifier: ChatNotifier | None = None,
    audit_logger: AuditLogger | None = None,
) -> WebhookRelayHandler:
    """Wire the relay handler, constructing real clients where none are given.

    Raises ChatClientConfigError when the chat base URL is unusable.
    """
    if chat_notifier is None:
        chat_notifier = SynologyChatClient(
            config.chat_base_url, timeout=config.upstream_timeout,
        )
    if ai_responder is None:
        ai_responder = AnthropicClient(
            api_key=config.anthropic_api_key,
            model=config.anthropic_model,
            base_url=config.anthropic_base_url,
            max_tokens=config.anthropic_max_tokens,
            timeout=config.upstream_timeout,
        )
    if audit_logger is None and config.audit_log_path:
        audit_logger = AuditLogger(
            config.audit_log_path,
            max_bytes=config.audit_log_max_bytes,
            backup_count=config.audit_log_backup_count,
        )
    return WebhookRelayHandler(
        ai_responder=ai_responder,
        chat_notifier=chat_notifier,
        outgoing_token=config.outgoing_token,
        audit_logger=audit_logger,
    )


def create_app(
    config: RelayConfig,
    ai_responder: AIResponder | None = None,
    chat_notifier: ChatNotifier | None = None,
    audit_logger: AuditLogger | None = None,
) -> FastAPI:
    """Create the relay FastAPI app."""
    handler = build_handler(config, ai_responder, chat_notifier, audit_logger)
    app = FastAPI(docs_url=None, redoc_url=None, openapi_url=None)
    app.state.relay_handler = handler

    @app.exception_handler(StarletteHTTPException)
    async def method_not_allowed(request: Request, exc: StarletteHTTPException) -> Response:
        if exc.status_code == 405 and request.url.path == WEBHOOK_PATH:
            return PlainTextResponse("Method not allowed", status_code=405)
        return await http_exception_handler(request, exc)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.api_route(WEBHOOK_PATH, methods=_ALL_METHODS)
    async def webhook(request: Request) -> Response:
        result = await handler.handle(
            request.method,
            request.body,
            source_ip=request.client.host if request.client else None,
        )
        if result.outcome == RelayOutcome.SUCCEEDED:
            return Response(status_code=result.status_code)
        return PlainTextResponse(result.text, status_code=result.status_code)

    return app
