from __future__ import annotations

from functools import cache
from typing import Any

from aws_lambda_powertools import Logger
from mangum import Mangum
from mangum.types import LambdaContext

from bookathing.api import create_app, metrics
from bookathing.config import Settings
from bookathing.wiring import build_services

logger = Logger()


@cache
def get_handler() -> Mangum:
    # built on the first invocation so that importing the module never reads config
    settings = Settings.from_env()
    logger.info("Building application", extra={"catalog_path": settings.catalog_path})
    return Mangum(create_app(build_services(settings)))


@metrics.log_metrics
def lambda_handler(event: dict[str, Any], context: LambdaContext) -> Any:
    # Normalize minimal API Gateway HTTP API v2.0 events for local/tests
    if isinstance(event, dict) and event.get("version") == "2.0":
        request_context = event.setdefault("requestContext", {})
        http_ctx = request_context.setdefault("http", {})
        http_ctx.setdefault("sourceIp", "127.0.0.1")
        http_ctx.setdefault("userAgent", "pytest")
        request_context.setdefault("stage", "$default")

    return get_handler()(event, context)
