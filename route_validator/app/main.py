"""
Example application wiring the validator into FastAPI routes.
"""

from typing import Any, Dict

from fastapi import FastAPI

from route_validator.app.core.settings import get_settings
from route_validator.app.middleware.error import setup_validation_error_handling
from route_validator.app.middleware.validation import (
    RequestContext,
    create_validator,
    validated_route,
)
from route_validator.app.schemas import KeyParams, KeySchema
from route_validator.app.utils.logging import setup_validator_logging

settings = get_settings()

logger = setup_validator_logging(
    settings.SERVICE_NAME,
    log_level=settings.LOG_LEVEL,
    enable_file_logging=settings.ENABLE_FILE_LOGGING,
    log_dir=settings.LOG_DIR,
)


def _key_summary(current: Dict[str, Any], original: Dict[str, Any]) -> Dict[str, Any]:
    return {"key": current.get("key"), "original_key": original.get("key")}


def create_app() -> FastAPI:
    app = FastAPI(title="Route Validator Example")

    validator = create_validator()
    strict_validator = create_validator(propagate_error=True)

    @validated_route(app, "/headers-check", validator.headers(KeySchema))
    async def headers_check(ctx: RequestContext):
        return _key_summary(ctx.headers, ctx.original_headers)

    @validated_route(app, "/query-check", validator.query(KeySchema))
    async def query_check(ctx: RequestContext):
        return _key_summary(ctx.query, ctx.original_query)

    @validated_route(app, "/body-check", validator.body(KeySchema), methods=["POST"])
    async def body_check(ctx: RequestContext):
        return _key_summary(ctx.request_body, ctx.original_body)

    @validated_route(app, "/params-check/{key}", validator.params(KeySchema))
    async def params_check(ctx: RequestContext):
        return _key_summary(ctx.params, ctx.original_params)

    @validated_route(
        app,
        "/response-check/{key}",
        validator.params(KeyParams),
        validator.response(KeySchema),
    )
    async def response_check(ctx: RequestContext):
        return {"key": ctx.params["key"]}

    @validated_route(app, "/propagate-check", strict_validator.query(KeySchema))
    async def propagate_check(ctx: RequestContext):
        return {"key": ctx.query["key"]}

    setup_validation_error_handling(app)
    logger.info("Example routes configured", extra={"routes": len(app.routes)})

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "route_validator.app.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.LOG_LEVEL.lower(),
    )
