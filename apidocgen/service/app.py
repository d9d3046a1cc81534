"""FastAPI application exposing the agent to a supervisor."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..agent import DocAgent
from ..config import load_config
from ..errors import ApiDocGenError
from ..logging import get_logger
from .envelope import (
    AGENT_NAME,
    FAILURE_MESSAGE,
    TASK_ASSIGNMENT,
    HealthResponse,
    TaskAssignment,
    build_error_response,
    build_success_response,
)

_LOGGER = get_logger("service")


def _default_agent() -> DocAgent:
    return DocAgent.from_config(load_config(Path.cwd()))


def create_app(agent_factory: Callable[[], DocAgent] = _default_agent) -> FastAPI:
    """Create the FastAPI application; ``agent_factory`` is called exactly once."""
    agent = agent_factory()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await agent.aclose()

    app = FastAPI(title="API Documentation Agent", version="1.0.0", lifespan=lifespan)
    app.state.agent = agent

    async def get_agent(request: Request) -> DocAgent:
        return request.app.state.agent

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        if request.url.path != "/execute":
            return await request_validation_exception_handler(request, exc)
        body = exc.body if isinstance(exc.body, dict) else {}
        message_id = body.get("message_id")
        related_id = message_id if isinstance(message_id, str) else None
        detail = "; ".join(
            f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
            for error in exc.errors()
        )
        _LOGGER.error("Rejected malformed task %s: %s", related_id, detail)
        return JSONResponse(
            status_code=500,
            content=build_error_response(related_id, FAILURE_MESSAGE, f"Invalid task payload: {detail}"),
        )

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="I'm up and ready", agent_name=AGENT_NAME)

    @app.post("/execute")
    async def execute(
        message: TaskAssignment,
        agent: DocAgent = Depends(get_agent),
    ) -> JSONResponse:
        if message.type != TASK_ASSIGNMENT:
            return JSONResponse(status_code=400, content={"message": "Invalid message type"})

        _LOGGER.info("Received task %s from %s", message.message_id, message.sender)
        try:
            task = message.task.to_task()
            result = await agent.execute(task)
        except ApiDocGenError as exc:
            _LOGGER.error("Task %s failed: %s", message.message_id, exc)
            return JSONResponse(
                status_code=500,
                content=build_error_response(message.message_id, FAILURE_MESSAGE, str(exc)),
            )
        except Exception as exc:
            _LOGGER.exception("Unexpected error while processing task %s", message.message_id)
            return JSONResponse(
                status_code=500,
                content=build_error_response(message.message_id, FAILURE_MESSAGE, str(exc)),
            )

        return JSONResponse(
            status_code=200, content=build_success_response(message.message_id, result)
        )

    return app


def run_service(host: str = "0.0.0.0", port: int = 3000) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    _LOGGER.info("Listening on http://%s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
