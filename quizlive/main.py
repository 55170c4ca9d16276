import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import socketio

from quizlive.broadcaster import SocketIOBroadcaster
from quizlive.catalog import QuizCatalog
from quizlive.config import Config
from quizlive.errors import QuizError
from quizlive.logging_config import configure_logging
from quizlive.registry import SessionRegistry
from quizlive.routes import router
from quizlive.session_machine import SessionStateMachine
from quizlive.socket_manager import EventRouter, create_sio

logger = logging.getLogger(__name__)


def log_session_stats(registry: SessionRegistry) -> None:
    logger.info("Active sessions: %d", len(registry))
    for session in registry.sessions():
        logger.info("- PIN %s: %d players, %s", session.pin_code, len(session.players), session.state.value)


async def session_stats_loop(registry: SessionRegistry, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        log_session_stats(registry)


@asynccontextmanager
async def lifespan(app: FastAPI):
    interval = app.state.config.STATS_INTERVAL_SEC
    task = asyncio.create_task(session_stats_loop(app.state.registry, interval)) if interval > 0 else None
    logger.info("Quiz server is running!")
    yield
    if task is not None:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


async def handle_quiz_error(request: Request, exc: QuizError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def create_app(config_class=Config) -> FastAPI:
    """Build the HTTP app with its own catalog, registry and Socket.IO server."""
    configure_logging(config_class.LOG_LEVEL)

    catalog = QuizCatalog()
    registry = SessionRegistry(catalog, pin_digits=config_class.PIN_DIGITS)
    sio = create_sio(config_class)
    broadcaster = SocketIOBroadcaster(sio)
    machine = SessionStateMachine(catalog, registry, broadcaster)
    EventRouter(machine, broadcaster).register(sio)

    app = FastAPI(title="Quiz Live Backend", version="1.0.0", lifespan=lifespan)
    app.state.config = config_class
    app.state.catalog = catalog
    app.state.registry = registry
    app.state.machine = machine
    app.state.sio = sio

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config_class.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(QuizError, handle_quiz_error)

    # Include routes
    app.include_router(router, prefix="/api")

    @app.get("/")
    def root():
        return {"message": "Quiz Live Backend API", "status": "running"}

    @app.get("/health")
    def health():
        return {"status": "ok", "sessions": len(registry)}

    return app


def create_socket_app(app: FastAPI) -> socketio.ASGIApp:
    # Mount Socket.IO in front of the HTTP app
    return socketio.ASGIApp(app.state.sio, app)


app = create_app()
socket_app = create_socket_app(app)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(socket_app, host=Config.HOST, port=Config.PORT)
