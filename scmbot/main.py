# Entry point for the FastAPI app
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel
import logging

from . import config
from . import security
from .build_scheduler import BuildScheduler, SCHEDULE_OPTIONS, rebuild
from .content.supplier import PublishedContentSupplier, create_supplier
from .transformers.embedding_cache import EmbeddingCache
from .transformers.sentential_context_model import ModelSettings, SententialContextModel

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

# Process-wide model and scheduler, created once at startup
state = {"model": None, "scheduler": None}

default_message = {
    "message": "Sentential Context Model responder running. POST /chat with {\"message\": ...}."
}


class ChatRequest(BaseModel):
    message: str


class ChatResponse(BaseModel):
    response: str


class ScheduleRequest(BaseModel):
    schedule: str


def build_default_model() -> SententialContextModel:
    settings = ModelSettings.from_config()
    cache = EmbeddingCache(config.SCM_CACHE_DIR, config.SCM_CACHE_MAX_ENTRIES) if config.SCM_CACHE_ENABLED else None
    supplier = create_supplier(stop_words=settings.stop_words)
    logger.info(
        f"[STARTUP] Model ready: strategy={config.SCM_CORPUS_STRATEGY}, window={settings.window_size}, "
        f"threshold={settings.similarity_threshold}, cache={'on' if cache else 'off'}, "
        f"stop words={len(settings.stop_words)}"
    )
    return SententialContextModel(settings, supplier, cache=cache)


def build_default_scheduler(model: SententialContextModel) -> BuildScheduler:
    full_scan = PublishedContentSupplier()
    return BuildScheduler(lambda: rebuild(model, full_scan, rebuild_index=config.SCM_REBUILD_RELEVANCE_INDEX))


@app.on_event("startup")
def startup_event():
    if state["model"] is None:
        state["model"] = build_default_model()
    if state["scheduler"] is None:
        state["scheduler"] = build_default_scheduler(state["model"])
        state["scheduler"].start(config.SCM_BUILD_SCHEDULE)
    if not config.SCM_ADMIN_KEY:
        logger.warning(
            "[STARTUP] SCM_ADMIN_KEY is not set, admin endpoints are disabled. "
            f"Suggested key: {security.generate_admin_key()}"
        )
    logger.info("[STARTUP] Initialization complete")


@app.on_event("shutdown")
def shutdown_event():
    if state["scheduler"] is not None:
        state["scheduler"].stop(timeout=5)


def _model() -> SententialContextModel:
    if state["model"] is None:
        raise HTTPException(status_code=503, detail="Model not initialized")
    return state["model"]


def _scheduler() -> BuildScheduler:
    if state["scheduler"] is None:
        raise HTTPException(status_code=503, detail="Scheduler not initialized")
    return state["scheduler"]


@app.get("/")
def root():
    return default_message


@app.post("/chat", response_model=ChatResponse)
def chat(body: ChatRequest):
    """Answer a visitor's message from the site content."""
    model = _model()
    logger.info(f"[API] Chat request: {body.message[:80]!r}")
    response = model.respond(body.message)
    return ChatResponse(response=response)


@app.get("/admin/status")
def admin_status(request: Request):
    security.verify_admin_key(request)
    model = _model()
    settings = model.settings
    return {
        "scheduler": _scheduler().status(),
        "cache": model.cache.info() if model.cache is not None else None,
        "settings": {
            "window_size": settings.window_size,
            "similarity_threshold": settings.similarity_threshold,
            "max_sentences": settings.budget.max_sentences,
            "max_tokens": settings.budget.max_tokens,
            "before_sentence_ratio": settings.budget.before_sentence_ratio,
            "before_token_ratio": settings.budget.before_token_ratio,
            "stop_words": len(settings.stop_words),
        },
    }


@app.post("/admin/rebuild")
def admin_rebuild(request: Request):
    security.verify_admin_key(request)
    scheduler = _scheduler()
    rebuilt = scheduler.run_now()
    return {"rebuilt": rebuilt, "status": scheduler.status()}


@app.post("/admin/schedule")
def admin_schedule(body: ScheduleRequest, request: Request):
    security.verify_admin_key(request)
    if body.schedule not in SCHEDULE_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Schedule must be one of {list(SCHEDULE_OPTIONS)}")
    scheduler = _scheduler()
    scheduler.start(body.schedule)
    return {"status": scheduler.status()}
