from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any
from uuid import uuid4

from fastapi import Body, Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, StreamingResponse
from sqlalchemy.orm import Session

from slide_studio.config import settings
from slide_studio.db import Base, SessionLocal, engine, get_db
from slide_studio.models import Quiz
from slide_studio.presentation.notes import add_marker, remove_marker, save_note
from slide_studio.presentation.settings import PresentationSettings, TeacherNote
from slide_studio.presentation.state import PresentationStore
from slide_studio.providers.factory import get_provider
from slide_studio.schemas import (
    ChatRequest,
    DocumentTextOut,
    GenerationPreferences,
    GotoRequest,
    MarkerCreateRequest,
    NoteUpdateRequest,
    PresentationCreateRequest,
    PresentationOut,
    QuizCreateOut,
    QuizCreateRequest,
    QuizResultsOut,
    QuizSubmitOut,
    QuizSubmitRequest,
    ResearchOut,
    ResearchRequest,
    SlideOut,
)
from slide_studio.services.chat_service import open_chat_stream
from slide_studio.services.doc_extractor import SUPPORTED_EXTENSIONS, extract_text
from slide_studio.services.pptx_export import build_deck_pptx
from slide_studio.services.quiz_service import (
    aggregate_results,
    create_quiz,
    get_question_generator,
    record_responses,
)
from slide_studio.services.research_service import run_research
from slide_studio.services.themes import DEFAULT_THEMES, SlideTheme, get_theme
from slide_studio.storage import KeyValueStore, SqlKeyValueStore, make_file_path


logger = logging.getLogger("slide_studio")

PREFERENCES_KEY = "slideSettings"

app = FastAPI(title=settings.app_name)
app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_origin, "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _configure_runtime_logging() -> None:
    level = getattr(logging, str(settings.log_level).upper(), logging.INFO)
    logging.getLogger("slide_studio").setLevel(level)

    if settings.suppress_httpx_info_logs:
        logging.getLogger("httpx").setLevel(logging.WARNING)
        logging.getLogger("httpcore").setLevel(logging.WARNING)
        logging.getLogger("openai").setLevel(logging.WARNING)
        logging.getLogger("anthropic").setLevel(logging.WARNING)


@app.on_event("startup")
def on_startup():
    _configure_runtime_logging()
    Base.metadata.create_all(bind=engine)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info("request_rejected path=%s errors=%d", request.url.path, len(exc.errors()))
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "detail": jsonable_encoder(exc.errors())},
    )


def get_store() -> KeyValueStore:
    return SqlKeyValueStore(SessionLocal)


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get(f"{settings.api_prefix}/themes", response_model=list[SlideTheme])
def list_themes():
    return DEFAULT_THEMES


@app.post(f"{settings.api_prefix}/research", response_model=ResearchOut, response_model_exclude_none=True)
def research(req: ResearchRequest):
    provider = get_provider(req.provider)
    result = run_research(req, provider)
    if not result.success:
        return JSONResponse(status_code=500, content=result.model_dump(by_alias=True, exclude_none=True))
    return result


def _relay(stream: Iterator[str]) -> Iterator[str]:
    try:
        yield from stream
    except Exception:
        logger.exception("chat_stream_aborted")
        raise


@app.post(f"{settings.api_prefix}/chat")
def chat(req: ChatRequest):
    provider = get_provider(req.provider)
    try:
        stream = open_chat_stream(provider, req.messages, req.context)
    except Exception as exc:
        logger.error("chat_failed provider=%s turns=%d reason=%s", provider.name, len(req.messages), exc)
        return PlainTextResponse("Internal server error", status_code=500)
    return StreamingResponse(_relay(stream), media_type="text/plain; charset=utf-8")


@app.post(f"{settings.api_prefix}/quiz", response_model=QuizCreateOut)
def create_quiz_endpoint(req: QuizCreateRequest, db: Session = Depends(get_db)):
    provider = get_provider() if settings.quiz_generator == "model" else None
    generator = get_question_generator(settings.quiz_generator, provider)
    row, questions = create_quiz(db, content=req.content, settings=req.settings, generator=generator)
    return QuizCreateOut(success=True, quiz_id=row.id, questions=questions)


@app.put(f"{settings.api_prefix}/quiz", response_model=QuizSubmitOut)
def submit_quiz(req: QuizSubmitRequest, db: Session = Depends(get_db)):
    quiz = db.get(Quiz, req.quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    try:
        graded = record_responses(db, quiz, req.responses)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return QuizSubmitOut(
        success=True,
        message=f"{len(graded)} responses processed successfully",
        responses=graded,
    )


@app.get(f"{settings.api_prefix}/quiz", response_model=QuizResultsOut)
def quiz_results(quiz_id: str | None = Query(default=None, alias="quizId"), db: Session = Depends(get_db)):
    if not quiz_id:
        raise HTTPException(status_code=400, detail="quizId is required")
    quiz = db.get(Quiz, quiz_id)
    if not quiz:
        raise HTTPException(status_code=404, detail="Quiz not found")
    return QuizResultsOut(success=True, results=aggregate_results(db, quiz))


@app.post(f"{settings.api_prefix}/docs/extract", response_model=DocumentTextOut)
async def extract_document(file: UploadFile = File(...)):
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTENSIONS:
        raise HTTPException(status_code=400, detail=f"Unsupported extension. Allowed: {sorted(SUPPORTED_EXTENSIONS)}")

    path = make_file_path("uploads", suffix, stem=str(uuid4()))
    path.write_bytes(await file.read())
    try:
        text = extract_text(path)
    except Exception as exc:
        logger.warning("document_extract_failed name=%s reason=%s", file.filename, exc)
        raise HTTPException(status_code=400, detail="Could not read document") from exc
    finally:
        path.unlink(missing_ok=True)
    return DocumentTextOut(filename=file.filename or path.name, characters=len(text), text=text)


@app.get(f"{settings.api_prefix}/preferences", response_model=GenerationPreferences)
def get_preferences(store: KeyValueStore = Depends(get_store)):
    return GenerationPreferences.model_validate(store.get(PREFERENCES_KEY) or {})


@app.put(f"{settings.api_prefix}/preferences", response_model=GenerationPreferences)
def put_preferences(prefs: GenerationPreferences, store: KeyValueStore = Depends(get_store)):
    store.set(PREFERENCES_KEY, prefs.model_dump(mode="json", by_alias=True))
    return prefs


def _presentation_key(presentation_id: str) -> str:
    return f"presentation:{presentation_id}"


def _load_presentation(presentation_id: str, store: KeyValueStore) -> PresentationStore:
    presentation = PresentationStore.load(store, _presentation_key(presentation_id))
    if presentation is None:
        raise HTTPException(status_code=404, detail="Presentation not found")
    return presentation


def _presentation_out(presentation_id: str, presentation: PresentationStore) -> PresentationOut:
    return PresentationOut(
        id=presentation_id,
        slide_count=presentation.slide_count,
        current_index=presentation.current_index,
        slides=[
            SlideOut(index=idx, title=slide.title, body=slide.body)
            for idx, slide in enumerate(presentation.slides)
        ],
        settings=presentation.settings,
        theme=get_theme(presentation.settings.theme_id, default=settings.default_theme_id),
    )


@app.post(f"{settings.api_prefix}/presentations", response_model=PresentationOut)
def create_presentation(req: PresentationCreateRequest, store: KeyValueStore = Depends(get_store)):
    presentation_id = str(uuid4())
    presentation = PresentationStore(
        req.content,
        PresentationSettings(theme_id=settings.default_theme_id),
        store=store,
        key=_presentation_key(presentation_id),
    )
    patch: dict[str, Any] = dict(req.settings or {})
    if req.theme_id:
        patch["themeId"] = req.theme_id
    try:
        if patch:
            presentation.update_settings(patch)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    presentation.save()
    logger.info("presentation_created id=%s slides=%d", presentation_id, presentation.slide_count)
    return _presentation_out(presentation_id, presentation)


@app.get(f"{settings.api_prefix}/presentations/{{presentation_id}}", response_model=PresentationOut)
def get_presentation(presentation_id: str, store: KeyValueStore = Depends(get_store)):
    return _presentation_out(presentation_id, _load_presentation(presentation_id, store))


@app.post(f"{settings.api_prefix}/presentations/{{presentation_id}}/next", response_model=PresentationOut)
def next_slide(presentation_id: str, store: KeyValueStore = Depends(get_store)):
    presentation = _load_presentation(presentation_id, store)
    presentation.next()
    return _presentation_out(presentation_id, presentation)


@app.post(f"{settings.api_prefix}/presentations/{{presentation_id}}/prev", response_model=PresentationOut)
def prev_slide(presentation_id: str, store: KeyValueStore = Depends(get_store)):
    presentation = _load_presentation(presentation_id, store)
    presentation.prev()
    return _presentation_out(presentation_id, presentation)


@app.post(f"{settings.api_prefix}/presentations/{{presentation_id}}/goto", response_model=PresentationOut)
def goto_slide(presentation_id: str, req: GotoRequest, store: KeyValueStore = Depends(get_store)):
    presentation = _load_presentation(presentation_id, store)
    presentation.go_to(req.index)
    return _presentation_out(presentation_id, presentation)


@app.patch(f"{settings.api_prefix}/presentations/{{presentation_id}}/settings", response_model=PresentationOut)
def patch_presentation_settings(
    presentation_id: str,
    patch: dict[str, Any] = Body(...),
    store: KeyValueStore = Depends(get_store),
):
    presentation = _load_presentation(presentation_id, store)
    try:
        presentation.update_settings(patch)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _presentation_out(presentation_id, presentation)


@app.put(f"{settings.api_prefix}/presentations/{{presentation_id}}/notes/{{slide_index}}", response_model=PresentationOut)
def put_note(
    presentation_id: str,
    slide_index: int,
    req: NoteUpdateRequest,
    store: KeyValueStore = Depends(get_store),
):
    presentation = _load_presentation(presentation_id, store)
    try:
        notes = save_note(presentation.settings.notes, slide_index, req.content, presentation.slide_count)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if req.markers is not None:
        notes[slide_index] = notes[slide_index].model_copy(update={"markers": req.markers})
    _store_note(presentation, slide_index, notes)
    return _presentation_out(presentation_id, presentation)


def _store_note(presentation: PresentationStore, slide_index: int, notes: dict[int, TeacherNote]) -> None:
    presentation.update_settings({"notes": {str(slide_index): notes[slide_index].model_dump(mode="json")}})


@app.post(
    f"{settings.api_prefix}/presentations/{{presentation_id}}/notes/{{slide_index}}/markers",
    response_model=PresentationOut,
)
def post_marker(
    presentation_id: str,
    slide_index: int,
    req: MarkerCreateRequest,
    store: KeyValueStore = Depends(get_store),
):
    presentation = _load_presentation(presentation_id, store)
    try:
        notes, marker = add_marker(
            presentation.settings.notes,
            slide_index,
            presentation.slide_count,
            x=req.x,
            y=req.y,
            color=req.color,
            text=req.text,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _store_note(presentation, slide_index, notes)
    logger.info("note_marker_added presentation=%s slide=%d marker=%s", presentation_id, slide_index, marker.id)
    return _presentation_out(presentation_id, presentation)


@app.delete(
    f"{settings.api_prefix}/presentations/{{presentation_id}}/notes/{{slide_index}}/markers/{{marker_id}}",
    response_model=PresentationOut,
)
def delete_marker(
    presentation_id: str,
    slide_index: int,
    marker_id: str,
    store: KeyValueStore = Depends(get_store),
):
    presentation = _load_presentation(presentation_id, store)
    try:
        notes = remove_marker(presentation.settings.notes, slide_index, marker_id, presentation.slide_count)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    _store_note(presentation, slide_index, notes)
    return _presentation_out(presentation_id, presentation)


@app.get(f"{settings.api_prefix}/presentations/{{presentation_id}}/export")
def export_presentation(presentation_id: str, store: KeyValueStore = Depends(get_store)):
    presentation = _load_presentation(presentation_id, store)
    theme = get_theme(presentation.settings.theme_id, default=settings.default_theme_id)
    path = make_file_path("exports", "pptx", stem=presentation_id)
    build_deck_pptx(presentation.slides, theme, path)
    return FileResponse(
        path,
        media_type="application/vnd.openxmlformats-officedocument.presentationml.presentation",
        filename=f"presentation-{presentation_id[:8]}.pptx",
    )
