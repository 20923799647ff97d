from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field

from assistant.languages import DEFAULT_LANGUAGE, LANGUAGES
from assistant.pipeline import handle_turn
from assistant.session import DEFAULT_SESSION_ID, SessionStore
from llm.client import call_llm


load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="[%(asctime)s] %(levelname)s - %(message)s",
)
logger = logging.getLogger("chatbot")

GENERIC_ERROR = "Something went wrong with the assistant."


class AskRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str
    language: str = DEFAULT_LANGUAGE
    session_id: str = Field(DEFAULT_SESSION_ID, alias="sessionId")


SESSIONS = SessionStore()


def get_store() -> SessionStore:
    return SESSIONS


def get_llm():
    return call_llm


def create_app(static_dir: str | None = None) -> FastAPI:
    app = FastAPI(title="Multilingual Tourist Chatbot API")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/chatbot/ask")
    def ask(req: AskRequest, store: SessionStore = Depends(get_store), llm=Depends(get_llm)):
        try:
            reply = handle_turn(store, req.message, language=req.language, session_id=req.session_id, llm=llm)
        except Exception:
            logger.exception("Chat turn failed for session %s", req.session_id)
            return JSONResponse({"error": GENERIC_ERROR}, status_code=500)
        return {"reply": reply}

    @app.get("/api/chatbot/languages")
    def languages():
        return {"default": DEFAULT_LANGUAGE, "languages": LANGUAGES}

    @app.get("/health")
    def health(store: SessionStore = Depends(get_store)):
        return {"status": "ok", "sessions": len(store)}

    if static_dir:
        _mount_client(app, Path(static_dir))
    return app


def _mount_client(app: FastAPI, root: Path) -> None:
    """Serve a built single-page client; unknown paths fall back to index.html."""
    index = root / "index.html"
    if not index.is_file():
        logger.warning("CLIENT_DIST_DIR %s has no index.html; static client disabled", root)
        return
    assets = root / "assets"
    if assets.is_dir():
        app.mount("/assets", StaticFiles(directory=assets), name="assets")
    resolved_root = root.resolve()

    @app.get("/{full_path:path}", include_in_schema=False)
    def client(full_path: str):
        if full_path.startswith("api/"):
            return JSONResponse({"detail": "Not Found"}, status_code=404)
        candidate = (root / full_path).resolve()
        if full_path and candidate.is_file() and resolved_root in candidate.parents:
            return FileResponse(candidate)
        return FileResponse(index)

    logger.info("Serving client from %s", root)


app = create_app(os.getenv("CLIENT_DIST_DIR"))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=os.getenv("HOST", "0.0.0.0"), port=int(os.getenv("PORT", "5000")))
