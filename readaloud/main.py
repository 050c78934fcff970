"""FastAPI application entry point."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, File, HTTPException, UploadFile, WebSocket

from .config import Settings, load_settings
from .errors import ChunkingError, ConfigurationError, ExtractionError
from .extract.pdf import extract_text_async
from .pipeline import NarrationPipeline
from .tts.base import TTSEngine
from .ws.broadcaster import Broadcaster
from .ws.handler import ObserverConnection

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
log = logging.getLogger(__name__)


def build_tts_engine(settings: Settings) -> TTSEngine | None:
    """Create the configured TTS engine, or None if its API key is missing."""
    if not settings.tts_api_key:
        log.warning("No %s API key, TTS disabled", settings.tts.provider)
        return None

    if settings.tts.provider == "openai":
        from .tts.openai_tts import OpenAITTS
        engine: TTSEngine = OpenAITTS(
            api_key=settings.tts_api_key,
            model=settings.tts.model,
            voice=settings.tts.voice,
            speed=settings.tts.speed,
            instructions=settings.tts.instructions,
        )
    else:
        from .tts.deepgram_tts import DeepgramTTS
        engine = DeepgramTTS(
            api_key=settings.tts_api_key,
            model=settings.tts.model,
            encoding=settings.tts.encoding,
            sample_rate=settings.tts.sample_rate,
        )
    log.info("TTS engine configured: %s %s", settings.tts.provider, settings.tts.model)
    return engine


def create_app(
    settings: Settings | None = None,
    tts_engine: TTSEngine | None = None,
) -> FastAPI:
    settings = settings or load_settings()
    engine = tts_engine or build_tts_engine(settings)
    broadcaster = Broadcaster()
    pipeline = None
    if engine is not None:
        pipeline = NarrationPipeline(
            engine,
            broadcaster,
            max_chunk_size=settings.text_processing.max_chunk_size,
            chunk_delay=settings.text_processing.chunk_delay,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        if pipeline is not None:
            await pipeline.aclose()
        if engine is not None:
            await engine.aclose()
        broadcaster.clear()

    app = FastAPI(title="ReadAloud", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.broadcaster = broadcaster
    app.state.pipeline = pipeline

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "ttsConfigured": engine is not None,
            "observers": len(broadcaster),
            "activeRuns": pipeline.active_runs if pipeline else 0,
        }

    @app.post("/upload")
    async def upload(pdf: UploadFile | None = File(None)):
        if pdf is None:
            raise HTTPException(status_code=400, detail="No PDF file uploaded")

        limit = settings.upload.max_file_size
        too_large = HTTPException(
            status_code=413, detail=f"File exceeds the {limit} byte upload limit",
        )
        if pdf.size is not None and pdf.size > limit:
            raise too_large

        # size can be unknown, so never buffer more than one byte past the limit
        data = await pdf.read(limit + 1)
        if len(data) > limit:
            raise too_large

        try:
            if pipeline is None:
                raise ConfigurationError(f"{settings.tts.provider} API key not configured")
            text = await extract_text_async(data)
            summary = await pipeline.run(text)
        except ConfigurationError as e:
            raise HTTPException(status_code=500, detail=str(e)) from e
        except ExtractionError as e:
            log.warning("Extraction failed for %s: %s", pdf.filename, e)
            raise HTTPException(status_code=422, detail=f"Error processing PDF: {e}") from e
        except ChunkingError as e:
            raise HTTPException(status_code=500, detail=f"Error processing PDF: {e}") from e

        return {
            "message": "PDF processing started",
            "totalChunks": summary.total_chunks,
            "totalCharacters": summary.total_characters,
        }

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        await ws.accept()
        await ObserverConnection(ws, broadcaster).handle()

    return app


app = create_app()


def main():
    """Run the server with uvicorn."""
    import uvicorn
    settings = app.state.settings
    log.info("Starting server on %s:%d", settings.server.host, settings.server.port)
    uvicorn.run(
        "readaloud.main:app",
        host=settings.server.host,
        port=settings.server.port,
        log_level="info",
    )


if __name__ == "__main__":
    main()
