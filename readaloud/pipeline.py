"""Chunk-by-chunk narration of a document's text.

A run chunks the text once, announces it, and then synthesizes the chunks
strictly in order in a background task, broadcasting progress as it goes:

    IDLE -> STARTED -> PROCESSING -> COMPLETE
    IDLE | STARTED -> FAILED    (chunking or the announcement raised)

A chunk whose synthesis fails is reported with a ``chunk_error`` event and
the run moves on to the next chunk. Runs cannot be cancelled once started;
``aclose`` only tears down leftover tasks when the process shuts down.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from .errors import ChunkingError, SynthesisError
from .text.chunker import Chunk, chunk_text
from .tts.base import TTSEngine
from .ws.broadcaster import Broadcaster

log = logging.getLogger(__name__)


class RunState(str, Enum):
    IDLE = "idle"
    STARTED = "started"
    PROCESSING = "processing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass(frozen=True)
class RunSummary:
    total_chunks: int
    total_characters: int


@dataclass
class NarrationRun:
    """State for one end-to-end pass over one input text."""

    text: str
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    state: RunState = RunState.IDLE
    chunks: tuple[Chunk, ...] = ()
    succeeded: int = 0
    failed: int = 0
    error: str | None = None
    task: asyncio.Task | None = field(default=None, repr=False)

    @property
    def finished(self) -> bool:
        return self.state in (RunState.COMPLETE, RunState.FAILED)

    async def wait(self) -> None:
        """Wait until the processing loop has published its final event."""
        if self.task is not None:
            await self.task


class NarrationPipeline:
    """Drives synthesis of chunk sequences and reports through a Broadcaster."""

    def __init__(
        self,
        engine: TTSEngine,
        broadcaster: Broadcaster,
        max_chunk_size: int = 300,
        chunk_delay: float = 0.1,
    ) -> None:
        if max_chunk_size <= 0:
            raise ValueError(f"max_chunk_size must be positive, got {max_chunk_size}")
        if chunk_delay < 0:
            raise ValueError(f"chunk_delay must not be negative, got {chunk_delay}")
        self.engine = engine
        self.broadcaster = broadcaster
        self.max_chunk_size = max_chunk_size
        self.chunk_delay = chunk_delay
        self._runs: dict[str, NarrationRun] = {}

    @property
    def active_runs(self) -> int:
        return sum(1 for run in self._runs.values() if not run.finished)

    async def run(self, text: str) -> RunSummary:
        """Start narrating ``text`` and return once it has been chunked."""
        return (await self.start(text))[1]

    async def start(self, text: str) -> tuple[NarrationRun, RunSummary]:
        """Like ``run`` but also hand back the run so callers can follow it."""
        run = NarrationRun(text=text)
        self._runs[run.run_id] = run

        try:
            run.chunks = chunk_text(text, self.max_chunk_size)
            run.state = RunState.STARTED
            await self.broadcaster.processing_started(len(run.chunks), len(text))
        except Exception as e:
            await self._fail(run, e)
            raise ChunkingError(str(e)) from e

        if log.isEnabledFor(logging.DEBUG):
            for chunk in run.chunks[:3]:
                log.debug("Chunk %d: %r", chunk.index, chunk.text[:100])
        log.info("Run %s started: %d chunks, %d characters",
                 run.run_id, len(run.chunks), len(text))

        run.task = asyncio.create_task(self._process(run))
        run.task.add_done_callback(lambda task: self._on_task_done(run, task))
        return run, RunSummary(len(run.chunks), len(text))

    async def _fail(self, run: NarrationRun, exc: Exception) -> None:
        log.exception("Run %s failed before processing", run.run_id)
        run.state = RunState.FAILED
        run.error = str(exc)
        self._runs.pop(run.run_id, None)
        await self.broadcaster.processing_error(str(exc))

    async def _process(self, run: NarrationRun) -> None:
        run.state = RunState.PROCESSING
        total = len(run.chunks)

        for chunk in run.chunks:
            await self.broadcaster.chunk_processing(chunk.index, chunk.text, total)

            try:
                audio = await self.engine.synthesize(chunk.text)
                await self.broadcaster.audio_chunk(chunk.index, audio, total)
            except SynthesisError as e:
                log.warning("Synthesis failed for chunk %d of run %s (%r): %s",
                            chunk.index, run.run_id, e.chunk_text[:100], e)
                run.failed += 1
                await self.broadcaster.chunk_error(chunk.index, str(e))
            except Exception as e:
                log.exception("Error processing chunk %d of run %s", chunk.index, run.run_id)
                run.failed += 1
                await self.broadcaster.chunk_error(chunk.index, str(e))
            else:
                run.succeeded += 1

            await asyncio.sleep(self.chunk_delay)

        run.state = RunState.COMPLETE
        await self.broadcaster.processing_complete()
        log.info("Run %s complete: %d succeeded, %d failed",
                 run.run_id, run.succeeded, run.failed)

    def _on_task_done(self, run: NarrationRun, task: asyncio.Task) -> None:
        self._runs.pop(run.run_id, None)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            run.error = str(exc)
            log.error("Run %s crashed in state %s", run.run_id, run.state.value,
                      exc_info=exc)

    async def aclose(self) -> None:
        """Cancel unfinished runs at shutdown."""
        tasks = [run.task for run in self._runs.values() if run.task and not run.task.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._runs.clear()
