"""
Dispatcher
──────────
Receives file-system events for one watched directory, feeds each path to
the analyzer and hands outcomes to the action executor.

The watchdog observer thread only enqueues events. All analysis happens on
the thread that calls ``Dispatcher.run``, one event at a time, so the
analyzer needs no locking. A long analysis delays later events; the queue
absorbs them meanwhile.
"""

from __future__ import annotations

import logging
import os
import queue
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from watchdog.events import (
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from engine.analyzer import Analyzer
from engine.errors import DetectionError
from engine.models import AnalysisOutcome, BinaryFormat, KnownMalicious

from watcher.actions import ActionExecutor

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class EventKind(str, Enum):
    MODIFY = "modify"
    CREATE = "create"
    MOVED_IN = "moved_in"
    DELETE = "delete"
    OTHER = "other"


TRIGGERING_KINDS = frozenset({EventKind.MODIFY, EventKind.MOVED_IN})


@dataclass(frozen=True)
class FileEvent:
    kind: EventKind
    path: str


def translate_event(event: FileSystemEvent) -> FileEvent | None:
    """Map a watchdog event to a ``FileEvent``; directory events map to None."""
    if event.is_directory:
        return None
    if isinstance(event, FileMovedEvent):
        return FileEvent(EventKind.MOVED_IN, os.fsdecode(event.dest_path))

    path = os.fsdecode(event.src_path)
    if isinstance(event, FileModifiedEvent):
        return FileEvent(EventKind.MODIFY, path)
    if isinstance(event, FileCreatedEvent):
        return FileEvent(EventKind.CREATE, path)
    if isinstance(event, FileDeletedEvent):
        return FileEvent(EventKind.DELETE, path)
    return FileEvent(EventKind.OTHER, path)


class EventQueueHandler(FileSystemEventHandler):
    """Forwards watchdog events onto a queue for the dispatcher."""

    def __init__(self, events: queue.Queue) -> None:
        super().__init__()
        self.events = events

    def on_any_event(self, event: FileSystemEvent) -> None:
        translated = translate_event(event)
        if translated is not None:
            self.events.put(translated)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Dispatcher:
    def __init__(self, analyzer: Analyzer, executor: ActionExecutor | None = None) -> None:
        self.analyzer = analyzer
        self.executor = executor or ActionExecutor()

    def handle(self, event: FileEvent) -> list[AnalysisOutcome]:
        """Process one event to completion and return the outcomes produced."""
        logger.debug("%s %s", event.kind.value, event.path)

        self.analyzer.set_target(event.path)
        if event.kind not in TRIGGERING_KINDS:
            return []

        outcomes: list[AnalysisOutcome] = []
        try:
            outcome = self.analyzer.analyze_heuristic()
        except DetectionError as exc:
            logger.warning("Heuristic analysis failed: %s", exc)
            return outcomes
        outcomes.append(outcome)
        self.executor.execute(event.path, outcome)

        # no static phase after a signature hit
        if isinstance(outcome, KnownMalicious):
            return outcomes
        if self.analyzer.file_format is not BinaryFormat.ELF:
            return outcomes

        try:
            outcome = self.analyzer.analyze_static()
        except DetectionError as exc:
            logger.warning("Static analysis failed: %s", exc)
            return outcomes
        outcomes.append(outcome)
        self.executor.execute(event.path, outcome)
        return outcomes

    def run(self, events: queue.Queue) -> None:
        """Process events until a ``None`` sentinel arrives.

        Blocks for the next event, then drains whatever else is already
        queued and handles the batch in order.
        """
        while True:
            batch = [events.get()]
            while True:
                try:
                    batch.append(events.get_nowait())
                except queue.Empty:
                    break

            for event in batch:
                if event is None:
                    return
                try:
                    self.handle(event)
                except Exception:
                    logger.exception("Unexpected error while handling %s", event.path)


# ---------------------------------------------------------------------------
# Entry
# ---------------------------------------------------------------------------


def watch(
    directory: str | Path,
    analyzer: Analyzer,
    executor: ActionExecutor | None = None,
) -> None:
    """Watch *directory* (non-recursively) until interrupted.

    Raises ``OSError`` if the directory cannot be watched.
    """
    events: queue.Queue = queue.Queue()
    observer = Observer()
    observer.schedule(EventQueueHandler(events), str(directory), recursive=False)
    observer.start()
    logger.info("Watching at \"%s\"...", directory)

    try:
        Dispatcher(analyzer, executor).run(events)
    except KeyboardInterrupt:
        logger.info("Interrupted, stopping watcher")
    finally:
        observer.stop()
        observer.join()
