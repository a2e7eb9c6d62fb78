"""Background recognition: run the pipeline off the UI thread.

Each recognition request gets its own ``RecognitionWorker`` thread with its
own buffers. ``RecognitionController`` numbers the requests and only
forwards the result of the most recent one: when the user resumes playback
or triggers a new recognition before the previous one finished, the older
result is dropped on arrival instead of overwriting the newer state.
"""

from __future__ import annotations

import logging

from PyQt6.QtCore import QObject, QThread, pyqtSignal, pyqtSlot

from subtitle_region_reader.debug_service import DebugService
from subtitle_region_reader.frame import RawFrame
from subtitle_region_reader.ocr_engine import OcrEngine
from subtitle_region_reader.pipeline import recognize_subtitle_region
from subtitle_region_reader.settings import RecognitionConfig

logger = logging.getLogger(__name__)


class RecognitionWorker(QThread):
    """Thread that runs one recognition request.

    Signals:
    - text_recognized(int, str): request id, cleaned text (may be empty)
    - error_occurred(int, str): request id, error message
    """
    text_recognized = pyqtSignal(int, str)
    error_occurred = pyqtSignal(int, str)

    def __init__(
        self,
        request_id: int,
        frame: RawFrame,
        config: RecognitionConfig,
        engine: OcrEngine,
        debug: DebugService | None = None,
    ) -> None:
        super().__init__()
        self._request_id = request_id
        self._frame = frame
        self._config = config
        self._engine = engine
        self._debug = debug

    @property
    def request_id(self) -> int:
        return self._request_id

    def run(self) -> None:
        try:
            text = recognize_subtitle_region(
                self._frame, self._config, self._engine, self._debug
            )
        except Exception as e:
            logger.error("Recognition %d failed: %s", self._request_id, e, exc_info=True)
            self.error_occurred.emit(self._request_id, str(e))
            return
        self.text_recognized.emit(self._request_id, text)


class RecognitionController(QObject):
    """Starts recognition requests and forwards only the latest result.

    Signals:
    - text_recognized(int, str): request id, cleaned text
    - recognition_failed(int, str): request id, error message. The UI should
      offer a retry; the same frame will fail the same way if retried blindly.
    """
    text_recognized = pyqtSignal(int, str)
    recognition_failed = pyqtSignal(int, str)

    def __init__(
        self,
        engine: OcrEngine,
        config: RecognitionConfig | None = None,
        debug: DebugService | None = None,
    ) -> None:
        super().__init__()
        self._engine = engine
        self._config = config or RecognitionConfig()
        self._debug = debug
        self._last_id = 0
        self._current_id: int | None = None
        self._workers: dict[int, RecognitionWorker] = {}

    def set_config(self, config: RecognitionConfig) -> None:
        config.validate()
        self._config = config
        logger.info("Recognition configured: %s", config)

    @property
    def pending_request(self) -> int | None:
        return self._current_id

    def recognize(self, frame: RawFrame) -> int:
        """Start recognizing a frame; supersedes any request still running."""
        self._last_id += 1
        request_id = self._last_id
        self._current_id = request_id

        worker = RecognitionWorker(
            request_id, frame, self._config, self._engine, self._debug
        )
        worker.text_recognized.connect(self._on_text_recognized)
        worker.error_occurred.connect(self._on_error)
        worker.finished.connect(self._on_worker_finished)
        self._workers[request_id] = worker
        worker.start()
        return request_id

    def cancel(self) -> None:
        """Abandon the pending request; its result will be discarded."""
        if self._current_id is not None:
            logger.debug("Recognition %d cancelled", self._current_id)
        self._current_id = None

    def wait_for_idle(self, timeout_ms: int = 5000) -> bool:
        """Block until every started worker has finished."""
        return all(w.wait(timeout_ms) for w in list(self._workers.values()))

    @pyqtSlot(int, str)
    def _on_text_recognized(self, request_id: int, text: str) -> None:
        if request_id != self._current_id:
            logger.debug("Dropping stale result of request %d", request_id)
            return
        self._current_id = None
        self.text_recognized.emit(request_id, text)

    @pyqtSlot(int, str)
    def _on_error(self, request_id: int, message: str) -> None:
        if request_id != self._current_id:
            logger.debug("Dropping stale error of request %d", request_id)
            return
        self._current_id = None
        self.recognition_failed.emit(request_id, message)

    @pyqtSlot()
    def _on_worker_finished(self) -> None:
        worker = self.sender()
        if isinstance(worker, RecognitionWorker):
            worker.wait()
            self._workers.pop(worker.request_id, None)
