import asyncio
import threading
from typing import AsyncGenerator, List, Optional

from relay_service.core.errors import BackendError, StreamWriteError
from relay_service.core.interfaces import CompletionBackend, EventSink, ToolExtractor
from relay_service.core.logging import logger
from relay_service.protocol.orchestration.emitter import EventStreamEmitter, SseEncoder
from relay_service.protocol.prompts import PromptComposer, prompt_for_logging
from relay_service.protocol.schemas import ChatRequest


class QueueSink(EventSink):
    """Hands frames written on a worker thread to an asyncio.Queue on the event loop."""

    SENTINEL = object()

    def __init__(self, loop: asyncio.AbstractEventLoop, queue: asyncio.Queue):
        self._loop = loop
        self._queue = queue
        self._closed = threading.Event()

    def _put(self, item) -> None:
        self._loop.call_soon_threadsafe(self._queue.put_nowait, item)

    def write(self, data: bytes) -> None:
        if self._closed.is_set():
            raise StreamWriteError("peer disconnected")
        try:
            self._put(data)
        except RuntimeError as e:  # event loop already closed
            self._closed.set()
            raise StreamWriteError(str(e)) from e

    def close(self) -> None:
        """Called from the consumer side when nobody reads the stream anymore."""
        self._closed.set()

    def finish(self) -> None:
        """Called from the producer side once nothing more will be written."""
        try:
            self._put(self.SENTINEL)
        except RuntimeError:
            logger.debug("Event loop closed before end-of-stream could be signalled")


class AdapterService:
    """
    Drives one request through the backend and replays the answer as events.

    prepare() validates and composes before any response is started, so the
    caller can still answer with an error status. run() does the streaming
    work synchronously against a sink; stream() runs it on a worker thread
    for async callers.
    """
    def __init__(
        self,
        backend: CompletionBackend,
        extractor: ToolExtractor,
        composer: Optional[PromptComposer] = None,
        encoder: Optional[SseEncoder] = None,
    ):
        self.backend = backend
        self.extractor = extractor
        self.composer = composer or PromptComposer()
        self.encoder = encoder or SseEncoder()

    def prepare(self, request: ChatRequest) -> str:
        """Compose the prompt. Raises UnsupportedFeatureError."""
        prompt = self.composer.compose(request)
        logger.info(f"req: {prompt_for_logging(prompt)}")
        return prompt

    def run(self, request: ChatRequest, prompt: str, sink: EventSink) -> str:
        """
        Stream one response onto `sink` and return the backend's answer.

        A failed write stops emission for the rest of the request; the backend
        call is left to finish on its own. A backend failure raises
        BackendError with the stream left open-ended (no stop events, no
        terminator), which the peer must treat as a failed turn.
        """
        emitter = EventStreamEmitter(sink, request.model, encoder=self.encoder)
        received: List[str] = []

        def on_fragment(text: str) -> None:
            received.append(text)
            if emitter.closed:
                return
            try:
                emitter.text_delta(text)
            except StreamWriteError as e:
                logger.warning(f"Write to peer failed, dropping the rest of the stream: {e}")

        try:
            emitter.start()
        except StreamWriteError as e:
            logger.warning(f"Write to peer failed before the backend was called: {e}")
            return ""

        logger.info(f"model: {request.model}")
        try:
            result = self.backend.complete(request.model, prompt, on_fragment)
        except BackendError:
            raise
        except Exception as e:
            raise BackendError(str(e)) from e

        answer = "".join(received)
        if not received and result:
            # Backend answered without calling back; replay it as one delta.
            answer = result
            on_fragment(result)
        logger.info(f"resp: {answer}")

        if emitter.closed:
            logger.warning("Peer went away during the completion; answer discarded")
            return answer

        try:
            emitter.finish_text_block()
            for invocation in self.extractor.extract(answer):
                emitter.tool_block(invocation)
            emitter.terminate()
        except StreamWriteError as e:
            logger.warning(f"Write to peer failed, stream aborted: {e}")
        return answer

    async def stream(self, request: ChatRequest, prompt: str) -> AsyncGenerator[bytes, None]:
        """Run the request on a worker thread and yield encoded frames as they are written."""
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        sink = QueueSink(loop, queue)

        def produce():
            try:
                self.run(request, prompt, sink)
            except BackendError as e:
                logger.error(f"failed to chat completion: {e}")
            except Exception as e:
                logger.exception(f"Unexpected error while streaming: {e}")
            finally:
                sink.finish()

        t = threading.Thread(target=produce, name="relay-backend", daemon=True)
        t.start()

        try:
            while True:
                item = await queue.get()
                if item is QueueSink.SENTINEL:
                    break
                yield item
        finally:
            sink.close()

    def ready(self) -> bool:
        return self.backend.ready()
