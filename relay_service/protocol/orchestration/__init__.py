from relay_service.protocol.orchestration.emitter import (
    EventStreamEmitter,
    ListSink,
    SseEncoder,
    random_id,
)

__all__ = ["EventStreamEmitter", "ListSink", "SseEncoder", "random_id"]
