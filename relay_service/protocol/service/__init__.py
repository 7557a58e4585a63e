from relay_service.protocol.service.adapter_service import AdapterService, QueueSink

__all__ = ["AdapterService", "QueueSink"]
