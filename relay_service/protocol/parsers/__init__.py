from relay_service.protocol.parsers.use_tags import UseTagExtractor

__all__ = ["UseTagExtractor"]
