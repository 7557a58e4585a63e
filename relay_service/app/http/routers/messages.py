from contextlib import aclosing

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse, StreamingResponse

from relay_service.core.errors import UnsupportedFeatureError
from relay_service.core.logging import logger
from relay_service.protocol.schemas import ChatRequest

router = APIRouter(tags=["messages"])

SSE_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Expose-Headers": "Content-Type",
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.post("/messages")
async def create_message(request: Request, body: ChatRequest):
    """Answer a chat request as an event stream."""
    adapter_svc = request.app.state.adapter_svc

    # Everything that can still change the status code happens before streaming.
    try:
        prompt = adapter_svc.prepare(body)
    except UnsupportedFeatureError as e:
        logger.error(
            f"not implemented features in request ({', '.join(e.features)}): "
            f"{body.model_dump_json(indent=2)}"
        )
        return PlainTextResponse(str(e), status_code=400)
    except Exception as e:
        logger.exception(f"unexpected error: {e}")
        return PlainTextResponse(str(e), status_code=500)

    async def event_generator():
        async with aclosing(adapter_svc.stream(body, prompt)) as events:
            async for chunk in events:
                # Check disconnect BEFORE yielding
                if await request.is_disconnected():
                    logger.info(f"Client disconnected: model={body.model}")
                    break
                yield chunk

    return StreamingResponse(event_generator(), media_type="text/event-stream", headers=SSE_HEADERS)
