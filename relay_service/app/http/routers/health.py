from fastapi import APIRouter, Request

router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz():
    return {"ok": True}


@router.get("/readyz")
def readyz(request: Request):
    """Backend: reports itself able to take a completion."""
    svc = request.app.state.adapter_svc
    try:
        backend_ready = svc.ready()
    except Exception as e:
        return {"ready": False, "backend": False, "error": str(e)}
    return {"ready": backend_ready, "backend": backend_ready}
