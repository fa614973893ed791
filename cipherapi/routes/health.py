from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/health")
async def get_health(request: Request):
    cipher = getattr(request.app.state, "cipher", None)
    if cipher is None:
        return {"status": "degraded", "cipher": "uninitialized"}

    return {
        "status": "ok",
        "cipher": cipher.algorithm
    }
