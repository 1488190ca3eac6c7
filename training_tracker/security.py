from fastapi import Request, HTTPException

async def get_current_user_id(request: Request) -> str:
    user_id = request.session.get("user_id")
    if not user_id:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return user_id

def login_session(request: Request, user_id: str) -> None:
    request.session["user_id"] = user_id

def clear_session(request: Request) -> None:
    request.session.clear()
