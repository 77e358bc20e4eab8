# app/api/v1/routes/auth.py
from fastapi import APIRouter, Response, status

router = APIRouter(tags=["Authentication"])

# Match the exact path that the frontend is calling
@router.post("/jwt/logout", status_code=status.HTTP_200_OK)
async def logout(response: Response):
    """
    Logout endpoint that doesn't require authentication.
    JWTs are stateless, so this only clears the access token cookie if present.
    """
    response.delete_cookie(key="access_token")
    return {"detail": "Successfully logged out"}
