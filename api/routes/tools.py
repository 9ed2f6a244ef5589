"""Password tools endpoints.

Public endpoint for one-off password generation.
"""

from fastapi import APIRouter, HTTPException

from api.models import PasswordGenerateRequest, PasswordGenerateResponse
from core import EntropyError, GenerationSpec, ValidationError, generate_password


router = APIRouter(tags=["Password Tools"])


@router.post("/generate", response_model=PasswordGenerateResponse)
async def generate_new_password(request: PasswordGenerateRequest):
    """Generate a secure random password."""
    if request.character_sets is None:
        spec = GenerationSpec.from_lists(
            request.length, [cs.chars for cs in GenerationSpec.default().character_sets]
        )
    else:
        spec = GenerationSpec.from_lists(
            request.length,
            [cs.chars for cs in request.character_sets],
            [cs.min_count for cs in request.character_sets],
        )

    try:
        password = generate_password(spec)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EntropyError:
        raise HTTPException(status_code=503, detail="Secure random source unavailable")

    return PasswordGenerateResponse(password=password, length=len(password))
