from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from restapi.database import get_db
from restapi.dependencies import get_current_user_id
from restapi.schemas.user import PublicUser
from restapi.services.user_service import get_user_by_id, get_users

router = APIRouter(dependencies=[Depends(get_current_user_id)])


@router.get("/users/", response_model=list[PublicUser])
async def list_users(db: Session = Depends(get_db)):
    return [PublicUser.model_validate(user) for user in get_users(db)]


@router.get("/users/{user_id}", response_model=PublicUser)
async def get_user(user_id: int, db: Session = Depends(get_db)):
    user = get_user_by_id(db, user_id)
    if user is None:
        raise HTTPException(
            status_code=404, detail=f"The user with the id '{user_id}' could not be found."
        )
    return PublicUser.model_validate(user)
