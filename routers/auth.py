from fastapi import APIRouter, Depends, HTTPException, status

import schemas
from dependencies import get_current_user, get_user_store
from repositories.users import UserStore
from utils.security import create_access_token

router = APIRouter()


@router.post("/login", response_model=schemas.LoginResponse)
def login(credentials: schemas.LoginRequest, users: UserStore = Depends(get_user_store)):
    """
    Vérifie l'email et le mot de passe (hash bcrypt) et retourne l'utilisateur
    sans son mot de passe, accompagné d'un token JWT.
    """
    user = users.authenticate(credentials.email, credentials.password)

    # Même réponse que l'email soit inconnu ou le mot de passe erroné
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(data={"sub": user["id"], "email": user["email"], "role": user.get("role")})
    return {**user, "access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=schemas.User)
def read_users_me(current_user: schemas.User = Depends(get_current_user)):
    """
    Retourne les informations de l'utilisateur actuellement connecté.
    """
    return current_user
