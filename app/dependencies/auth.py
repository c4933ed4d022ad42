from fastapi import Depends, HTTPException
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from config.settings import JWT_SECRET, JWT_ALGORITHM
from app.models.auth_models import User
from app.models.baby_model import Baby
from config.database import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="api/auth/login")


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
        email = payload.get("sub")
        if email is None:
            raise HTTPException(status_code=401, detail="Token inválido")
    except JWTError:
        raise HTTPException(status_code=401, detail="Token inválido")

    user = db.query(User).filter(User.email == email).first()
    if user is None:
        raise HTTPException(status_code=401, detail="Usuário não encontrado")
    return user


def require_baby_owner(baby_id: str, db: Session, current_user: User) -> Baby:
    """Garante que o bebê existe e pertence ao usuário logado."""
    baby = db.query(Baby).filter_by(id=baby_id, user_id=current_user.id).first()
    if baby is None:
        raise HTTPException(status_code=404, detail="Bebê não encontrado.")
    return baby
