"""Pydantic schemas for request/response validation."""
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# --- Role Schemas ---
class RoleBase(BaseModel):
    codice: str
    nome: str
    descrizione: Optional[str] = None
    livello_accesso: int = 0


class RoleCreate(RoleBase):
    pass


class RoleResponse(RoleBase):
    id: int

    class Config:
        from_attributes = True


# --- Sede Schemas ---
class SedeBase(BaseModel):
    nome: str = Field(min_length=1)
    indirizzo: Optional[str] = None
    citta: Optional[str] = None
    provincia: Optional[str] = None
    cap: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    stato: str = Field(default="attiva", pattern="^(attiva|sospesa|chiusa)$")


class SedeCreate(SedeBase):
    pass


class SedeUpdate(BaseModel):
    nome: Optional[str] = Field(default=None, min_length=1)
    indirizzo: Optional[str] = None
    citta: Optional[str] = None
    provincia: Optional[str] = None
    cap: Optional[str] = None
    telefono: Optional[str] = None
    email: Optional[str] = None
    stato: Optional[str] = Field(default=None, pattern="^(attiva|sospesa|chiusa)$")


class SedeResponse(SedeBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Profile Schemas ---
class ProfileBase(BaseModel):
    nome: str
    cognome: str
    ruolo: str
    id_sede: Optional[int] = None
    stato: str = "attivo"


class ProfileCreate(ProfileBase):
    id: str


class ProfileResponse(ProfileBase):
    id: str
    ultimo_accesso: Optional[datetime] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


# --- Identity token registration (seed) ---
class SessionCreate(BaseModel):
    token: str = Field(min_length=8)
    id_utente: str


class SessionResponse(BaseModel):
    token: str
    id_utente: str
    revoked: bool

    class Config:
        from_attributes = True


# --- Access check Schemas ---
class AccessCheckRequest(BaseModel):
    role: Optional[str] = None
    path: str


class AccessCheckResponse(BaseModel):
    path: str
    role: Optional[str] = None
    route_class: str
    allowed: bool
    redirect_to: Optional[str] = None


class CacheClearResponse(BaseModel):
    cleared: int


# --- Access log ---
class AccessLogResponse(BaseModel):
    id: int
    id_utente: Optional[str] = None
    path: str
    esito: str
    motivo: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
