"""SQLAlchemy database models."""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from trainingcog.core.database import Base


# Role catalogue shown in the admin area.
# livello_accesso orders the list for display; enforcement uses the route table.
class RoleInfo(Base):
    __tablename__ = "ruoli"
    id = Column(Integer, primary_key=True, index=True)
    codice = Column(String, unique=True, index=True, nullable=False)
    nome = Column(String, nullable=False)
    descrizione = Column(String, nullable=True)
    livello_accesso = Column(Integer, nullable=False, default=0)


# Physical sites (sedi) that users and educators belong to.
class Sede(Base):
    __tablename__ = "sedi"
    id = Column(Integer, primary_key=True, index=True)
    nome = Column(String, unique=True, nullable=False)
    indirizzo = Column(String, nullable=True)
    citta = Column(String, nullable=True)
    provincia = Column(String, nullable=True)
    cap = Column(String, nullable=True)
    telefono = Column(String, nullable=True)
    email = Column(String, nullable=True)
    stato = Column(String, nullable=False, default="attiva")  # attiva | sospesa | chiusa
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    profiles = relationship("Profile", back_populates="sede")


# One profile per identity. id is the identity provider's user id.
class Profile(Base):
    __tablename__ = "profiles"
    id = Column(String, primary_key=True, index=True)
    nome = Column(String, nullable=False)
    cognome = Column(String, nullable=False)
    ruolo = Column(String, nullable=False, index=True)
    id_sede = Column(Integer, ForeignKey("sedi.id", ondelete="SET NULL"), nullable=True)
    stato = Column(String, nullable=False, default="attivo")  # attivo | sospeso | eliminato
    ultimo_accesso = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    sede = relationship("Sede", back_populates="profiles")


# Tokens issued by the identity provider, as visible to this service.
class AuthSession(Base):
    __tablename__ = "auth_sessions"
    token = Column(String, primary_key=True)
    id_utente = Column(String, nullable=False, index=True)
    revoked = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


# Redirected or denied page requests, for auditing.
class AccessLog(Base):
    __tablename__ = "log_accessi"
    id = Column(Integer, primary_key=True, index=True)
    id_utente = Column(String, nullable=True)
    path = Column(String, nullable=False)
    esito = Column(String, nullable=False)  # successo | fallimento
    motivo = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
