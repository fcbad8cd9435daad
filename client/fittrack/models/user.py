"""
User & Account Schemas
======================
Pydantic models for the logged-in user, the registration form, and the
students a trainer sees on their dashboard.
"""

from __future__ import annotations

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


UserRole = Literal["aluno", "personal_trainer"]

MIN_PASSWORD_LENGTH = 6


class User(BaseModel):
    """The account returned by /api/me, /api/login and /api/register."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    full_name: str = Field(default="", alias="nome_completo")
    email: str = ""
    phone: Optional[str] = Field(default=None, alias="telefone")
    role: UserRole = Field(alias="tipo_usuario")
    # Only trainers have one; students type it in at sign-up to link up.
    trainer_code: Optional[str] = Field(default=None, alias="codigo_personal")

    @property
    def is_trainer(self) -> bool:
        return self.role == "personal_trainer"


class Student(BaseModel):
    """A student linked to the logged-in trainer."""

    model_config = ConfigDict(populate_by_name=True)

    id: Union[int, str]
    full_name: str = Field(default="", alias="nome_completo")
    email: str = ""
    phone: Optional[str] = Field(default=None, alias="telefone")


class LoginRequest(BaseModel):
    email: str
    password: str


class RegistrationForm(BaseModel):
    """What the sign-up screen collects, formatting included.

    CPF and phone may arrive formatted ("123.456.789-01", "(11) 99999-9999");
    ``services.registration`` strips them before anything is sent.
    """

    full_name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    phone: str
    birth_date: str  # yyyy-mm-dd, passed through untouched
    cpf: str
    password: str
    confirm_password: str
    role: UserRole
    trainer_code: Optional[str] = Field(default=None, max_length=6)
