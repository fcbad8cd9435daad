"""
Registration Helpers
====================
As-you-type formatting for the sign-up form and the few checks made
before the form is sent. Anything deeper (CPF check digits, duplicate
e-mail, trainer code lookup) is the backend's job.
"""

from __future__ import annotations

import re

from fittrack.errors import PreconditionError
from fittrack.models.user import MIN_PASSWORD_LENGTH, RegistrationForm

_NON_DIGITS = re.compile(r"\D")
_CPF = re.compile(r"(\d{3})(\d{3})(\d{3})(\d{2})")
_LANDLINE = re.compile(r"(\d{2})(\d{4})(\d{4})")
_MOBILE = re.compile(r"(\d{2})(\d{5})(\d{4})")


def digits_only(value: str) -> str:
    return _NON_DIGITS.sub("", value)


def format_cpf(value: str) -> str:
    """``12345678901`` -> ``123.456.789-01``. Partial input stays bare digits."""
    return _CPF.sub(r"\1.\2.\3-\4", digits_only(value), count=1)


def format_phone(value: str) -> str:
    """Landline (10 digits) or mobile (11 digits) with area code in parens."""
    numbers = digits_only(value)
    pattern = _LANDLINE if len(numbers) <= 10 else _MOBILE
    return pattern.sub(r"(\1) \2-\3", numbers, count=1)


def validate(form: RegistrationForm) -> None:
    if form.password != form.confirm_password:
        raise PreconditionError("Passwords do not match")
    if len(form.password) < MIN_PASSWORD_LENGTH:
        raise PreconditionError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )


def to_payload(form: RegistrationForm) -> dict:
    """The body /api/register expects, formatting stripped."""
    payload = {
        "nome_completo": form.full_name,
        "email": form.email,
        "telefone": digits_only(form.phone),
        "data_nascimento": form.birth_date,
        "cpf": digits_only(form.cpf),
        "senha": form.password,
        "tipo_usuario": form.role,
    }
    # A trainer code only means something for students linking to a trainer.
    if form.role == "aluno" and form.trainer_code:
        payload["codigo_personal"] = form.trainer_code
    return payload
