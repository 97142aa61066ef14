from __future__ import annotations

from dataclasses import dataclass

from pydantic import EmailStr, TypeAdapter, ValidationError

_EMAIL_ADAPTER = TypeAdapter(EmailStr)


@dataclass(frozen=True)
class ContactInfo:
    name: str = ""
    email: str = ""

    def normalized(self) -> "ContactInfo":
        return ContactInfo(name=(self.name or "").strip(), email=(self.email or "").strip())

    def validate(self) -> dict[str, str]:
        """Return field -> message for every invalid field; empty when valid."""
        contact = self.normalized()
        errors: dict[str, str] = {}
        if not contact.name:
            errors["name"] = "Please enter your name."
        if not contact.email:
            errors["email"] = "Please enter your email."
        else:
            try:
                _EMAIL_ADAPTER.validate_python(contact.email)
            except ValidationError:
                errors["email"] = "Please enter a valid email."
        return errors
