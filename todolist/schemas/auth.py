from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

class RegisterRequest(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	email: EmailStr
	password: str = Field(min_length=8, max_length=72)
	first_name: Optional[str] = Field(None, alias="firstName", max_length=255)
	last_name: Optional[str] = Field(None, alias="lastName", max_length=255)

	@field_validator("password")
	@classmethod
	def password_complexity(cls, v):
		if not any(c.isalpha() for c in v) or not any(c.isdigit() for c in v):
			raise ValueError("Password must contain at least one letter and one digit")
		return v

class LoginRequest(BaseModel):
	email: EmailStr
	password: str

class UserOut(BaseModel):
	model_config = ConfigDict(from_attributes=True, populate_by_name=True)

	id: int
	email: Optional[str] = None
	first_name: Optional[str] = Field(None, serialization_alias="firstName")
	last_name: Optional[str] = Field(None, serialization_alias="lastName")
	telegram_linked: bool = Field(False, serialization_alias="telegramLinked")

def public_user(user) -> dict:
	return UserOut.model_validate(user).model_dump(by_alias=True)
