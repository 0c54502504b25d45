from pydantic import BaseModel, ConfigDict

class ItemCreate(BaseModel):
	text: str

class ItemUpdate(BaseModel):
	text: str

class ItemOut(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: int
	text: str
