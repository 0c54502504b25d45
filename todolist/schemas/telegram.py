from typing import Any, Dict

from pydantic import BaseModel

class TelegramCallbackRequest(BaseModel):
	# Widget fields are kept verbatim; all of them take part in the signature.
	user: Dict[str, Any]
	token: str
