from typing import List

from sqlalchemy.orm import Session

from todolist.core.errors import NotFoundOrForbidden, ValidationCode, ValidationError
from todolist.core.logging import log_event
from todolist.db.models import ITEM_TEXT_MAX, Item
from todolist.db.session import store_call


def clean_text(text) -> str:
	if not isinstance(text, str) or not text.strip():
		raise ValidationError(ValidationCode.EMPTY_TEXT, "Task text must not be empty")
	text = text.strip()
	if len(text) > ITEM_TEXT_MAX:
		raise ValidationError(
			ValidationCode.TEXT_TOO_LONG,
			f"Task text must be at most {ITEM_TEXT_MAX} characters",
		)
	return text


class ItemService:
	"""CRUD on items, every call scoped to the resolved owner id."""

	def __init__(self, db: Session):
		self.db = db

	def list(self, owner_id: int) -> List[Item]:
		with store_call(self.db, "list_items"):
			return (
				self.db.query(Item)
				.filter(Item.owner_id == owner_id)
				.order_by(Item.id.asc())
				.all()
			)

	def add(self, owner_id: int, text) -> Item:
		text = clean_text(text)
		with store_call(self.db, "add_item"):
			item = Item(text=text, owner_id=owner_id)
			self.db.add(item)
			self.db.commit()
			self.db.refresh(item)
		log_event("item_created", item_id=item.id, owner_id=owner_id)
		return item

	def update(self, owner_id: int, item_id: int, text) -> None:
		text = clean_text(text)
		with store_call(self.db, "update_item"):
			affected = (
				self.db.query(Item)
				.filter(Item.id == item_id, Item.owner_id == owner_id)
				.update({Item.text: text}, synchronize_session=False)
			)
			self.db.commit()
		if not affected:
			log_event("item_update_missed", item_id=item_id, owner_id=owner_id)
			raise NotFoundOrForbidden()
		log_event("item_updated", item_id=item_id, owner_id=owner_id)

	def delete(self, owner_id: int, item_id: int) -> None:
		with store_call(self.db, "delete_item"):
			affected = (
				self.db.query(Item)
				.filter(Item.id == item_id, Item.owner_id == owner_id)
				.delete(synchronize_session=False)
			)
			self.db.commit()
		if not affected:
			log_event("item_delete_missed", item_id=item_id, owner_id=owner_id)
			raise NotFoundOrForbidden()
		log_event("item_deleted", item_id=item_id, owner_id=owner_id)
