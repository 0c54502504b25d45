from html import escape
from typing import Iterable

from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from todolist.core.logging import log_event
from todolist.db.models import Item, User
from todolist.db.session import get_db
from todolist.dependencies import get_current_user
from todolist.schemas.items import ItemCreate, ItemOut, ItemUpdate
from todolist.services.item_service import ItemService

router = APIRouter(tags=["items"])

# items.id is a 32-bit signed column.
ITEM_ID_MAX = 2**31 - 1

ROW_TEMPLATE = (
	'<tr id="row-{id}">'
	"<td>{position}</td>"
	'<td class="item-text">{text}</td>'
	"<td>"
	'<button class="action-btn edit-btn" data-id="{id}" data-text="{text}">Edit</button>'
	'<button class="action-btn delete-btn" data-id="{id}">Delete</button>'
	"</td>"
	"</tr>"
)

def render_rows(items: Iterable[Item]) -> str:
	return "".join(
		ROW_TEMPLATE.format(id=item.id, position=index, text=escape(item.text, quote=True))
		for index, item in enumerate(items, start=1)
	)

def _list_response(service: ItemService, user: User) -> dict:
	items = service.list(user.id)
	return {
		"success": True,
		"rows": render_rows(items),
		"items": [ItemOut.model_validate(item).model_dump() for item in items],
	}

@router.get("/list")
def list_items(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
	return _list_response(ItemService(db), user)

@router.post("/add")
def add_item(
	payload: ItemCreate,
	db: Session = Depends(get_db),
	user: User = Depends(get_current_user),
):
	service = ItemService(db)
	item = service.add(user.id, payload.text)
	log_event("add_ok", item_id=item.id)
	return _list_response(service, user)

@router.put("/edit/{item_id}")
def edit_item(
	payload: ItemUpdate,
	item_id: int = Path(ge=1, le=ITEM_ID_MAX),
	db: Session = Depends(get_db),
	user: User = Depends(get_current_user),
):
	service = ItemService(db)
	service.update(user.id, item_id, payload.text)
	return _list_response(service, user)

@router.delete("/delete/{item_id}")
def delete_item(
	item_id: int = Path(ge=1, le=ITEM_ID_MAX),
	db: Session = Depends(get_db),
	user: User = Depends(get_current_user),
):
	service = ItemService(db)
	service.delete(user.id, item_id)
	log_event("delete_ok", item_id=item_id)
	return _list_response(service, user)
