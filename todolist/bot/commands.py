"""Chat command handlers.

Each handler takes the platform's numeric user id and the free text that
followed the command, and returns the reply text. Transport concerns
(polling, sending) live in ``todolist.bot.telegram``.
"""

from typing import Callable, Dict, List, Optional

from sqlalchemy.orm import Session

from todolist.core.errors import (
	AuthError,
	NotFoundOrForbidden,
	ServiceUnavailable,
	ValidationError,
)
from todolist.core.logging import log_event
from todolist.db.models import Item, User
from todolist.services.identity import IdentityResolver
from todolist.services.item_service import ItemService

HELP_TEXT = (
	"Available commands:\n"
	"/list - show all tasks\n"
	"/add <text> - add a new task\n"
	"/delete <number> - delete a task\n"
	"/edit <number> <new text> - change a task"
)

NOT_LINKED_TEXT = "Link your account on the website first to work with your tasks."
RETRY_TEXT = "Something went wrong, please try again later."
BAD_NUMBER_TEXT = "Invalid task number."


class ChatCommands:
	"""Command name -> handler table sharing the web item service.

	Args:
		session_factory: Callable returning a new SQLAlchemy session per command.
	"""

	def __init__(self, session_factory: Callable[[], Session]):
		self.session_factory = session_factory
		self.handlers: Dict[str, Callable[[Session, int, str], str]] = {
			"list": self.list,
			"add": self.add,
			"delete": self.delete,
			"edit": self.edit,
		}

	def start(self, chat_user_id: int, first_name: Optional[str] = None) -> str:
		greeting = f"Hi, {first_name}!" if first_name else "Hi!"
		return (
			f"{greeting} I manage your to-do list.\n\n"
			"To get started, link this Telegram account on the website.\n\n"
			f"{HELP_TEXT}"
		)

	def dispatch(self, command: str, chat_user_id: int, args: str = "", first_name: Optional[str] = None) -> str:
		command = command.lower().lstrip("/")
		if command in ("start", "help"):
			return self.start(chat_user_id, first_name)
		handler = self.handlers.get(command)
		if handler is None:
			return f"Unknown command.\n\n{HELP_TEXT}"

		db = self.session_factory()
		try:
			return handler(db, chat_user_id, (args or "").strip())
		except AuthError:
			return NOT_LINKED_TEXT
		except ValidationError as exc:
			return exc.message
		except NotFoundOrForbidden:
			return "Task not found."
		except ServiceUnavailable:
			log_event("chat_command_failed", command=command, telegram_id=chat_user_id)
			return RETRY_TEXT
		finally:
			db.close()

	def _owner(self, db: Session, chat_user_id: int) -> User:
		return IdentityResolver(db).resolve_from_chat_identity(chat_user_id)

	@staticmethod
	def _pick(items: List[Item], position: str) -> Optional[Item]:
		# isdigit() alone also accepts superscripts and other non-ASCII digits.
		if not (position.isascii() and position.isdigit()):
			return None
		index = int(position)
		if index < 1 or index > len(items):
			return None
		return items[index - 1]

	def list(self, db: Session, chat_user_id: int, args: str) -> str:
		user = self._owner(db, chat_user_id)
		items = ItemService(db).list(user.id)
		if not items:
			return "You have no tasks yet. Add the first one with /add <text>"
		lines = "\n".join(f"{index}. {item.text}" for index, item in enumerate(items, start=1))
		return f"Your tasks:\n\n{lines}"

	def add(self, db: Session, chat_user_id: int, args: str) -> str:
		if not args:
			return "Usage: /add <text>"
		user = self._owner(db, chat_user_id)
		item = ItemService(db).add(user.id, args)
		return f'Task "{item.text}" added.'

	def delete(self, db: Session, chat_user_id: int, args: str) -> str:
		if not args:
			return "Usage: /delete <number>"
		user = self._owner(db, chat_user_id)
		service = ItemService(db)
		item = self._pick(service.list(user.id), args.split()[0])
		if item is None:
			return BAD_NUMBER_TEXT
		text = item.text
		service.delete(user.id, item.id)
		return f'Task "{text}" deleted.'

	def edit(self, db: Session, chat_user_id: int, args: str) -> str:
		parts = args.split(maxsplit=1)
		if len(parts) < 2:
			return "Usage: /edit <number> <new text>"
		user = self._owner(db, chat_user_id)
		service = ItemService(db)
		item = self._pick(service.list(user.id), parts[0])
		if item is None:
			return BAD_NUMBER_TEXT
		old_text = item.text
		service.update(user.id, item.id, parts[1])
		return f'Task changed from "{old_text}" to "{parts[1].strip()}".'
