"""Telegram transport for the chat commands.

Polls Telegram through python-telegram-bot and hands every command to
ChatCommands on a worker thread, so store access never blocks the loop.
"""

import asyncio
import logging
from typing import Optional

from telegram import Update
from telegram.ext import Application, ApplicationBuilder, CommandHandler, ContextTypes

from todolist.bot.commands import RETRY_TEXT, ChatCommands
from todolist.core.config import Settings, settings as default_settings
from todolist.core.logging import log_event
from todolist.db import session as db_session
from todolist.db.base import Base
from todolist.db import models  # noqa: F401

COMMANDS = ("start", "help", "list", "add", "delete", "edit")


def split_command(text: str) -> tuple[str, str]:
	"""'/edit@todo_bot 2 new text' -> ('edit', '2 new text')"""
	head, _, rest = (text or "").strip().partition(" ")
	command = head.lstrip("/").split("@", 1)[0].lower()
	return command, rest.strip()


class TodoBot:
	def __init__(self, token: str, commands: ChatCommands):
		self.token = token
		self.commands = commands
		self.app: Optional[Application] = None

	async def on_command(self, update: Update, ctx: ContextTypes.DEFAULT_TYPE):
		message = update.effective_message
		user = update.effective_user
		if message is None or user is None:
			return
		command, args = split_command(message.text)
		reply = await asyncio.to_thread(
			self.commands.dispatch, command, user.id, args, user.first_name
		)
		await message.reply_text(reply)

	async def on_error(self, update: object, ctx: ContextTypes.DEFAULT_TYPE):
		log_event("telegram_error", level=logging.ERROR, error=repr(ctx.error))
		if isinstance(update, Update) and update.effective_message is not None:
			await update.effective_message.reply_text(RETRY_TEXT)

	def build(self) -> Application:
		self.app = ApplicationBuilder().token(self.token).build()
		for name in COMMANDS:
			self.app.add_handler(CommandHandler(name, self.on_command))
		self.app.add_error_handler(self.on_error)
		return self.app

	def run(self) -> None:
		app = self.build()
		log_event("telegram_bot_started", commands=list(COMMANDS))
		app.run_polling(allowed_updates=Update.ALL_TYPES)


def main(settings: Optional[Settings] = None) -> None:
	settings = (settings or default_settings).validate()
	engine = db_session.init_engine(settings)
	Base.metadata.create_all(bind=engine)
	TodoBot(settings.TELEGRAM_TOKEN, ChatCommands(db_session.SessionLocal)).run()
