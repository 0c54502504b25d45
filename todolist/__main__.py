import sys

from todolist.bot.telegram import main as run_bot
from todolist.main import run as run_web

if __name__ == "__main__":
	if len(sys.argv) > 1 and sys.argv[1] == "bot":
		run_bot()
	else:
		run_web()
