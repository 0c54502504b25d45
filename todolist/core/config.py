import os
from dotenv import load_dotenv

from todolist.core.errors import ConfigError

load_dotenv()

REQUIRED_SETTINGS = ("DATABASE_URL", "JWT_SECRET", "TELEGRAM_TOKEN")

class Settings:
	def __init__(self, **overrides):
		self.APP_NAME = os.getenv("APP_NAME", "Todo List")
		self.DATABASE_URL = os.getenv("DATABASE_URL", "")

		self.JWT_SECRET = os.getenv("JWT_SECRET", "")
		self.JWT_ALG = "HS256"
		self.ACCESS_TOKEN_EXPIRES_MIN = int(os.getenv("ACCESS_TOKEN_EXPIRES_MIN", "60"))

		self.TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "")
		self.TELEGRAM_BOT_USERNAME = os.getenv("TELEGRAM_BOT_USERNAME", "")
		self.TELEGRAM_AUTH_MAX_AGE_SEC = int(os.getenv("TELEGRAM_AUTH_MAX_AGE_SEC", "86400"))

		self.DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))
		self.DB_POOL_TIMEOUT_SEC = int(os.getenv("DB_POOL_TIMEOUT_SEC", "30"))
		self.DB_STATEMENT_TIMEOUT_SEC = int(os.getenv("DB_STATEMENT_TIMEOUT_SEC", "30"))

		self.HOST = os.getenv("HOST", "0.0.0.0")
		self.PORT = int(os.getenv("PORT", "3000"))

		for key, value in overrides.items():
			if not hasattr(self, key):
				raise ConfigError(f"Unknown setting: {key}")
			setattr(self, key, value)

	def validate(self) -> "Settings":
		missing = [name for name in REQUIRED_SETTINGS if not getattr(self, name)]
		if missing:
			raise ConfigError(f"Missing required settings: {', '.join(missing)}")
		if self.ACCESS_TOKEN_EXPIRES_MIN <= 0:
			raise ConfigError("ACCESS_TOKEN_EXPIRES_MIN must be positive")
		return self

settings = Settings()
