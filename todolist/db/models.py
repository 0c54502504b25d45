from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from datetime import datetime
from todolist.db.base import Base

ITEM_TEXT_MAX = 255

class User(Base):
	__tablename__ = "users"

	id = Column(Integer, primary_key=True, index=True)
	email = Column(String(255), unique=True, index=True, nullable=True)
	password_hash = Column(String(255), nullable=True)
	first_name = Column(String(255), nullable=True)
	last_name = Column(String(255), nullable=True)

	# Chat identity, bound at most once by the account linker.
	telegram_id = Column(BigInteger, unique=True, index=True, nullable=True)
	telegram_first_name = Column(String(255), nullable=True)
	telegram_last_name = Column(String(255), nullable=True)
	telegram_username = Column(String(255), nullable=True)
	telegram_auth_date = Column(Integer, nullable=True)

	created_at = Column(DateTime, default=datetime.utcnow)

	items = relationship(
		"Item",
		back_populates="owner",
		cascade="all, delete-orphan",
		passive_deletes=True,
		order_by="Item.id",
	)

	@property
	def telegram_linked(self) -> bool:
		return self.telegram_id is not None

class Item(Base):
	__tablename__ = "items"

	id = Column(Integer, primary_key=True, index=True)
	text = Column(String(ITEM_TEXT_MAX), nullable=False)
	owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	created_at = Column(DateTime, default=datetime.utcnow)

	owner = relationship("User", back_populates="items")
