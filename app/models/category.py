from sqlalchemy import Column, Integer, String

from app.db.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    color = Column(String, nullable=True)

    def __init__(self, name, slug, color=None):
        self.name = name
        self.slug = slug
        self.color = color
