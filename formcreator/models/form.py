from datetime import datetime

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, JSON
from sqlalchemy.orm import relationship

from formcreator.database import Base


class Form(Base):
    __tablename__ = 'forms'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(JSON, nullable=False)
    description = Column(JSON, nullable=True)
    fields = Column(JSON, nullable=False, default=list)
    submit_button_text = Column(JSON, nullable=True)
    hero_image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow)

    responses = relationship("FormResponse", back_populates="form")
