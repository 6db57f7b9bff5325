from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship

from formcreator.database import Base


class FormResponse(Base):
    __tablename__ = 'form_responses'

    id = Column(Integer, primary_key=True, autoincrement=True)
    form_id = Column(Integer, ForeignKey('forms.id'), nullable=False, index=True)
    phone_number = Column(Text, nullable=False)
    response_data = Column(JSON, nullable=False, default=dict)
    language = Column(String(2), nullable=False, default='en')
    submitted_at = Column(DateTime, default=datetime.utcnow)

    form = relationship("Form", back_populates="responses")
