from sqlalchemy import Column, Integer, String, Text
from database import Base, new_id


class Problem(Base):
    __tablename__ = "problems"

    id = Column(String(32), primary_key=True, default=new_id)
    display_id = Column(Integer, unique=True, nullable=False, index=True)  # gapless, starts at 1
    title = Column(String(300), nullable=False)
    difficulty = Column(String(10), nullable=False)  # Easy/Medium/Hard
    category = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    functional_requirements = Column(Text, nullable=False)  # JSON array of strings
    non_functional_requirements = Column(Text, nullable=False)  # JSON array of strings
    hints = Column(Text, nullable=False)  # JSON array of {id, title, content}
    reference_solution = Column(Text, nullable=False)  # markdown
