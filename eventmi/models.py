from sqlalchemy import Column, Integer, String, DateTime

from eventmi.database import Base

NAME_MAX_LENGTH = 50
PLACE_MAX_LENGTH = 50


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(NAME_MAX_LENGTH), nullable=False, index=True)
    start = Column(DateTime, nullable=False)  # naive, in the wire timezone
    end = Column(DateTime, nullable=False)
    place = Column(String(PLACE_MAX_LENGTH), nullable=False)

    def __repr__(self):
        return f"<Event id={self.id} name={self.name!r}>"
