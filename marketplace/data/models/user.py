from sqlalchemy import Column, String
from marketplace.data.database import Base, new_id

class UserModel(Base):
    __tablename__ = "users"
    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    role = Column(String(20), nullable=False, default="buyer")
