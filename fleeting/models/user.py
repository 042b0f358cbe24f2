from sqlalchemy import Column, String, LargeBinary
from fleeting.database import Base


ADMIN_KEY = "admin"


class User(Base):
    """A credential row.

    ``key`` is either the literal ``admin`` or the SHA-256 hex digest of a
    secret that authorizes requests. The same credential is stored under
    both keys for the bootstrap administrator.
    """

    __tablename__ = "users"

    key = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False, default="")
    password_hash = Column(LargeBinary, nullable=False)
    salt = Column(LargeBinary, nullable=False)
