from sqlalchemy.orm import declarative_base

# Base shared by every model
Base = declarative_base()
