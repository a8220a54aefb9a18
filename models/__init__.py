"""
Creates the DBStorage singleton shared by the API, the token stores and the
maintenance job.
"""
from models.db_storage import DBStorage

storage = DBStorage()
storage.reload()
