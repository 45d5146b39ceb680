"""
Persistence package. `storage` is the process-wide DBStorage; it stays
unconnected until the app factory opens it.
"""
from models.db_storage import DBStorage

storage = DBStorage()
