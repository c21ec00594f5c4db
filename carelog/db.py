"""MongoDB connection shared by the store adapter, auth and blob endpoint."""

from pymongo import MongoClient

from carelog.configs import MONGODB_CONFIG

mongo_uri: str = MONGODB_CONFIG["uri"]

# MongoClient connects lazily
client: MongoClient = MongoClient(mongo_uri, tz_aware=True)
db = client[MONGODB_CONFIG["db"]]

__all__ = ["db", "client", "mongo_uri"]
