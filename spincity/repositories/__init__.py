"""
Persistence adapters.

Two backends implement the same coroutine contracts (repositories/base.py):
json_storage.py writes a local JSON file, sql_repository.py writes a
document table through SQLAlchemy. factory.build_stores picks one at
startup; services only ever see KeyValueStore/CollectionStore.
"""
