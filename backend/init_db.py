"""Initialize database (create tables). Run: python backend/init_db.py"""
from chavi.config import Settings
from chavi.store import RecordStore


def init():
    store = RecordStore.from_url(Settings().database_url)
    store.check()
    store.create_tables()


if __name__ == '__main__':
    print('Initializing DB...')
    init()
    print('DB initialized.')
