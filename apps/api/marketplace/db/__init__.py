from marketplace.db.session import SessionLocal, engine, get_db  # noqa: F401
