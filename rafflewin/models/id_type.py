from sqlalchemy import BigInteger, Integer

# Contestant and winner keys: BIGINT on Postgres, INTEGER on SQLite so rowid autoincrement works.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")
