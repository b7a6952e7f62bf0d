"""ORM models; every model registers its table on `taskapi.core.database.Base`."""
