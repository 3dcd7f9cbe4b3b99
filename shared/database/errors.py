from sqlalchemy.exc import IntegrityError

# SQLSTATE unique_violation (PostgreSQL)
_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when ``exc`` came from a unique/primary-key constraint, not a FK or CHECK."""
    orig = exc.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == _UNIQUE_VIOLATION
    # SQLite reports "UNIQUE constraint failed: <table>.<cols>"
    return "unique constraint" in str(orig).lower()
