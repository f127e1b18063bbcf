"""
Checks whether a database exists on a SQL Server instance.
"""

import asyncio
import logging
from typing import Protocol

from winprov.exceptions import DatabaseUnreachableError

log = logging.getLogger(__name__)


class CatalogReader(Protocol):
    def list_databases(self, server: str) -> list[str]:
        """Returns all database names, raising DatabaseUnreachableError."""


class MssqlCatalogReader:
    """Reads `sys.databases` using pymssql and integrated authentication."""

    def __init__(self, login_timeout: int = 15, user: str = "", password: str = ""):
        self.login_timeout = login_timeout
        self.user = user
        self.password = password

    def list_databases(self, server: str) -> list[str]:
        import pymssql

        try:
            conn = pymssql.connect(
                server=server,
                user=self.user,
                password=self.password,
                database="master",
                login_timeout=self.login_timeout,
            )
        except (pymssql.OperationalError, pymssql.InterfaceError) as e:
            raise DatabaseUnreachableError(
                f"Could not connect to database server '{server}': {e}"
            ) from e

        try:
            cursor = conn.cursor()
            cursor.execute("SELECT name FROM sys.databases")
            return [row[0] for row in cursor.fetchall()]
        except pymssql.Error as e:
            raise DatabaseUnreachableError(
                f"Could not read the catalog on '{server}': {e}"
            ) from e
        finally:
            conn.close()


async def db_exists(
    server: str, name: str, *, reader: CatalogReader | None = None
) -> bool:
    """
    Reports whether a database called `name` exists on `server`.

    The comparison ignores case, as SQL Server's default collation does.

    Raises:
        DatabaseUnreachableError: If the catalog cannot be read. This is never
            reported as False.
    """
    reader = reader or MssqlCatalogReader()
    names = await asyncio.to_thread(reader.list_databases, server)
    wanted = name.casefold()
    found = any(existing.casefold() == wanted for existing in names)
    log.debug(f"Database '{name}' on '{server}': {'found' if found else 'absent'}")
    return found
