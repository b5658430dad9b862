"""Explicit transaction handle over a :class:`~dbprovider.connection.DbConnection`."""

from typing import TYPE_CHECKING, Any

from dbprovider.exceptions import TransactionError
from dbprovider.utils.logging import get_logger

if TYPE_CHECKING:
    from typing_extensions import Self

    from dbprovider.connection import DbConnection

__all__ = ("DbTransaction",)

logger = get_logger("transaction")


class DbTransaction:
    """A started transaction. Closing it while still active rolls it back."""

    __slots__ = ("_active", "connection")

    def __init__(self, connection: "DbConnection") -> None:
        self.connection = connection
        self._active = False

    @classmethod
    def begin(cls, connection: "DbConnection") -> "DbTransaction":
        """Start a transaction on ``connection``, opening it if needed."""
        transaction = cls(connection)
        connection.begin()
        transaction._active = True
        logger.debug("Transaction started on %s", connection.config.name)
        return transaction

    @property
    def is_active(self) -> bool:
        return self._active

    def _ensure_active(self) -> None:
        if not self._active:
            msg = "Transaction is no longer active"
            raise TransactionError(msg)

    def commit(self) -> None:
        self._ensure_active()
        self.connection.commit()
        self._active = False
        logger.debug("Transaction committed on %s", self.connection.config.name)

    def rollback(self) -> None:
        self._ensure_active()
        self.connection.rollback()
        self._active = False
        logger.debug("Transaction rolled back on %s", self.connection.config.name)

    def close(self) -> None:
        """Release the transaction, rolling back uncommitted work."""
        if self._active:
            self.rollback()

    def __enter__(self) -> "Self":
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"DbTransaction(connection={self.connection.config.name!r}, active={self._active})"
