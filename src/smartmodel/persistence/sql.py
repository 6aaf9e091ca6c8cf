"""
SQL Backend - SQLModel / SQLAlchemy Core row store

🗃️ SQL Database Backend:
Rows are read and written with SQLAlchemy Core statements on an engine built
by ``sqlmodel.create_engine``. Tables declared as ``SQLModel`` table classes
are used directly from ``SQLModel.metadata``; any other table is reflected
from the database on first use.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from sqlalchemy import MetaData, Table, and_, delete, func, insert, not_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from .base import MULTI_VALUE_TYPES, PersistenceBackend, Row

logger = logging.getLogger(__name__)

_MEMORY_URLS = ("sqlite://", "sqlite:///:memory:")


def _coerce(column, value: Any) -> Any:
    """Convert a value parsed from a rule string to the column's Python type."""
    if not isinstance(value, str):
        return value
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return value
    if python_type is str:
        return value
    try:
        return python_type(value)
    except (TypeError, ValueError):
        return value


class SQLModelBackend(PersistenceBackend):
    """
    SQL persistence implementation.

    Args:
        database_url: SQLAlchemy URL, ignored when ``engine`` is given
        engine: Pre-built engine to reuse
        echo: Log emitted SQL through SQLAlchemy's logger
    """

    def __init__(self, database_url: str = "sqlite://", engine: Optional[Engine] = None, echo: bool = False):
        if engine is None:
            options: Dict[str, Any] = {"echo": echo}
            if database_url.startswith("sqlite"):
                options["connect_args"] = {"check_same_thread": False}
                if database_url in _MEMORY_URLS:
                    # One shared connection keeps the in-memory database alive
                    options["poolclass"] = StaticPool
            engine = create_engine(database_url, **options)
        self.engine = engine
        self._reflected = MetaData()
        self._tables: Dict[str, Table] = {}
        logger.info(f"SQLModelBackend initialized: {self.engine.url}")

    def create_all(self) -> None:
        """Create every table declared through SQLModel table classes."""
        SQLModel.metadata.create_all(self.engine)
        logger.info(f"Database tables initialized: {self.engine.url}")

    def get_table(self, name: str) -> Table:
        table = self._tables.get(name)
        if table is None:
            table = SQLModel.metadata.tables.get(name)
            if table is None:
                table = Table(name, self._reflected, autoload_with=self.engine)
                logger.debug(f"Reflected table {name}")
            self._tables[name] = table
        return table

    def _conditions(self, table: Table, where: Optional[Mapping[str, Any]],
                    exclude: Optional[Mapping[str, Any]] = None) -> list:
        clauses = []
        for column, value in (where or {}).items():
            if isinstance(value, MULTI_VALUE_TYPES):
                clauses.append(table.c[column].in_(list(value)))
            elif value is None:
                clauses.append(table.c[column].is_(None))
            else:
                clauses.append(table.c[column] == value)
        if exclude:
            clauses.append(not_(and_(*[
                table.c[column] == _coerce(table.c[column], value) for column, value in exclude.items()
            ])))
        return clauses

    def select(self, table: str, where: Optional[Mapping[str, Any]] = None,
               limit: Optional[int] = None) -> List[Row]:
        sql_table = self.get_table(table)
        statement = select(sql_table)
        clauses = self._conditions(sql_table, where)
        if clauses:
            statement = statement.where(*clauses)
        if limit is not None:
            statement = statement.limit(limit)
        with self.engine.connect() as connection:
            return [dict(row._mapping) for row in connection.execute(statement)]

    def insert(self, table: str, values: Mapping[str, Any], key_name: Optional[str] = None) -> Any:
        sql_table = self.get_table(table)
        with self.engine.begin() as connection:
            result = connection.execute(insert(sql_table).values(**dict(values)))
            if not key_name:
                return None
            key = values.get(key_name)
            if key is None and result.inserted_primary_key:
                key = result.inserted_primary_key[0]
            return key

    def update(self, table: str, where: Mapping[str, Any], values: Mapping[str, Any]) -> int:
        sql_table = self.get_table(table)
        statement = update(sql_table).where(*self._conditions(sql_table, where)).values(**dict(values))
        with self.engine.begin() as connection:
            return connection.execute(statement).rowcount

    def delete(self, table: str, where: Mapping[str, Any]) -> int:
        sql_table = self.get_table(table)
        statement = delete(sql_table).where(*self._conditions(sql_table, where))
        with self.engine.begin() as connection:
            return connection.execute(statement).rowcount

    def count(self, table: str, where: Optional[Mapping[str, Any]] = None,
              exclude: Optional[Mapping[str, Any]] = None) -> int:
        sql_table = self.get_table(table)
        statement = select(func.count()).select_from(sql_table)
        clauses = self._conditions(sql_table, where, exclude)
        if clauses:
            statement = statement.where(*clauses)
        with self.engine.connect() as connection:
            return connection.execute(statement).scalar_one()
