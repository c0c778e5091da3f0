"""
Generic table/view gateway over a psycopg connection pool.

Every feature service talks to the database through this small surface:
select/insert/update/delete filtered by column equality (or membership) and
ordered by column names. Identifiers are composed with ``psycopg.sql`` so
table and column names are always quoted.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Mapping, Sequence

import psycopg
from psycopg import sql
from psycopg_pool import ConnectionPool

from court_facilities.errors import BackendError

logger = logging.getLogger(__name__)

Row = dict[str, Any]


@contextmanager
def translate_errors(user_message: str):
    """Turn psycopg failures into a BackendError with a templated message."""
    try:
        yield
    except psycopg.Error as exc:
        logger.exception("%s: %s", user_message, exc)
        raise BackendError(user_message, detail=str(exc)) from exc


def _where_clause(
    filters: Mapping[str, Any] | None,
    in_filters: Mapping[str, Iterable[Any]] | None,
) -> tuple[sql.Composable, list[Any]]:
    parts: list[sql.Composable] = []
    params: list[Any] = []
    for column, value in (filters or {}).items():
        if value is None:
            parts.append(sql.SQL("{} IS NULL").format(sql.Identifier(column)))
        else:
            parts.append(sql.SQL("{} = %s").format(sql.Identifier(column)))
            params.append(value)
    for column, values in (in_filters or {}).items():
        parts.append(sql.SQL("{} = ANY(%s)").format(sql.Identifier(column)))
        params.append(list(values))
    if not parts:
        return sql.SQL(""), params
    return sql.SQL(" WHERE ") + sql.SQL(" AND ").join(parts), params


def _order_clause(order_by: Sequence[str] | None) -> sql.Composable:
    if not order_by:
        return sql.SQL("")
    terms = []
    for column in order_by:
        if column.startswith("-"):
            terms.append(sql.SQL("{} DESC").format(sql.Identifier(column[1:])))
        else:
            terms.append(sql.SQL("{} ASC").format(sql.Identifier(column)))
    return sql.SQL(" ORDER BY ") + sql.SQL(", ").join(terms)


class TableGateway:
    """Query-and-mutate interface for tables and views."""

    def __init__(self, db_pool: ConnectionPool) -> None:
        self.db_pool = db_pool

    def select(
        self,
        table: str,
        *,
        columns: Sequence[str] | None = None,
        filters: Mapping[str, Any] | None = None,
        in_filters: Mapping[str, Iterable[Any]] | None = None,
        order_by: Sequence[str] | None = None,
        limit: int | None = None,
    ) -> list[Row]:
        if columns:
            column_sql = sql.SQL(", ").join(sql.Identifier(c) for c in columns)
        else:
            column_sql = sql.SQL("*")
        where, params = _where_clause(filters, in_filters)
        query = (
            sql.SQL("SELECT {} FROM {}").format(column_sql, sql.Identifier(table))
            + where
            + _order_clause(order_by)
        )
        if limit is not None:
            query += sql.SQL(" LIMIT %s")
            params.append(limit)
        with self.db_pool.connection() as conn:
            rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]

    def select_one(self, table: str, **kwargs) -> Row | None:
        rows = self.select(table, limit=1, **kwargs)
        return rows[0] if rows else None

    def insert(self, table: str, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> list[Row]:
        """Insert one or many rows inside a single transaction."""
        if isinstance(rows, Mapping):
            rows = [rows]
        if not rows:
            return []
        inserted: list[Row] = []
        with self.db_pool.connection() as conn:
            for row in rows:
                columns = list(row)
                query = sql.SQL("INSERT INTO {} ({}) VALUES ({}) RETURNING *").format(
                    sql.Identifier(table),
                    sql.SQL(", ").join(sql.Identifier(c) for c in columns),
                    sql.SQL(", ").join(sql.Placeholder() for _ in columns),
                )
                result = conn.execute(query, [row[c] for c in columns]).fetchone()
                inserted.append(dict(result))
            conn.commit()
        logger.debug("Inserted %d rows into %s", len(inserted), table)
        return inserted

    def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        filters: Mapping[str, Any] | None = None,
        in_filters: Mapping[str, Iterable[Any]] | None = None,
    ) -> list[Row]:
        if not values:
            raise ValueError("update() requires at least one column")
        if not filters and not in_filters:
            raise ValueError("update() without filters is not allowed")
        assignments = sql.SQL(", ").join(
            sql.SQL("{} = %s").format(sql.Identifier(column)) for column in values
        )
        where, params = _where_clause(filters, in_filters)
        query = (
            sql.SQL("UPDATE {} SET ").format(sql.Identifier(table))
            + assignments
            + where
            + sql.SQL(" RETURNING *")
        )
        with self.db_pool.connection() as conn:
            rows = conn.execute(query, [*values.values(), *params]).fetchall()
            conn.commit()
        return [dict(row) for row in rows]

    def delete(
        self,
        table: str,
        *,
        filters: Mapping[str, Any] | None = None,
        in_filters: Mapping[str, Iterable[Any]] | None = None,
    ) -> int:
        if not filters and not in_filters:
            raise ValueError("delete() without filters is not allowed")
        where, params = _where_clause(filters, in_filters)
        query = sql.SQL("DELETE FROM {}").format(sql.Identifier(table)) + where
        with self.db_pool.connection() as conn:
            cursor = conn.execute(query, params)
            count = cursor.rowcount
            conn.commit()
        return count
