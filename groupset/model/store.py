"""RecordStore: owns a batch of records built against one schema."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Sequence

from groupset.model.collection import Collection
from groupset.model.errors import GroupsetError
from groupset.model.record import Record
from groupset.model.schema import Schema

logger = logging.getLogger(__name__)


class RecordStore:
    """The owner of every record in a batch.

    Groups and collections built from the store only reference its records.
    """

    def __init__(self, schema: Schema) -> None:
        self._schema = schema
        self._records: list[Record] = []
        self._rejected: list[tuple[int, GroupsetError]] = []

    @property
    def schema(self) -> Schema:
        return self._schema

    @property
    def records(self) -> list[Record]:
        return list(self._records)

    @property
    def rejected(self) -> list[tuple[int, GroupsetError]]:
        """Rows skipped by ``add_rows``, as (1-based row number, error)."""
        return list(self._rejected)

    def add(self, raw_columns: Iterable[tuple[str, str]]) -> Record:
        """Build a record from raw ``(name, text)`` pairs and store it."""
        record = Record.build(self._schema, raw_columns)
        self._records.append(record)
        return record

    def add_rows(
        self,
        rows: Iterable[Sequence[tuple[str, str]]],
        *,
        skip_invalid: bool = True,
    ) -> list[Record]:
        """Build and store a record for each row.

        With *skip_invalid*, a row that fails to build is logged and recorded
        in ``rejected`` and the batch continues; otherwise the error
        propagates.
        """
        added: list[Record] = []
        for number, raw in enumerate(rows, start=1):
            try:
                added.append(self.add(raw))
            except GroupsetError as e:
                if not skip_invalid:
                    raise
                logger.warning("Skipping row %d: %s", number, e)
                self._rejected.append((number, e))
        return added

    def collection(self) -> Collection:
        """Partition every stored record into a Collection."""
        return Collection.build(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self._records)
