"""
Mood entry storage service.

The analytics core only depends on ``MoodEntryRepository.list_entries``.
Two implementations are provided: an in-memory store for tests and local
use, and a DynamoDB store for the deployed service.

Typical usage:
    repository = DynamoMoodEntryRepository()
    repository.save_entry(entry)
    flow_entries = repository.list_entries(lambda e: e.has_flow)
"""
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

from aws_lambda_powertools import Logger
from boto3.dynamodb.conditions import Key
from pydantic import ValidationError

from mnemosyne.models.cycle import CycleConfiguration
from mnemosyne.models.entry import MoodEntry
from mnemosyne.services.exceptions import RepositoryError
from mnemosyne.utils.dynamo import (
    CYCLE_CONFIG_SK,
    ENTRY_SK_PREFIX,
    create_entry_sk,
    create_pk,
    get_dynamo,
    get_owner_id
)

logger = Logger()

EntryPredicate = Callable[[MoodEntry], bool]

class MoodEntryRepository(Protocol):
    """Read access to stored mood entries."""

    def list_entries(self, predicate: Optional[EntryPredicate] = None) -> List[MoodEntry]:
        ...

def _newest_first(entries: Iterable[MoodEntry]) -> List[MoodEntry]:
    return sorted(entries, key=lambda e: (e.timestamp, e.id), reverse=True)

class InMemoryMoodEntryRepository:
    """Repository holding entries in a list."""

    def __init__(self, entries: Optional[Iterable[MoodEntry]] = None):
        self._entries: List[MoodEntry] = list(entries or [])

    def add(self, entry: MoodEntry) -> None:
        self._entries.append(entry)

    def list_entries(self, predicate: Optional[EntryPredicate] = None) -> List[MoodEntry]:
        """
        List stored entries matching predicate, newest first.

        Args:
            predicate: Optional filter applied to each entry

        Returns:
            List of matching entries
        """
        matching = [e for e in self._entries if predicate is None or predicate(e)]
        return _newest_first(matching)

class DynamoMoodEntryRepository:
    """Repository storing entries and the cycle configuration in DynamoDB."""

    def __init__(self, dynamo=None, owner_id: Optional[str] = None):
        self.dynamo = dynamo or get_dynamo()
        self.owner_id = owner_id or get_owner_id()

    @property
    def _pk(self) -> str:
        return create_pk(self.owner_id)

    def save_entry(self, entry: MoodEntry) -> None:
        """
        Create or replace a mood entry.

        Args:
            entry: Entry to store
        """
        item = entry.model_dump(mode="json")
        # DynamoDB rejects floats
        item["score"] = Decimal(str(entry.score))
        item["PK"] = self._pk
        item["SK"] = create_entry_sk(entry.timestamp.isoformat(), entry.id)
        self.dynamo.put_item(item)
        logger.info("Stored mood entry", extra={
            "entry_id": entry.id,
            "timestamp": entry.timestamp.isoformat()
        })

    def delete_entry(self, entry: MoodEntry) -> None:
        """Delete a stored mood entry."""
        self.dynamo.delete_item({
            "PK": self._pk,
            "SK": create_entry_sk(entry.timestamp.isoformat(), entry.id)
        })
        logger.info("Deleted mood entry", extra={"entry_id": entry.id})

    def list_entries(self, predicate: Optional[EntryPredicate] = None) -> List[MoodEntry]:
        """
        List stored entries matching predicate, newest first.

        Args:
            predicate: Optional filter applied after loading

        Returns:
            List of matching entries

        Raises:
            RepositoryError: If a stored item is not a valid entry
        """
        items = self.dynamo.query_items(
            partition_key="PK",
            partition_value=self._pk,
            sort_key_condition=Key("SK").begins_with(ENTRY_SK_PREFIX)
        )
        entries = [self._parse(MoodEntry, item) for item in items]
        logger.debug("Loaded mood entries", extra={"count": len(entries)})
        return _newest_first(e for e in entries if predicate is None or predicate(e))

    def save_configuration(self, configuration: CycleConfiguration) -> None:
        """Store the single cycle configuration."""
        item = configuration.model_dump(mode="json")
        item["PK"] = self._pk
        item["SK"] = CYCLE_CONFIG_SK
        self.dynamo.put_item(item)
        logger.info("Stored cycle configuration", extra={
            "cycle_length": configuration.cycle_length,
            "stop_week_start": configuration.stop_week_start,
            "stop_week_end": configuration.stop_week_end
        })

    def load_configuration(self) -> Optional[CycleConfiguration]:
        """
        Load the cycle configuration.

        Returns:
            Stored configuration, or None if none was saved yet
        """
        item = self.dynamo.get_item({"PK": self._pk, "SK": CYCLE_CONFIG_SK})
        if not item:
            return None
        return self._parse(CycleConfiguration, item)

    def _parse(self, model, item: Dict[str, Any]):
        data = {k: v for k, v in item.items() if k not in ("PK", "SK")}
        try:
            return model.model_validate(data)
        except ValidationError as e:
            logger.error("Invalid stored item", extra={
                "sk": item.get("SK"),
                "error": str(e),
                "error_type": e.__class__.__name__
            })
            raise RepositoryError(f"Stored item {item.get('SK')} is invalid: {e}") from e
