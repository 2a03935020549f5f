"""
Backup Models for BudgetBee

A backup is a versioned envelope around a full snapshot of the store.

DESIGN DECISION: Every field except metadata is optional.
Restores check field presence explicitly and only apply what a backup
actually contains, so older or partial backups never clobber settings
they did not carry.
"""

from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budgetbee.models.transaction import NotificationPreferences, Transaction


class BackupFormat(str, Enum):
    """
    Backup output formats.

    JSON backups are encrypted and restorable.
    TEXT backups are human-readable reports and cannot be imported.
    """
    JSON = "json"
    TEXT = "text"

    @property
    def extension(self) -> str:
        return self.value


class BackupMetadata(BaseModel):
    """Describes where and when a snapshot was taken."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Early backups wrote this under "version"
    schema_version: int = Field(
        ...,
        ge=1,
        alias="schemaVersion",
        validation_alias=AliasChoices("schemaVersion", "version"),
        description="Backup schema version"
    )
    created_at: int = Field(
        ...,
        ge=0,
        description="Creation time in epoch milliseconds"
    )
    device_model: str = Field(
        default="unknown",
        description="Device the backup was taken on"
    )
    app_version: str = Field(
        default="unknown",
        description="App version that wrote the backup"
    )
    transaction_count: int = Field(
        default=0,
        ge=0,
        description="Number of transactions in the snapshot"
    )


class BackupSnapshot(BaseModel):
    """
    Full exportable state of the store at a point in time.

    Constructed fresh for every backup and discarded after it is written.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    metadata: BackupMetadata
    transactions: Optional[list[Transaction]] = None
    monthly_budget: Optional[Decimal] = Field(
        default=None,
        ge=0,
        description="Monthly budget at snapshot time"
    )
    currency: Optional[str] = Field(
        default=None,
        pattern=r"^[A-Za-z]{3}$",
        description="Selected three-letter currency code"
    )
    notification_preferences: Optional[NotificationPreferences] = None

    def with_counted_metadata(self) -> "BackupSnapshot":
        """Return a copy whose metadata count matches the transactions."""
        count = len(self.transactions or [])
        if self.metadata.transaction_count == count:
            return self
        metadata = self.metadata.model_copy(update={"transaction_count": count})
        return self.model_copy(update={"metadata": metadata})


# =============================================================================
# RESULT MODELS
# =============================================================================

class BackupSuccess(BaseModel):
    """A backup operation that completed."""

    path: Optional[Path] = Field(
        default=None,
        description="Backup file written or restored from"
    )
    metadata: Optional[BackupMetadata] = Field(
        default=None,
        description="Metadata of the snapshot involved"
    )

    @property
    def ok(self) -> bool:
        return True


class BackupFailure(BaseModel):
    """A backup operation that failed. Carries the underlying fault."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    message: str = Field(
        ...,
        description="Human-readable reason"
    )
    exception: Optional[Exception] = Field(
        default=None,
        description="Underlying fault, if any"
    )

    @property
    def ok(self) -> bool:
        return False


BackupResult = Union[BackupSuccess, BackupFailure]
