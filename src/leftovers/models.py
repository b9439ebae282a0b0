"""Data models for leftovers."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field


class ItemCategory(str, Enum):
    """Why an item was flagged."""

    LEFTOVER = "leftover"  # Owning app no longer detected
    CACHE = "cache"  # Regenerable data of an installed app
    STALE = "stale"  # Untouched past the age threshold
    LARGE = "large"  # Flagged for absolute size only


def format_size_mb(size_mb: float) -> str:
    """Format a megabyte figure (binary units, like every size in the report)."""
    if size_mb >= 1024:
        return f"{size_mb / 1024:.1f} GB"
    elif size_mb >= 1:
        return f"{size_mb:.1f} MB"
    else:
        return f"{size_mb * 1024:.0f} KB"


class ReportItem(BaseModel):
    """A single reclaim candidate handed to the report renderer."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    display_name: str = Field(..., alias="displayName", description="Label shown in the report")
    path: str = Field(..., description="Location, home-relative (~/...) when under home")
    size_mb: float = Field(..., alias="sizeMB", ge=0, description="Size in megabytes")
    modified_date: str = Field(
        "N/A", alias="modifiedDate", description="Last modification date (YYYY-MM-DD) or N/A"
    )
    category: ItemCategory = Field(..., description="Classification of the item")
    owner_label: str = Field(..., alias="ownerLabel", description="App or kind the item belongs to")

    @property
    def size_human(self) -> str:
        """Human-readable size string."""
        return format_size_mb(self.size_mb)


class DiskUsage(BaseModel):
    """Overall disk usage information."""

    total_bytes: int = Field(..., alias="capacity", description="Total disk size in bytes")
    used_bytes: int = Field(..., alias="used", description="Used space in bytes")
    free_bytes: int = Field(..., alias="free", description="Free space in bytes")
    mount_point: str = Field("/", alias="mountPoint", description="Mount point")

    model_config = ConfigDict(populate_by_name=True)

    @property
    def total_gb(self) -> float:
        """Total size in GB (decimal, like macOS)."""
        return self.total_bytes / (1000**3)

    @property
    def used_gb(self) -> float:
        """Used space in GB (decimal, like macOS)."""
        return self.used_bytes / (1000**3)

    @property
    def free_gb(self) -> float:
        """Free space in GB (decimal, like macOS)."""
        return self.free_bytes / (1000**3)

    @computed_field(alias="usedPct")
    @property
    def used_percent(self) -> float:
        """Percentage of disk used."""
        return (self.used_bytes / self.total_bytes) * 100 if self.total_bytes > 0 else 0


class LocationWarning(BaseModel):
    """A probe location that could not be enumerated."""

    location_id: str = Field(..., alias="locationId")
    path: str
    message: str

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class RunSummary(BaseModel):
    """Aggregate facts about one scan, independent of the items."""

    model_config = ConfigDict(populate_by_name=True)

    scanned_at: datetime = Field(default_factory=datetime.now, alias="scannedAt")
    disk_usage: DiskUsage = Field(..., alias="disk")
    installed_count: int = Field(0, alias="installedCount", description="Indexed installed-app tokens")
    warnings: list[LocationWarning] = Field(default_factory=list)
    cancelled: bool = Field(False, description="Whether the scan stopped early")


class Report(BaseModel):
    """Complete engine output: items plus summary."""

    items: list[ReportItem] = Field(default_factory=list)
    summary: RunSummary

    def by_category(self, category: ItemCategory) -> list[ReportItem]:
        """Items of one category, largest first."""
        return sorted(
            (i for i in self.items if i.category == category),
            key=lambda i: i.size_mb,
            reverse=True,
        )

    def category_total_mb(self, category: ItemCategory) -> float:
        """Total megabytes for one category."""
        return sum(i.size_mb for i in self.items if i.category == category)

    @property
    def total_mb(self) -> float:
        """Total reclaimable megabytes across all items."""
        return sum(i.size_mb for i in self.items)

    @property
    def leftover_app_count(self) -> int:
        """Number of distinct apps with leftover data."""
        return len({i.owner_label for i in self.items if i.category == ItemCategory.LEFTOVER})

    def to_payload(self) -> dict:
        """Payload with the key names the renderer expects."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self, indent: int | None = 2) -> str:
        """Serialize the payload as JSON."""
        return self.model_dump_json(by_alias=True, indent=indent)
