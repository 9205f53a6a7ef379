"""Configuration models describing maid settings."""

from __future__ import annotations

from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from maid.classification.models import DEFAULT_RULES, CategoryRule, Lexicon, check_rules


class MaidBaseModel(BaseModel):
    """Shared configuration for maid Pydantic models."""

    model_config = ConfigDict(extra="forbid")


def _normalize_extensions(values: List[str]) -> List[str]:
    normalized = []
    for value in values:
        value = value.strip().lower()
        if not value:
            continue
        normalized.append(value if value.startswith(".") else f".{value}")
    return normalized


class ProcessingOptions(MaidBaseModel):
    """Options governing which files a scan discovers.

    Attributes:
        extensions: File extensions considered by ``clean`` and ``keep``.
        recurse_directories: Whether to recurse into subdirectories.
        process_hidden_files: Whether hidden files and directories are included.
        follow_symlinks: Whether symbolic links to files are processed.
    """

    extensions: List[str] = Field(default_factory=lambda: [".md", ".sh"])
    recurse_directories: bool = False
    process_hidden_files: bool = False
    follow_symlinks: bool = False

    @field_validator("extensions")
    @classmethod
    def _extensions(cls, values: List[str]) -> List[str]:
        return _normalize_extensions(values)


class ClassificationSettings(MaidBaseModel):
    """Keyword lexicon and content inspection settings.

    Attributes:
        lexicon: Ordered category rules; earlier rules take priority.
        script_extensions: Extensions treated as scripts when no keyword matches.
        inspect_content: Whether to read an excerpt for inconclusive names.
        excerpt_lines: Number of leading lines read for the excerpt.
        low_confidence_hits: Name keyword hits at or below which the excerpt is consulted.
    """

    lexicon: List[CategoryRule] = Field(default_factory=lambda: list(DEFAULT_RULES))
    script_extensions: List[str] = Field(default_factory=lambda: [".sh"])
    inspect_content: bool = True
    excerpt_lines: int = Field(default=20, ge=0)
    low_confidence_hits: int = Field(default=1, ge=0)

    @field_validator("lexicon")
    @classmethod
    def _lexicon(cls, rules: List[CategoryRule]) -> List[CategoryRule]:
        check_rules(rules)
        return rules

    @field_validator("script_extensions")
    @classmethod
    def _script_extensions(cls, values: List[str]) -> List[str]:
        return _normalize_extensions(values)

    def build_lexicon(self) -> Lexicon:
        """Return the immutable lexicon described by these settings."""
        return Lexicon(rules=tuple(self.lexicon))


class NamingOptions(MaidBaseModel):
    """Canonical naming settings.

    Attributes:
        noise_words: Tokens dropped from canonical names.
        rename_unknown: Whether unclassified files are normalized too.
    """

    noise_words: List[str] = Field(default_factory=lambda: ["final", "latest", "copy", "untitled"])
    rename_unknown: bool = False


class OrganizationOptions(MaidBaseModel):
    """Settings used by restructure mode.

    Attributes:
        script_directory: Directory receiving scripts when restructuring.
    """

    script_directory: str = "scripts"


class RetentionSettings(MaidBaseModel):
    """Settings for the ``keep`` command.

    Attributes:
        recent_days: Files modified within this many days are kept.
        markers: Reserved filename tokens that always keep a file.
        trash_dirname: Directory under the root that receives disposed files.
        stamp_format: ``strftime`` format of the per-run trash directory.
    """

    recent_days: float = Field(default=7, ge=0)
    markers: List[str] = Field(
        default_factory=lambda: ["keep", "important", "pinned", "readme", "license", "changelog"]
    )
    trash_dirname: str = ".maid-trash"
    stamp_format: str = "%Y%m%dT%H%M%SZ"


class LoggingSettings(MaidBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"


class CLIOptions(MaidBaseModel):
    """CLI behavior defaults.

    Attributes:
        verbose_default: Whether commands print per-operation lines by default.
        watch_interval_seconds: Default polling interval for ``maid watch``.
    """

    verbose_default: bool = False
    watch_interval_seconds: float = Field(default=60, gt=0)


class MaidConfig(MaidBaseModel):
    """Top-level configuration struct for maid.

    Attributes:
        processing: Scan settings.
        classification: Lexicon and content inspection settings.
        naming: Canonical naming settings.
        organization: Restructure settings.
        retention: ``keep`` settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    processing: ProcessingOptions = Field(default_factory=ProcessingOptions)
    classification: ClassificationSettings = Field(default_factory=ClassificationSettings)
    naming: NamingOptions = Field(default_factory=NamingOptions)
    organization: OrganizationOptions = Field(default_factory=OrganizationOptions)
    retention: RetentionSettings = Field(default_factory=RetentionSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "MaidBaseModel",
    "ProcessingOptions",
    "ClassificationSettings",
    "NamingOptions",
    "OrganizationOptions",
    "RetentionSettings",
    "LoggingSettings",
    "CLIOptions",
    "MaidConfig",
]
