"""Markdown formatter for search results, lookups and index status."""

from __future__ import annotations

from apiref_search.domain.entities import TargetRef
from apiref_search.domain.value_objects import (
    IndexStatus,
    PresentationRow,
    RankedGroup,
    SearchOutcome,
)

PARTIAL_NOTICE = "*Results may be incomplete: some index shards could not be loaded.*\n"
MAX_TARGETS_SHOWN = 10


class MarkdownFormatter:
    """Formats search output as Markdown for the console and MCP tool responses."""

    def format_error(self, exception: Exception) -> str:
        return f"**Error:** {exception}\n"

    def format_query(self, query: str) -> str:
        return f"**Search:** `{query}`\n\n"

    def format_search_results(self, outcome: SearchOutcome) -> str:
        rows = [PresentationRow.from_group(g) for g in outcome.groups]
        return self.format_rows(rows, outcome.partial)

    def format_rows(self, rows: list[PresentationRow], partial: bool) -> str:
        parts: list[str] = []
        if partial:
            parts.append(PARTIAL_NOTICE)

        if not rows:
            parts.append("Nothing found.\n")
            return "\n".join(parts)

        parts.append(f"Found {len(rows)} results:\n")
        for row in rows:
            parts.append(self._format_row(row))
        parts.append("")
        return "\n".join(parts)

    def format_lookup(self, groups: list[RankedGroup]) -> str:
        parts: list[str] = []
        for group in groups:
            parts.append(f"## {group.display_name}\n")
            parts.append(f"**Kind:** {group.kind.get_display_name()}\n")
            parts.append(f"**Definitions ({len(group.targets)}):**\n")
            for target in group.targets:
                parts.append(f"- {_format_target(target, with_scope=True)}")
            parts.append("")
        return "\n".join(parts)

    def format_status(self, status: IndexStatus) -> str:
        parts: list[str] = [
            f"**Loaded shards:** {len(status.loaded)} ({status.entry_count} entries)",
        ]
        if status.known_buckets:
            parts.append(f"**Known buckets:** `{''.join(status.known_buckets)}`")

        if status.loaded:
            parts.append("")
            parts.append("| Bucket | Entries |")
            parts.append("|--------|---------|")
            for bucket in sorted(status.loaded):
                parts.append(f"| `{bucket}` | {status.loaded[bucket]} |")

        if status.failed:
            parts.append(f"\n**Unavailable shards ({len(status.failed)}):**\n")
            for bucket in sorted(status.failed):
                parts.append(f"- `{bucket}`: {status.failed[bucket]}")

        parts.append("")
        return "\n".join(parts)

    def _format_row(self, row: PresentationRow) -> str:
        kind = row.kind.get_display_name()
        scope = f" — {row.scope_label}" if row.scope_label else ""
        if len(row.targets) == 1:
            target = row.targets[0]
            hint = f" `{target.kind_hint}`" if target.kind_hint else ""
            return f"- **{row.display_name}**{hint} ({kind}){scope} → `{target.href}`"

        lines = [f"- **{row.display_name}** ({kind}){scope}"]
        for target in row.targets[:MAX_TARGETS_SHOWN]:
            lines.append(f"  - {_format_target(target, with_scope=not row.scope_label)}")
        if len(row.targets) > MAX_TARGETS_SHOWN:
            lines.append(f"  - ... and {len(row.targets) - MAX_TARGETS_SHOWN} more")
        return "\n".join(lines)


def _format_target(target: TargetRef, with_scope: bool) -> str:
    label = target.scope_label if with_scope and target.scope_label else ""
    hint = target.kind_hint or ""
    text = f"{label}{hint}".strip()
    if text:
        return f"`{text}` → `{target.href}`"
    return f"`{target.href}`"
