"""Human-facing text for slots, recommendations and batch outcomes."""

from typing import List, Optional

from slot_engine.models.entities import CandidateSlot, Recommendation, SchedulingResult
from slot_engine.services.slot_ranker import describe_label


class ResponseFormatter:
    """Formats engine output in a consistent, structured manner."""

    @staticmethod
    def format_slot_date(slot: CandidateSlot) -> str:
        return slot.start.strftime("%A, %B %d")

    @staticmethod
    def format_slot_time(slot: CandidateSlot) -> str:
        return slot.start.strftime("%H:%M")

    @staticmethod
    def format_slot(slot: CandidateSlot, index: Optional[int] = None) -> str:
        """One line per slot: date, time range, score and label."""
        prefix = f"{index}. " if index is not None else ""
        return (
            f"{prefix}{ResponseFormatter.format_slot_date(slot)} "
            f"{slot.start.strftime('%H:%M')}-{slot.end.strftime('%H:%M')} "
            f"({slot.start.tzname()}) | score {slot.score:.2f} | {describe_label(slot.label)}"
        )

    @staticmethod
    def format_section(title: str, content: List[str]) -> str:
        lines = [f"**{title}**", ""]
        lines.extend(content)
        return "\n".join(lines)

    @staticmethod
    def format_recommendations(recommendations: List[Recommendation]) -> str:
        if not recommendations:
            return ResponseFormatter.format_error(
                "No Recommendations",
                "No candidate slots were available to recommend."
            )

        lines = []
        for rec in sorted(recommendations, key=lambda r: r.priority):
            lines.append(f"[{rec.type.value}] {rec.title}: {rec.description}")
            if rec.reason:
                lines.append(f"   {rec.reason}")
            for i, slot in enumerate(rec.slots, 1):
                lines.append(f"   {ResponseFormatter.format_slot(slot, i)}")
        return "\n".join(lines)

    @staticmethod
    def format_batch_summary(result: SchedulingResult) -> str:
        lines = [
            f"Scheduled: {len(result.scheduled)}",
            f"Needs manual choice: {len(result.deferred)}",
            f"Unresolved: {len(result.unresolved)}",
        ]
        for entry in result.scheduled:
            label = entry.request.title or entry.request.meeting_type
            lines.append(f"• {label} ({entry.request.id}): {ResponseFormatter.format_slot(entry.slot)}")
        for entry in result.deferred:
            label = entry.request.title or entry.request.meeting_type
            lines.append(f"• {label} ({entry.request.id}): {len(entry.suggestions)} option(s) to review")
        for entry in result.unresolved:
            label = entry.request.title or entry.request.meeting_type
            lines.append(f"• {label} ({entry.request.id}): {entry.reason}")
        return ResponseFormatter.format_section("Batch Scheduling Summary", lines)

    @staticmethod
    def format_error(title: str, message: str, suggestions: Optional[List[str]] = None) -> str:
        lines = [f"**{title}**", "", message]

        if suggestions:
            lines.append("")
            lines.append("**Suggestions:**")
            for suggestion in suggestions:
                lines.append(f"• {suggestion}")

        return "\n".join(lines)
