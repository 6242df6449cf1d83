"""ICS/iCalendar format utilities."""

from datetime import date, datetime, timezone
from typing import Optional, Union

from vbcompetitions import config


class ICSBuilder:
    """Builder for creating valid ICS calendar files.

    Competition times have no timezone, so timed events use floating local times
    and no VTIMEZONE is emitted.
    """

    # ICS requires CRLF line endings
    CRLF = "\r\n"

    # Maximum line length in octets before folding
    MAX_LINE_LENGTH = 75

    def __init__(self, calendar_name: Optional[str] = None, prodid: Optional[str] = None) -> None:
        """Initialize the ICS builder.

        Args:
            calendar_name: Name of the calendar
            prodid: Product identifier, defaults to the configured CALENDAR_PRODID
        """
        self.calendar_name = calendar_name
        self.prodid = prodid or config.CALENDAR_PRODID
        self.events: list[str] = []

    @staticmethod
    def escape_text(text: str) -> str:
        """Escape special characters in ICS text.

        Args:
            text: Raw text to escape

        Returns:
            Escaped text safe for ICS
        """
        if not text:
            return ""
        # Escape backslash first, then others
        text = text.replace("\\", "\\\\")
        text = text.replace(";", "\\;")
        text = text.replace(",", "\\,")
        text = text.replace("\n", "\\n")
        text = text.replace("\r", "")
        return text

    @staticmethod
    def fold_line(line: str) -> str:
        """Fold lines longer than 75 octets per RFC 5545.

        Args:
            line: Line to fold

        Returns:
            Folded line with proper continuation
        """
        if len(line.encode('utf-8')) <= ICSBuilder.MAX_LINE_LENGTH:
            return line

        result = []
        current_line = ""

        for char in line:
            test_line = current_line + char
            if len(test_line.encode('utf-8')) > ICSBuilder.MAX_LINE_LENGTH:
                result.append(current_line)
                current_line = " " + char  # Space indicates continuation
            else:
                current_line = test_line

        if current_line:
            result.append(current_line)

        return ICSBuilder.CRLF.join(result)

    @staticmethod
    def format_datetime(dt: datetime) -> str:
        """Format a datetime for ICS.

        Naive datetimes are written as floating local times, aware ones are
        converted to UTC with a Z suffix.
        """
        if dt.tzinfo is not None:
            return dt.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        return dt.strftime("%Y%m%dT%H%M%S")

    @staticmethod
    def format_date(day: date) -> str:
        return day.strftime("%Y%m%d")

    def add_event(
        self,
        uid: str,
        summary: str,
        dtstart: Union[datetime, date],
        dtend: Optional[datetime] = None,
        location: Optional[str] = None,
        description: Optional[str] = None,
        dtstamp: Optional[datetime] = None,
    ) -> None:
        """Add an event to the calendar.

        Args:
            uid: Unique identifier for the event
            summary: Event title/summary
            dtstart: Event start; a date (not a datetime) makes an all-day event
            dtend: Event end, only used for timed events
            location: Event location
            description: Event description, may contain newlines
            dtstamp: Creation time of the event, defaults to now
        """
        if dtstamp is None:
            dtstamp = datetime.now(timezone.utc)

        lines = [
            "BEGIN:VEVENT",
            f"SUMMARY:{self.escape_text(summary)}",
            f"DTSTAMP:{self.format_datetime(dtstamp)}",
        ]

        if isinstance(dtstart, datetime):
            lines.append(f"DTSTART:{self.format_datetime(dtstart)}")
            if dtend is not None:
                lines.append(f"DTEND:{self.format_datetime(dtend)}")
        else:
            lines.append(f"DTSTART;VALUE=DATE:{self.format_date(dtstart)}")

        lines.append(f"UID:{uid}")

        if location:
            lines.append(f"LOCATION:{self.escape_text(location)}")

        if description:
            lines.append(f"DESCRIPTION:{self.escape_text(description)}")

        lines.append("END:VEVENT")

        # Fold long lines
        folded_lines = [self.fold_line(line) for line in lines]
        self.events.append(self.CRLF.join(folded_lines))

    def build(self) -> str:
        """Build the complete ICS calendar.

        Returns:
            Complete ICS calendar as string, ending with CRLF
        """
        lines = [
            "BEGIN:VCALENDAR",
            "VERSION:2.0",
            f"PRODID:{self.prodid}",
        ]
        if self.calendar_name:
            lines.append(self.fold_line(f"X-WR-CALNAME:{self.escape_text(self.calendar_name)}"))

        for event in self.events:
            lines.append(event)

        lines.append("END:VCALENDAR")

        return self.CRLF.join(lines) + self.CRLF

    def clear(self) -> None:
        """Clear all events from the builder."""
        self.events.clear()
