"""Calendar service for generating ICS files from a competition."""

import logging
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING, Optional, Union

from vbcompetitions.core.group import MatchFilter
from vbcompetitions.core.match import GroupBreak, GroupMatch
from vbcompetitions.exceptions import EntityNotFoundError, StructuralError
from vbcompetitions.utils.ics import ICSBuilder

if TYPE_CHECKING:
    from vbcompetitions.core.competition import Competition

logger = logging.getLogger(__name__)

UNKNOWN_VENUE = 'unknown'

CalendarEntry = Union[GroupMatch, GroupBreak]


class CalendarService:
    """Service for generating ICS calendars from a competition's schedule.

    Matches are grouped into one event per date and venue, with the matches and
    breaks of that day listed in the event description.
    """

    def __init__(self, prodid: Optional[str] = None) -> None:
        """Initialize the calendar service.

        Args:
            prodid: Product identifier written to generated calendars
        """
        self.prodid = prodid

    @staticmethod
    def get_content_type() -> str:
        return 'text/calendar'

    def get_content_disposition(self, competition: 'Competition', team_id: str, filename: Optional[str] = None) -> str:
        """Get the Content-Disposition header value for a team's calendar download.

        Raises:
            EntityNotFoundError: If the team does not exist
        """
        self._check_team(competition, team_id)
        if filename is None:
            filename = f'{competition.get_team(team_id).name}-{competition.name}.ics'
        return f'attachment; filename={filename}'

    def generate_ics(self, competition: 'Competition', unique_id: str, team_id: Optional[str] = None) -> str:
        """Generate an ICS calendar for a competition.

        Args:
            competition: Competition to build the calendar from
            unique_id: Unique string, such as a domain name, used in each event's UID
            team_id: Only include matches this team definitely plays in or officiates

        Returns:
            Complete ICS calendar as string

        Raises:
            EntityNotFoundError: If team_id is given but does not exist
            StructuralError: If a match to be included has no date
        """
        if team_id is not None:
            self._check_team(competition, team_id)

        builder = ICSBuilder(calendar_name=competition.name, prodid=self.prodid)
        grouped = self._group_by_date_and_venue(competition, team_id)

        summary = f'{competition.name} matches'
        if team_id is not None:
            summary = f'{competition.get_team(team_id).name} {summary}'

        for match_date, venues in grouped.items():
            for venue, entries in venues.items():
                self._add_day_event(builder, competition, summary, unique_id, team_id, match_date, venue, entries)

        logger.info(f"Generated ICS calendar for '{competition.name}' with {len(builder.events)} events")
        return builder.build()

    @staticmethod
    def _check_team(competition: 'Competition', team_id: str) -> None:
        if not competition.has_team(team_id):
            raise EntityNotFoundError(f'Team with ID "{team_id}" does not exist')

    def _group_by_date_and_venue(
        self,
        competition: 'Competition',
        team_id: Optional[str],
    ) -> dict[str, dict[str, list[CalendarEntry]]]:
        """Group schedule entries by date, then by venue, in schedule order.

        Breaks take the venue of the last match seen on the same date. Breaks with no
        date are left out.
        """
        grouped: dict[str, dict[str, list[CalendarEntry]]] = {}
        for stage in competition.stages:
            last_seen_venue = UNKNOWN_VENUE
            for entry in stage.get_matches(team_id, MatchFilter.PLAYING | MatchFilter.OFFICIATING):
                if entry.date is None:
                    if isinstance(entry, GroupMatch):
                        raise StructuralError(
                            f'error while generating calendar: match {entry.tag} has no date'
                        )
                    continue

                if entry.date not in grouped:
                    grouped[entry.date] = {}
                    last_seen_venue = UNKNOWN_VENUE

                if isinstance(entry, GroupMatch):
                    venue = entry.venue if entry.venue is not None else UNKNOWN_VENUE
                    if entry.venue is not None:
                        last_seen_venue = entry.venue
                else:
                    venue = last_seen_venue

                grouped[entry.date].setdefault(venue, []).append(entry)
        return grouped

    def _add_day_event(
        self,
        builder: ICSBuilder,
        competition: 'Competition',
        summary: str,
        unique_id: str,
        team_id: Optional[str],
        match_date: str,
        venue: str,
        entries: list[CalendarEntry],
    ) -> None:
        matches = [entry for entry in entries if isinstance(entry, GroupMatch)]
        all_have_warmup = bool(matches) and all(match.warmup is not None for match in matches)
        all_have_start = bool(matches) and all(match.start is not None for match in matches)
        all_have_duration = bool(matches) and all(match.duration is not None for match in matches)

        day = datetime.strptime(match_date, '%Y-%m-%d')
        dtstart: Union[datetime, date] = day.date()
        dtend: Optional[datetime] = None
        if all_have_warmup and isinstance(entries[0], GroupMatch):
            dtstart = self._at_time(day, entries[0].warmup)
            if all_have_duration:
                last_match = matches[-1]
                start_time = last_match.start if all_have_start else last_match.warmup
                hours, minutes = last_match.duration.split(':', 1)
                dtend = self._at_time(day, start_time) + timedelta(hours=int(hours), minutes=int(minutes))

        uid = f"D{match_date.replace('-', '')}T"
        if team_id is not None:
            uid += f'{team_id}-'
        uid += unique_id

        description = '\n'.join(
            self._describe_match(competition, entry) if isinstance(entry, GroupMatch) else self._describe_break(entry)
            for entry in entries
        )

        builder.add_event(
            uid=uid,
            summary=summary,
            dtstart=dtstart,
            dtend=dtend,
            location=venue if venue != UNKNOWN_VENUE else None,
            description=description,
        )

    @staticmethod
    def _at_time(day: datetime, time_of_day: str) -> datetime:
        hours, minutes = time_of_day.split(':', 1)
        return day.replace(hour=int(hours), minute=int(minutes))

    @staticmethod
    def _describe_break(group_break: GroupBreak) -> str:
        description = ''
        if group_break.start is not None:
            description += f'{group_break.start} - '
        if group_break.name is not None:
            description += group_break.name
        return description

    @staticmethod
    def _describe_match(competition: 'Competition', match: GroupMatch) -> str:
        """Describe a match, e.g. "09:20 court 1 - Alpha v Bravo (Charlie ref)"."""
        description = ''
        if match.warmup is not None:
            description += f'{match.warmup} '
        elif match.start is not None:
            description += f'{match.start} '
        if match.court is not None:
            description += f'court {match.court} '
        home = competition.get_team(match.home_team.id).name
        away = competition.get_team(match.away_team.id).name
        description += f'- {home} v {away}'

        officials = match.officials
        if officials is not None:
            if officials.is_team:
                description += f' ({competition.get_team(officials.team).name} ref)'
            else:
                description += f' (First ref: {officials.first}'
                if officials.second is not None:
                    description += f', Second ref: {officials.second}'
                if officials.scorer is not None:
                    description += f', Scorer: {officials.scorer}'
                description += ')'
        return description
