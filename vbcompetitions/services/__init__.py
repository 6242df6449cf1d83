"""Services built on top of loaded competitions."""

from vbcompetitions.services.calendar import CalendarService

__all__ = ["CalendarService"]
