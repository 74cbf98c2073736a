"""Strategies choosing which slice of time a model looks at."""

import abc
from datetime import datetime, timedelta

from app.analytics.analysable import AssignmentAnalysable
from app.analytics.strings import get_string


class TimeSplitting(abc.ABC):
    id = ""

    def get_name(self, lang: str = "en") -> str:
        return get_string(f"timesplitting:{self.id}", lang=lang)

    @abc.abstractmethod
    def get_range(self, analysable: AssignmentAnalysable, now: datetime) -> tuple[datetime, datetime]:
        """Start and end of the data window visible at ``now``."""


class BeforeNow(TimeSplitting):
    """Only ever looks at activity that already happened."""


class SingleRange(BeforeNow):
    id = "singlerange"

    def get_range(self, analysable, now):
        return analysable.start or now, now


class UpcomingDueDate(BeforeNow):
    id = "upcomingduedate"

    def get_range(self, analysable, now):
        end = min(analysable.end or now, now)
        return end - timedelta(weeks=1), end


class UpcomingWeek(TimeSplitting):
    id = "upcomingweek"

    def get_range(self, analysable, now):
        return now, now + timedelta(weeks=1)


TIME_SPLITTINGS = {
    cls.id: cls for cls in (SingleRange, UpcomingDueDate, UpcomingWeek)
}


def get_time_splitting(splitting_id: str) -> TimeSplitting:
    try:
        return TIME_SPLITTINGS[splitting_id]()
    except KeyError:
        raise ValueError(f"Unknown time splitting '{splitting_id}'") from None
