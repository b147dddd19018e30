r"""Natural language date/time parsing

The parser tries an ordered list of rules; the first rule whose pattern
matches and whose handler returns a datetime wins.  When no rule
matches, dateutil and then parsedatetime get a chance at the input.
"""
import re
from collections import namedtuple
from datetime import datetime, timedelta

import parsedatetime
from dateutil.parser import parse as dateutil_parse
from dateutil.tz import tzlocal

Rule = namedtuple('Rule', ['name', 'pattern', 'handler', 'lowercase'])

WEEKDAYS = ['monday', 'tuesday', 'wednesday', 'thursday', 'friday',
            'saturday', 'sunday']
MONTHS = ['jan', 'feb', 'mar', 'apr', 'may', 'jun',
          'jul', 'aug', 'sep', 'oct', 'nov', 'dec']

_TIME = r'(\d{1,2})(?::(\d{2}))?\s*(am|pm)?'


class DateTimeParseError(ValueError):
    def __init__(self, text, reason=None):
        self.text = text
        msg = f'Cannot parse date/time: {text}'
        if reason:
            msg += f' ({reason})'
        super().__init__(msg)


def to_24_hour(hour, meridiem):
    r"""Convert a 12 hour clock value

    Parameters
    ----------
    hour : int
    meridiem : 'am', 'pm' or None

    Returns
    -------
    int
    """
    if meridiem == 'pm' and hour < 12:
        return hour + 12
    if meridiem == 'am' and hour == 12:
        return 0
    return hour


def at_time(dt, hour, minute):
    return dt.replace(hour=hour, minute=minute, second=0, microsecond=0)


def _today(parser, m, now):
    return now


def _tomorrow(parser, m, now):
    return now + timedelta(days=1)


def _relative_day_at(parser, m, now):
    rel, hour, minute, meridiem = m.groups()
    d = now + timedelta(days=1) if rel == 'tomorrow' else now
    return at_time(d, to_24_hour(int(hour), meridiem), int(minute or 0))


def _weekday_at(parser, m, now):
    nxt, day, hour, minute, meridiem = m.groups()
    days_until = WEEKDAYS.index(day) - now.weekday()
    if days_until <= 0 or nxt:
        days_until += 7
    d = now + timedelta(days=days_until)
    return at_time(d, to_24_hour(int(hour), meridiem), int(minute or 0))


def _month_day(parser, m, now):
    month, day, year, hour, minute, meridiem = m.groups()
    month_index = next(i for i, mon in enumerate(MONTHS)
                       if month.startswith(mon))
    h = to_24_hour(int(hour), meridiem) if hour else 0
    mm = int(minute or 0) if hour else 0
    return datetime(int(year or now.year), month_index + 1, int(day),
                    h, mm, tzinfo=parser.tz)


def _slash_date_time(parser, m, now):
    month, day, year, hour, minute = (int(g) for g in m.groups())
    return datetime(year, month, day, hour, minute, tzinfo=parser.tz)


def _iso_date_time(parser, m, now):
    year, month, day, hour, minute = (int(g) for g in m.groups())
    return datetime(year, month, day, hour, minute, tzinfo=parser.tz)


def _time_today(parser, m, now):
    hour, minute = m.groups()
    return at_time(now, int(hour), int(minute))


def _meridiem_time_today(parser, m, now):
    hour, minute, meridiem = m.groups()
    return at_time(now, to_24_hour(int(hour), meridiem), int(minute or 0))


RULES = (
    Rule('today', re.compile(r'^today$'), _today, True),
    Rule('tomorrow', re.compile(r'^tomorrow$'), _tomorrow, True),
    Rule('relative day and time',
         re.compile(r'^(today|tomorrow)\s+(?:at\s+)?' + _TIME + '$'),
         _relative_day_at, True),
    Rule('weekday and time',
         re.compile(r'^(next\s+)?(' + '|'.join(WEEKDAYS) + r')\s+(?:at\s+)?'
                    + _TIME + '$'),
         _weekday_at, True),
    Rule('month and day',
         re.compile(r'^(' + '|'.join(MONTHS) + r')[a-z]*\s+(\d{1,2})'
                    r'(?:\s+(\d{4}))?(?:\s+(?:at\s+)?' + _TIME + ')?$'),
         _month_day, True),
    Rule('m/d/yyyy h:mm',
         re.compile(r'^(\d{1,2})/(\d{1,2})/(\d{4})\s+(\d{1,2}):(\d{2})$'),
         _slash_date_time, False),
    Rule('yyyy-m-d h:mm',
         re.compile(r'^(\d{4})-(\d{1,2})-(\d{1,2})\s+(\d{1,2}):(\d{2})$'),
         _iso_date_time, False),
    Rule('h:mm', re.compile(r'^(\d{1,2}):(\d{2})$'), _time_today, False),
    Rule('h[:mm] am/pm', re.compile(r'^(\d{1,2})(?::(\d{2}))?\s*(am|pm)$'),
         _meridiem_time_today, True),
)


class DateTimeParser:
    r"""Turn user supplied date/time text into an aware datetime

    Parameters
    ----------
    tz : tzinfo used for results and for "now" (defaults to local)
    """

    rules = RULES

    def __init__(self, tz=None):
        self.tz = tz or tzlocal()
        self.pdtCalendar = parsedatetime.Calendar(
            version=parsedatetime.VERSION_CONTEXT_STYLE)

    def now(self):
        return datetime.now(self.tz)

    def match_rule(self, text, now):
        r"""Try the ordered rules

        Returns
        -------
        (Rule, datetime) or (None, None) if no rule applies
        """
        lower = text.lower().strip()
        for rule in self.rules:
            m = rule.pattern.match(lower if rule.lowercase else text.strip())
            if not m:
                continue
            try:
                result = rule.handler(self, m, now)
            except ValueError as exc:
                raise DateTimeParseError(text, str(exc))
            if result is not None:
                return rule, result
        return None, None

    def parse(self, text, now=None):
        r"""Parse text into a timezone aware datetime

        Parameters
        ----------
        text : string
        now : datetime the relative forms are based on

        Returns
        -------
        datetime
        """
        if now is None:
            now = self.now()
        rule, result = self.match_rule(text, now)
        if rule is not None:
            return result
        return self.fallback(text, now)

    def fallback(self, text, now):
        default = now.replace(hour=0, minute=0, second=0, microsecond=0)
        try:
            dt = dateutil_parse(text, default=default)
        except (ValueError, OverflowError):
            struct, context = self.pdtCalendar.parse(
                text, sourceTime=now.timetuple())
            if not context.hasDateOrTime:
                raise DateTimeParseError(text)
            dt = datetime(*struct[:6])
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=self.tz)
        return dt
