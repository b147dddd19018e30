import re
from collections import namedtuple
from datetime import datetime, timedelta

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta
from dateutil.tz import tzlocal

Reminder = namedtuple('Reminder', ['method', 'minutes'])

DEFAULT_DURATION = 60
NO_REMINDERS = ('0', 'none')

TIME_LIMIT_RE = re.compile(r'^(\d+)\s*([dwmy]?)$', re.I)
REMINDER_RE = re.compile(r'^(\d+)\s*([mhd]?)$', re.I)
URL_RE = re.compile(r'https?://([^/\s]+)\S*', re.I)


class UsageError(ValueError):
    """Malformed user input that the command cannot proceed with"""


class Aborted(Exception):
    """The user interrupted a pending network operation"""

    def __init__(self, msg='Ctrl+C pressed - aborting...'):
        super().__init__(msg)


class CancelToken:
    r"""Cancellation signal passed to every suspending operation

    The SIGINT handler calls cancel(); network calls check the token
    before and after each request.
    """

    def __init__(self):
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def raise_if_cancelled(self):
        if self.cancelled:
            raise Aborted()


def parse_duration(text):
    r"""Parse a duration like "1h30m", "45m", "2h" into minutes

    Never fails: anything unparseable gives DEFAULT_DURATION.

    Parameters
    ----------
    text : string

    Returns
    -------
    int : minutes
    """
    hours = re.search(r'(\d+)h', text, re.I)
    mins = re.search(r'(\d+)m', text, re.I)
    if hours or mins:
        minutes = 0
        if hours:
            minutes += int(hours.group(1)) * 60
        if mins:
            minutes += int(mins.group(1))
        return minutes
    try:
        minutes = int(text.strip())
    except ValueError:
        return DEFAULT_DURATION
    return minutes if minutes > 0 else DEFAULT_DURATION


def parse_time_limit(text, now=None):
    r"""Parse a time horizon like "3m", "2w", "90d", "1y" into a datetime

    A bare number is a count of months.

    Parameters
    ----------
    text : string
    now : datetime (defaults to the current local time)

    Returns
    -------
    datetime (timezone aware if now is)
    """
    match = TIME_LIMIT_RE.match(text.strip())
    if not match:
        raise UsageError(
            f'Invalid time limit: "{text}" '
            '— use #d, #w, #m, or #y (e.g. 3m, 90d, 1y)')
    num = int(match.group(1))
    unit = (match.group(2) or 'm').lower()
    if now is None:
        now = datetime.now(tzlocal())
    if unit == 'd':
        return now + timedelta(days=num)
    elif unit == 'w':
        return now + timedelta(days=num * 7)
    elif unit == 'y':
        return now + relativedelta(years=num)
    return now + relativedelta(months=num)


def parse_reminder(spec):
    r"""Parse one reminder like "30m", "1h:email", "2d:popup"

    Parameters
    ----------
    spec : string

    Returns
    -------
    Reminder
    """
    time_part, _, method_part = spec.partition(':')
    method = 'email' if method_part == 'email' else 'popup'
    match = REMINDER_RE.match(time_part)
    if not match:
        raise UsageError(
            f'Invalid reminder: "{spec}" '
            '— use #m, #h, or #d (e.g. 30m, 1h, 2d)')
    num = int(match.group(1))
    unit = (match.group(2) or 'm').lower()
    if unit == 'h':
        num *= 60
    elif unit == 'd':
        num *= 60 * 24
    return Reminder(method, num)


def parse_reminders(value):
    r"""Parse a comma separated reminder list

    "0" or "none" means no reminders at all and returns an empty list.

    Parameters
    ----------
    value : string

    Returns
    -------
    list of Reminder
    """
    if value in NO_REMINDERS:
        return []
    return [parse_reminder(part.strip()) for part in value.split(',')]


def reminder_label(reminder):
    mins = reminder.minutes
    if mins >= 1440:
        label = '%gd' % (mins / 1440)
    elif mins >= 60:
        label = '%gh' % (mins / 60)
    else:
        label = f'{mins}m'
    return label + (':email' if reminder.method == 'email' else '')


def format_reminders(reminders):
    if not reminders:
        return 'none'
    return ', '.join(reminder_label(r) for r in reminders)


def reminders_body(reminders):
    r"""Build the reminders field of an event body

    Parameters
    ----------
    reminders : list of Reminder (empty list disables reminders)

    Returns
    -------
    dict
    """
    return {'useDefault': False,
            'overrides': [r._asdict() for r in reminders]}


def date_time_tz_dict(dt, tz_name):
    """Timed start/end of an event body"""
    return {'dateTime': dt.isoformat(), 'timeZone': tz_name}


def date_dict(d):
    """All day start/end of an event body"""
    return {'date': d.isoformat()}


def is_all_day(point):
    return 'date' in point and 'dateTime' not in point


def format_date_time(point, tz=None):
    r"""Format a start/end dict for display as yyyy-mm-dd HH:MM

    Parameters
    ----------
    point : dict with 'date' or 'dateTime'
    tz : tzinfo to display timed values in (defaults to local)

    Returns
    -------
    string
    """
    if point.get('date'):
        return point['date']
    if point.get('dateTime'):
        dt = isoparse(point['dateTime'])
        if dt.tzinfo is not None:
            dt = dt.astimezone(tz or tzlocal())
        return dt.strftime('%Y-%m-%d %H:%M')
    return '(no time)'


def format_duration(start, end):
    r"""Format event length as "30 min", "1 hr", "1.5 hrs"

    All day events have no displayed duration.
    """
    if is_all_day(start) or is_all_day(end):
        return ''
    if not (start.get('dateTime') and end.get('dateTime')):
        return ''
    mins = (isoparse(end['dateTime'])
            - isoparse(start['dateTime'])).total_seconds() / 60
    if mins < 60:
        return '%g min' % mins
    hrs = mins / 60
    if hrs == int(hrs):
        return '%d hr%s' % (hrs, '' if hrs == 1 else 's')
    return '%.1f hrs' % hrs


def clean_urls(text):
    r"""Replace URLs with a short [Sitename] label

    "https://us02web.zoom.us/j/123" becomes "[Zoom]"
    """
    if not text:
        return text

    def label(match):
        parts = match.group(1).split('.')
        if len(parts) >= 2:
            domain = parts[-2] if len(parts) > 2 else parts[0]
            return '[%s]' % (domain[:1].upper() + domain[1:])
        return '[link]'
    return URL_RE.sub(label, text)


def shorten(text, width):
    return text if len(text) <= width else text[:width - 3] + '...'


def ts():
    """Timestamp prefix for progress messages"""
    return '[%s]' % datetime.now().strftime('%H:%M:%S')
