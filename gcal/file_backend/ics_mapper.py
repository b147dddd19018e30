r"""Map iCalendar VEVENT components onto Google Calendar event bodies"""
import re
from datetime import datetime, timedelta

from dateutil.tz import gettz

from gcal.utils import date_dict, date_time_tz_dict

UNTITLED = 'Untitled Event'
MAILTO_RE = re.compile(r'^mailto:', re.I)


def tz_name_of(prop):
    r"""Name of the timezone a DTSTART/DTEND property is expressed in

    Parameters
    ----------
    prop : icalendar vDDDTypes

    Returns
    -------
    string or None (floating time)
    """
    tzinfo = getattr(prop.dt, 'tzinfo', None)  # dates have none
    if tzinfo is None:
        return None
    # icalendar maps Windows names like "Eastern Standard Time" to IANA
    name = getattr(tzinfo, 'key', None) or getattr(tzinfo, 'zone', None)
    if name:
        return name
    if 'TZID' in prop.params:
        return str(prop.params['TZID'])
    return 'UTC' if prop.dt.tzname() == 'UTC' else None


def time_point(value, tz_name, local_tz_name):
    r"""Google start/end dict for a decoded DTSTART/DTEND value

    Parameters
    ----------
    value : date or datetime
    tz_name : timezone named by the record (None if floating)
    local_tz_name : IANA name used when the record names none

    Returns
    -------
    dict
    """
    if not isinstance(value, datetime):
        return date_dict(value)
    if value.tzinfo is None:
        value = value.replace(tzinfo=gettz(local_tz_name))
    return date_time_tz_dict(value, tz_name or local_tz_name)


def event_end(vevent, start):
    if 'dtend' in vevent:
        return vevent.decoded('dtend')
    if 'duration' in vevent:
        return start + vevent.decoded('duration')
    if isinstance(start, datetime):
        return start
    return start + timedelta(days=1)


def as_list(value):
    """Properties that occur more than once come back as a list"""
    return value if isinstance(value, list) else [value]


def attendee_dict(attendee):
    r"""{email, displayName} for one ATTENDEE property

    The mailto: scheme is stripped; displayName comes from the first
    CN parameter value and is left out if there is none.
    """
    email = MAILTO_RE.sub('', str(attendee))
    if not email:
        raise ValueError('attendee without an address')
    result = {'email': email}
    cn = attendee.params.get('CN')
    if isinstance(cn, (list, tuple)):
        cn = cn[0] if cn else None
    if cn:
        result['displayName'] = str(cn)
    return result


def map_record(vevent, local_tz_name):
    r"""Build a Google Calendar event body from an iCalendar event

    Parameters
    ----------
    vevent : icalendar Event
    local_tz_name : IANA timezone for values that do not name one

    Returns
    -------
    dict
    """
    if vevent.errors:
        raise ValueError('; '.join(f'{name}: {msg}'
                                   for name, msg in vevent.errors))
    if 'dtstart' not in vevent:
        raise ValueError('event has no DTSTART')

    summary = str(vevent.get('summary', '')).strip()
    event = {'summary': summary or UNTITLED}
    for field in ('description', 'location'):
        value = vevent.get(field)
        if value:
            event[field] = str(value)

    start = vevent.decoded('dtstart')
    end = event_end(vevent, start)
    if isinstance(start, datetime) != isinstance(end, datetime):
        raise ValueError('DTSTART and DTEND must both be dates '
                         'or both be date-times')
    event['start'] = time_point(start, tz_name_of(vevent['dtstart']),
                                local_tz_name)
    end_tz = (tz_name_of(vevent['dtend']) if 'dtend' in vevent
              else tz_name_of(vevent['dtstart']))
    event['end'] = time_point(end, end_tz, local_tz_name)

    if 'attendee' in vevent:
        event['attendees'] = [attendee_dict(a)
                              for a in as_list(vevent['attendee'])]

    if 'rrule' in vevent:
        event['recurrence'] = ['RRULE:' + rule.to_ical().decode()
                               for rule in as_list(vevent['rrule'])]
    return event


def record_summary(vevent):
    """Summary used to label import errors"""
    return str(vevent.get('summary', '')).strip() or 'unknown'
