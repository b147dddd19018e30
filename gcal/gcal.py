#!/usr/bin/env python3

# ** The MIT License **
#
# Copyright (c) 2025-2026 The gcal authors
#      * Google Calendar over the v3 REST API
#      * Natural language dates ("next friday 3pm", "jan 15 2pm")
#      * Import of iCalendar (.ics) files
#      * Reminder and time horizon specs on the command line

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation
# files (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify,
# merge, publish, distribute, sublicense, and/or sell copies of
# the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES
# OF MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF
# OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS
# IN THE SOFTWARE.

# These are standard libraries and should never fail
import sys
import os
import signal
import logging
from datetime import datetime, timedelta
from collections import namedtuple
from traceback import print_exc

# Required 3rd party libraries
try:
    from dateutil.parser import isoparse
    from dateutil.relativedelta import relativedelta
    from dateutil.tz import gettz
    from tzlocal import get_localzone_name
except ImportError as exc:  # pragma: no cover
    print("ERROR: Missing module - %s" % exc.args[0])
    sys.exit(1)


# Package local imports

from gcal import config
from gcal.argparsers import get_argument_parser, insert_implicit_import
from gcal.datetime_parser import DateTimeParser
from gcal.file_backend.ics_interface import ICSInterface
from gcal.file_backend.ics_mapper import map_record, record_summary
from gcal.google_backend.api_client import GoogleCalendarAPI
from gcal.google_backend.auth import OAuthTokenProvider
from gcal.printer import Printer
from gcal.utils import (
    Aborted, CancelToken, UsageError, clean_urls, date_time_tz_dict,
    format_date_time, format_duration, format_reminders, parse_duration,
    parse_time_limit, reminders_body, shorten, ts)

ImportResult = namedtuple('ImportResult', ['imported', 'errors'])
BIRTHDAY = 'birthday'
MAX_MATCH_EVENTS = 50
SUSPICIOUS_YEARS = 2
DEFAULT_DURATION = '1h'

logger = logging.getLogger('gcal')


class GcalInterface:

    def __init__(self, connect, printer, **options):
        r"""Initialize GcalInterface

        Parameters
        ----------
        connect : callable(write_access) returning a GoogleCalendarAPI
        printer : Printer
        options : dict of command options (calendar, timezone, ...)
        """
        self.connect = connect
        self.printer = printer
        self.options = options
        self.calendar = options.get('calendar') or 'primary'
        self.tz_name = options.get('timezone') or get_localzone_name()
        self.tz = gettz(self.tz_name)
        if self.tz is None:
            raise UsageError('Unknown timezone ' + self.tz_name)
        self.dtp = DateTimeParser(tz=self.tz)
        self.set_now()

    def set_now(self):
        self.now = datetime.now(self.tz)

    def parse_when(self, text):
        return self.dtp.parse(text, now=self.now)

    @staticmethod
    def confirm(prompt):
        response = input(prompt)
        return (response and response[0].lower() == 'y')

    def is_birthday(self, event):
        return event.get('eventType') == BIRTHDAY

    def format_when(self, point):
        return format_date_time(point, self.tz)

    def event_row(self, event):
        r"""Table row for one event

        Parameters
        ----------
        event : event dict from the API

        Returns
        -------
        list of strings
        """
        start, end = event.get('start'), event.get('end')
        summary = clean_urls(event.get('summary') or '(no title)')
        if self.is_birthday(event):
            summary += ' [from contact]'
        row = [(event.get('id') or '')[:8],
               self.format_when(start) if start else '?',
               format_duration(start, end) if start and end else '',
               summary,
               clean_urls(event.get('location') or '')]
        if self.options.get('verbose'):
            row.append(event.get('htmlLink') or '')
        return row

    def ListQuery(self, count=10, limit='3m', after=None, before=None):
        r"""Print a table of upcoming events

        Parameters
        ----------
        count : maximum number of events
        limit : time horizon spec ("3m", "2w", ...)
        after : natural language start of the window (default now)
        before : natural language end of the window (overrides limit)

        Returns
        -------
        list of displayed events
        """
        if before:
            time_max = self.parse_when(before)
        else:
            time_max = parse_time_limit(limit, self.now)
        time_min = self.parse_when(after) if after else None
        api = self.connect(write_access=False)
        events = api.list_events(
            self.calendar, count,
            time_min.isoformat() if time_min else None,
            time_max.isoformat())
        birthdays = sum(1 for e in events if self.is_birthday(e))
        if not self.options.get('birthdays'):
            events = [e for e in events if not self.is_birthday(e)]

        if not events:
            self.printer.msg('No upcoming events found.\n')
        else:
            self.printer.msg(f'\nUpcoming events ({len(events)}):\n\n')
            headers = ['ID', 'When', 'Dur', 'Event', 'Location']
            if self.options.get('verbose'):
                headers.append('Link')
            self.printer.table(headers, [self.event_row(e) for e in events])
        if birthdays and not self.options.get('birthdays'):
            self.printer.msg('\n(%d birthday%s hidden, -b to show)\n' % (
                birthdays, 's' if birthdays > 1 else ''))
        return events

    def CalendarsQuery(self):
        api = self.connect(write_access=False)
        calendars = api.list_calendars()
        self.printer.msg(f'\nCalendars ({len(calendars)}):\n\n')
        for cal in calendars:
            primary = ' (primary)' if cal.get('primary') else ''
            role = f" [{cal['accessRole']}]" if cal.get('accessRole') else ''
            self.printer.msg(
                f"  {cal.get('summary') or cal.get('id')}{primary}{role}\n")
            self.printer.msg(f"    ID: {cal.get('id')}\n")
        return calendars

    def confirm_start(self, start, when):
        r"""Ask before using a start time that looks like a parsing mistake

        Returns
        -------
        boolean : whether to go ahead
        """
        shown = start.strftime('%Y-%m-%d %H:%M')
        if start < self.now:
            warning = f'Date is in the past: {shown}'
        elif start > self.now + relativedelta(years=SUSPICIOUS_YEARS):
            warning = f'Date is more than {SUSPICIOUS_YEARS} years away: '
            warning += shown
        else:
            return True
        self.printer.warn_msg(f'\nWarning: {warning}\n')
        self.printer.warn_msg(f'Input was: "{when}"\n')
        if self.options.get('no_prompt'):
            return True
        return self.confirm('Continue? (y/N) ')

    def add(self, title, when, duration=DEFAULT_DURATION, reminders=None,
            location=None):
        r"""Create a timed event

        Parameters
        ----------
        title : string
        when : natural language start time
        duration : duration spec ("1h30m")
        reminders : None (calendar default) or list of Reminder
        location : string or None

        Returns
        -------
        created event dict, or None if cancelled
        """
        start = self.parse_when(when)
        end = start + timedelta(minutes=parse_duration(duration))
        if not self.confirm_start(start, when):
            self.printer.msg('Cancelled.\n')
            return None

        event = {'summary': title,
                 'start': date_time_tz_dict(start, self.tz_name),
                 'end': date_time_tz_dict(end, self.tz_name)}
        if location:
            event['location'] = location
        if reminders is not None:
            event['reminders'] = reminders_body(reminders)

        api = self.connect(write_access=True)
        created = api.create_event(event, self.calendar)
        self.printer.msg(f"\nEvent created: {created.get('summary')}\n",
                         'green')
        self.printer.msg('  When: %s - %s\n' % (
            self.format_when(created['start']),
            self.format_when(created['end'])))
        if reminders is not None:
            self.printer.msg(f'  Reminders: {format_reminders(reminders)}\n')
        if created.get('htmlLink'):
            self.printer.msg(f"  Link: {created['htmlLink']}\n")
        return created

    def print_ambiguous(self, prefix, matches):
        self.printer.err_msg(
            f'{prefix}: ambiguous ({len(matches)} matches)\n')
        for e in matches:
            # recurring instances share a base id; show enough to tell
            # them apart
            event_id = e.get('id') or ''
            shown_id = event_id[:16] if len(event_id) > 12 else event_id[:8]
            when = self.format_when(e['start']) if e.get('start') else ''
            summary = shorten(clean_urls(e.get('summary') or ''), 60)
            self.printer.err_msg(f'  {shown_id} {when} {summary}\n')

    @staticmethod
    def match_events(events, prefix):
        return [e for e in events if (e.get('id') or '').startswith(prefix)]

    def delete(self, ids):
        r"""Delete events whose id starts with each of the given prefixes

        Unknown and ambiguous prefixes are reported and skipped.

        Parameters
        ----------
        ids : list of id prefixes

        Returns
        -------
        int: number of events deleted
        """
        api = self.connect(write_access=True)
        events = api.list_events(self.calendar, MAX_MATCH_EVENTS)
        deleted = 0
        for prefix in ids:
            matches = self.match_events(events, prefix)
            if not matches:
                self.printer.err_msg(f'{prefix}: not found\n')
                continue
            if len(matches) > 1:
                self.print_ambiguous(prefix, matches)
                continue
            event = matches[0]
            if self.is_birthday(event) and not self.options.get('birthdays'):
                self.printer.msg(
                    f"Skipped birthday: {event.get('summary')} "
                    "(use -birthdays to include)\n")
                continue
            api.delete_event(event['id'], self.calendar)
            self.printer.msg(
                f"Deleted: {clean_urls(event.get('summary') or '')}\n")
            deleted += 1
        return deleted

    def update(self, id_prefix, title=None, location=None, start=None,
               duration=None, reminders=None):
        r"""Patch one event found by id prefix

        Parameters
        ----------
        id_prefix : string
        title, location : new values or None
        start : natural language start time or None
        duration : duration spec or None
        reminders : None (unchanged) or list of Reminder

        Returns
        -------
        updated event dict
        """
        if not (title or location or start or duration
                or reminders is not None):
            raise UsageError(
                'No update flags provided. Use -title, -loc, -start, '
                '-dur, or -r')
        api = self.connect(write_access=True)
        events = api.list_events(self.calendar, MAX_MATCH_EVENTS)
        matches = self.match_events(events, id_prefix)
        if not matches:
            raise ValueError(f'{id_prefix}: not found')
        if len(matches) > 1:
            self.print_ambiguous(id_prefix, matches)
            raise ValueError(f'{id_prefix}: ambiguous')
        target = matches[0]

        body = {}
        changes = []
        if title:
            body['summary'] = title
            changes.append(f'title → "{title}"')
        if location:
            body['location'] = location
            changes.append(f'location → "{location}"')
        old_start = target.get('start', {}).get('dateTime')
        old_end = target.get('end', {}).get('dateTime')
        if start:
            new_start = self.parse_when(start)
            if duration:
                length = timedelta(minutes=parse_duration(duration))
            elif old_start and old_end:
                length = isoparse(old_end) - isoparse(old_start)
            else:
                length = timedelta(hours=1)
            body['start'] = date_time_tz_dict(new_start, self.tz_name)
            body['end'] = date_time_tz_dict(new_start + length, self.tz_name)
            changes.append(f"start → {self.format_when(body['start'])}")
            if duration:
                changes.append(f'duration → {duration}')
        elif duration:
            if not old_start:
                raise UsageError('Cannot change duration of all-day event')
            new_end = (isoparse(old_start).astimezone(self.tz)
                       + timedelta(minutes=parse_duration(duration)))
            body['end'] = date_time_tz_dict(new_end, self.tz_name)
            changes.append(f'duration → {duration}')
        if reminders is not None:
            body['reminders'] = reminders_body(reminders)
            changes.append(f'reminders → {format_reminders(reminders)}')

        updated = api.update_event(target['id'], body, self.calendar)
        self.printer.msg(
            f"\nUpdated: {clean_urls(updated.get('summary') or '')}\n",
            'green')
        for change in changes:
            self.printer.msg(f'  {change}\n')
        return updated

    def import_events(self, api, vevents):
        r"""Create one remote event per iCalendar event, in order

        A record that fails to map or to be created is recorded and
        skipped; cancellation stops the whole batch.

        Parameters
        ----------
        api : GoogleCalendarAPI
        vevents : list of icalendar Events

        Returns
        -------
        ImportResult
        """
        imported = 0
        errors = []
        for vevent in vevents:
            try:
                event = map_record(vevent, self.tz_name)
                api.create_event(event, self.calendar)
            except Aborted:
                raise
            except Exception as exc:
                summary = record_summary(vevent)
                errors.append(f'{summary}: {exc}')
                self.printer.err_msg(f'  ! Failed: {summary}\n')
                continue
            self.printer.msg(f"  + {event['summary']}\n")
            imported += 1
        return ImportResult(imported, errors)

    def import_ics(self, filename):
        r"""Import all events of an .ics file

        Parameters
        ----------
        filename : path to ics file

        Returns
        -------
        ImportResult
        """
        path = os.path.abspath(filename)
        if not os.path.isfile(path):
            raise UsageError(f'File not found: {path}')
        self.printer.msg(f'Importing: {os.path.basename(path)}\n')
        self.printer.msg(f'Calendar: {self.calendar}\n\n')
        try:
            ics = ICSInterface(path)
        except ValueError as exc:
            raise ValueError(f'Parse error: {exc}')
        self.printer.msg(f'Found {len(ics)} event(s)\n\n')

        api = self.connect(write_access=True)
        result = self.import_events(api, ics.events)
        self.printer.msg(f'\n{result.imported} event(s) imported\n')
        if result.errors:
            self.printer.msg(f'{len(result.errors)} error(s)\n', 'yellow')
            for error in result.errors:
                self.printer.err_msg(f'  {error}\n')
        return result


def run(FLAGS, parser, printer, cancel_token):
    r"""Execute the command described by the parsed arguments

    Returns
    -------
    int: exit status
    """
    if FLAGS.default_user:
        user = config.set_default_user(FLAGS.default_user)
        printer.msg(f'Default user set to: {user}\n')
        if not FLAGS.command:
            return 0

    if FLAGS.command is None:
        parser.print_help()
        return 1

    user = config.resolve_user(FLAGS.user)
    if not user:
        printer.err_msg('No user configured.\nUse -u <email> for one-time, '
                        'or -defaultUser <email> to set default.\n')
        return 1
    printer.msg(f'{ts()} User: {user}\n')

    options = vars(FLAGS).copy()
    options['timezone'] = (FLAGS.timezone
                           or config.load_config().get('timezone')
                           or get_localzone_name())
    logger.debug('User %s, calendar %s, timezone %s', user,
                 FLAGS.calendar, options['timezone'])
    auth = OAuthTokenProvider(
        FLAGS.credentials or config.get_credentials_file(), printer)

    def connect(write_access=False):
        token = auth.get_access_token(user, write_access,
                                      force_refresh=FLAGS.refresh)
        return GoogleCalendarAPI(token, cancel_token)

    gcal = GcalInterface(connect, printer, **options)

    if FLAGS.command == 'list':
        gcal.ListQuery(count=FLAGS.count or FLAGS.n, limit=FLAGS.limit,
                       after=FLAGS.after, before=FLAGS.before)

    elif FLAGS.command == 'add':
        gcal.add(FLAGS.title, FLAGS.when, FLAGS.duration,
                 reminders=FLAGS.reminders, location=FLAGS.location)

    elif FLAGS.command == 'update':
        gcal.update(FLAGS.id, title=FLAGS.title, location=FLAGS.location,
                    start=FLAGS.start, duration=FLAGS.duration,
                    reminders=FLAGS.reminders)

    elif FLAGS.command in ['delete', 'del']:
        gcal.delete(FLAGS.ids)

    elif FLAGS.command == 'import':
        gcal.import_ics(FLAGS.file)

    elif FLAGS.command == 'calendars':
        gcal.CalendarsQuery()

    return 0


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]
    parser = get_argument_parser()
    FLAGS = parser.parse_args(insert_implicit_import(argv))
    printer = Printer(use_color=FLAGS.color)
    if FLAGS.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='%(levelname)s %(name)s: %(message)s')

    cancel_token = CancelToken()

    def SIGINT_handler(signum, frame):
        # raising interrupts a blocking request; the token stops any
        # request that has not started yet
        cancel_token.cancel()
        raise Aborted()

    previous_handler = signal.signal(signal.SIGINT, SIGINT_handler)
    try:
        return run(FLAGS, parser, printer, cancel_token)
    except UsageError as exc:
        printer.err_msg(str(exc) + '\n')
        return 2
    except Aborted as exc:
        printer.err_msg(f'\n\n{exc}\n')
        return 130
    except Exception as exc:
        printer.err_msg(f'Error: {exc}\n')
        if FLAGS.stack_trace:
            print_exc()
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)


if __name__ == '__main__':
    sys.exit(main())
