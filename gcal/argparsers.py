import argparse
import gcal
from gcal import utils
from sys import stdout

COMMANDS = ['list', 'add', 'update', 'delete', 'del', 'import', 'calendars']

EXAMPLES = """
examples:
  gcal meeting.ics                        Import ICS file
  gcal list                               List next 10 events
  gcal list -limit 2w -after tomorrow
  gcal add "Dentist" "Friday 3pm" "1h"
  gcal add "Lunch" "1/14/2026 12:00" "1h"
  gcal add "Meeting" "tomorrow 10:00"
  gcal add "Appointment" "jan 15 2pm"
  gcal add "Call" "tomorrow 3pm" "30m" -r 15m,1h:email
  gcal update abc1 -title "New Title" -loc "Room 5"
  gcal update abc1 -start "friday 3pm" -dur 2h
  gcal update abc1 -r 0
  gcal -defaultUser bob@gmail.com         Set default user
"""


def validcount(value):
    ival = int(value)
    if ival < 1:
        raise argparse.ArgumentTypeError("Count must be a number >= 1")
    return ival


def validreminders(value):
    try:
        return utils.parse_reminders(value)
    except utils.UsageError as exc:
        raise argparse.ArgumentTypeError(str(exc))


def get_common_parser(suppress=False):
    r"""Options accepted both before and after the command

    The copy attached to each subcommand uses suppressed defaults so it
    does not overwrite values given before the command.
    """
    def default(value):
        return argparse.SUPPRESS if suppress else value

    common = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    common.add_argument(
        "-u", "-user", "--user", dest="user", default=default(''),
        help="Google account to use for this invocation")
    common.add_argument(
        "-defaultUser", "--defaultUser", dest="default_user",
        default=default(''), help="Set default user for future use")
    common.add_argument(
        "-c", "-calendar", "--calendar", dest="calendar",
        default=default('primary'), help="Calendar ID")
    common.add_argument(
        "-v", "-verbose", "--verbose", dest="verbose", action="store_true",
        default=default(False), help="Show event links and debug output")
    common.add_argument(
        "-b", "-birthdays", "--birthdays", dest="birthdays",
        action="store_true", default=default(False),
        help="Include birthday events (hidden by default)")
    common.add_argument(
        "--timezone", default=default(None),
        help="IANA timezone for parsing and display (default: system)")
    common.add_argument(
        "--credentials", default=default(None),
        help="OAuth client secrets file")
    common.add_argument(
        "--refresh", action="store_true", default=default(False),
        help="Discard the cached access token first")
    common.add_argument(
        "--no-prompt", dest="no_prompt", action="store_true",
        default=default(False), help="Do not ask for confirmation")
    common.add_argument(
        "--nocolor", action="store_false", dest="color",
        default=default(stdout.isatty()),
        help="Enable/Disable all color output")
    common.add_argument(
        "--stack-trace", dest="stack_trace", action="store_true",
        default=default(False), help="Print a traceback on errors")
    return common


def get_reminder_parser():
    reminder_parser = argparse.ArgumentParser(add_help=False,
                                              allow_abbrev=False)
    reminder_parser.add_argument(
        "-r", "-reminder", "--reminder", dest="reminders",
        type=validreminders, default=None,
        help="Reminders: #m, #h, #d with optional :email/:popup, "
        "comma separated (e.g. 15m,1h:email); 0 for none")
    return reminder_parser


def fill_list_parser(list_parser):
    list_parser.add_argument("count", type=validcount, nargs="?",
                             help="Number of events to list")
    list_parser.add_argument("-n", dest="n", type=validcount, default=10,
                             help="Number of events to list")
    list_parser.add_argument(
        "-limit", "--limit", dest="limit", default="3m",
        help="Time horizon: #d, #w, #m, #y")
    list_parser.add_argument(
        "-after", "--after", dest="after",
        help="List events after this date/time")
    list_parser.add_argument(
        "-before", "--before", dest="before",
        help="List events before this date/time (overrides -limit)")
    return list_parser


def fill_add_parser(add):
    add.add_argument("title", help="Event summary")
    add.add_argument("when", help='Start, e.g. "tomorrow 2pm"')
    add.add_argument("duration", nargs="?", default="1h",
                     help="Duration, e.g. 1h30m")
    add.add_argument("-loc", "-location", "--location", dest="location",
                     help="Location")
    return add


def fill_update_parser(update):
    update.add_argument("id", help="Event ID (prefix match)")
    update.add_argument("-title", "--title", dest="title", help="New title")
    update.add_argument("-loc", "-location", "--location", dest="location",
                        help="New location")
    update.add_argument("-start", "--start", dest="start",
                        help="New start time")
    update.add_argument("-dur", "-duration", "--duration", dest="duration",
                        help="New duration")
    return update


def get_argument_parser():
    common_after = get_common_parser(suppress=True)
    reminder_parser = get_reminder_parser()

    parser = argparse.ArgumentParser(
        prog='gcal',
        description='Google Calendar Command Line Interface',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=EXAMPLES, fromfile_prefix_chars="@", allow_abbrev=False,
        parents=[get_common_parser()])

    parser.add_argument(
        "--version", action="version", version="%%(prog)s %s (%s)" %
        (gcal.__version__, gcal.__author__))

    sub = parser.add_subparsers(
        help="Invoking a subcommand with --help prints subcommand usage.",
        dest="command")

    fill_list_parser(sub.add_parser(
        "list", parents=[common_after], allow_abbrev=False,
        help="List upcoming events"))
    fill_add_parser(sub.add_parser(
        "add", parents=[common_after, reminder_parser], allow_abbrev=False,
        help="Add event"))
    fill_update_parser(sub.add_parser(
        "update", parents=[common_after, reminder_parser],
        allow_abbrev=False, help="Update event by ID"))
    delete = sub.add_parser(
        "delete", aliases=['del'], parents=[common_after],
        allow_abbrev=False, help="Delete event(s) by ID")
    delete.add_argument("ids", nargs="+", help="Event IDs (prefix match)")
    imp = sub.add_parser(
        "import", parents=[common_after], allow_abbrev=False,
        help="Import events from ICS file")
    imp.add_argument("file", help="ICS file")
    sub.add_parser("calendars", parents=[common_after], allow_abbrev=False,
                   help="List available calendars")
    return parser


def insert_implicit_import(argv):
    r"""Treat "gcal file.ics" as "gcal import file.ics"

    Parameters
    ----------
    argv : list of strings

    Returns
    -------
    list of strings
    """
    if any(arg in COMMANDS for arg in argv):
        return argv
    for i, arg in enumerate(argv):
        if arg.lower().endswith('.ics') and not arg.startswith('-'):
            return argv[:i] + ['import'] + argv[i:]
    return argv
