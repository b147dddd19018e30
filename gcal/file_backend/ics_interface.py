from pathlib import Path

from icalendar import Calendar


class ICSInterface:
    def __init__(self, filename):
        r"""Initialize ICSInterface

        Parameters
        ----------
        filename : path to ics file
        """
        self.filepath = Path(filename).resolve()
        self.all_events()

    def all_events(self):
        r"""Read the file and collect its VEVENT components in file order

        Events with property errors are kept; the importer reports them
        individually.
        """
        with open(self.filepath, 'r', encoding='utf-8') as fp:
            cal = Calendar.from_ical(fp.read())
        self.events = cal.walk('VEVENT')

    def __len__(self):
        return len(self.events)

    def __iter__(self):
        return iter(self.events)
