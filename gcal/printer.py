import sys

COLOR_NAMES = {
    'default': '',
    'black': '\033[0;30m',
    'brightblack': '\033[30;1m',
    'red': '\033[0;31m',
    'brightred': '\033[31;1m',
    'green': '\033[0;32m',
    'brightgreen': '\033[32;1m',
    'yellow': '\033[0;33m',
    'brightyellow': '\033[33;1m',
    'blue': '\033[0;34m',
    'brightblue': '\033[34;1m',
    'magenta': '\033[0;35m',
    'brightmagenta': '\033[35;1m',
    'cyan': '\033[0;36m',
    'brightcyan': '\033[36;1m',
    'white': '\033[0;37m',
    'brightwhite': '\033[37;1m',
}
RESET = '\033[0m'


class Printer:
    r"""Write (optionally coloured) messages to stdout and stderr

    Parameters
    ----------
    use_color : boolean
    """

    def __init__(self, use_color=True):
        self.use_color = use_color

    def colored(self, msg, color='default'):
        if not self.use_color or not COLOR_NAMES[color]:
            return msg
        return COLOR_NAMES[color] + msg + RESET

    def msg(self, msg, color='default', file=None):
        file = file or sys.stdout
        file.write(self.colored(msg, color))
        file.flush()

    def err_msg(self, msg):
        self.msg(msg, 'brightred', file=sys.stderr)

    def warn_msg(self, msg):
        self.msg(msg, 'yellow', file=sys.stderr)

    def table(self, headers, rows):
        r"""Print rows as left aligned columns under a dashed header

        The last column is not padded.

        Parameters
        ----------
        headers : list of strings
        rows : list of lists of strings
        """
        widths = [max([len(h)] + [len(r[i] or '') for r in rows])
                  for i, h in enumerate(headers)]

        def line(cells):
            last = len(cells) - 1
            return ' '.join((c or '').ljust(widths[i]) if i < last
                            else (c or '') for i, c in enumerate(cells))
        self.msg(line(headers) + '\n')
        self.msg(' '.join('-' * w for w in widths) + '\n')
        for row in rows:
            self.msg(line(row) + '\n')
