""" Console rendering of server statistics and remote command results.
"""

import logging
import os
import sys
import threading

from .protocol import fields


logger = logging.getLogger(__name__)

title = '== WINESAPS STATISTICS =='

# Indexed by the category byte of each entry in a statistics reply.

categories = (
    'Time elapsed',
    'RPS',
    'Current used SIDs',
    'Current battles',
    'Current users',
    'Total battles',
    'Total users',
    'Senders count',
    'Receivers count',
    'Current AI count',
    'Total AI spawned',
    'Battle refs up',
    'Battle refs down',
    'Round refs up',
    'Round refs down',
    'Field refs up',
    'Field refs down',
    'Current env size',
)

unknown = 'Unknown parameter'


def describe(status):
    """ Return a short description of a server status code, for logging.
    """

    try:
        return fields.status_names[status]
    except KeyError:
        return 'status %d' % (status)



def entry_lines(entries):
    """ Format each (category, value) entry as one console line.
    """

    lines = list()

    for category, value in entries:
        if category < len(categories):
            text = categories[category] + ':'
            line = '%-19s %5u' % (text, value)
        else:
            line = '%s: %5u' % (unknown, value)

        lines.append(line)

    return lines



class Console:
    """ Writes lines to *stream* and clears the terminal between redraws.
        Clearing is skipped when *stream* is not a terminal, so redirected
        output accumulates instead of filling with escape sequences.
    """

    def __init__(self, stream=None):

        if stream is None:
            stream = sys.stdout

        self.stream = stream


    def isatty(self):
        try:
            return self.stream.isatty()
        except (AttributeError, ValueError):
            return False


    def clear(self):

        if self.isatty() == False:
            return

        if os.name == 'nt':
            os.system('cls')
        else:
            self.stream.write('\x1b[2J\x1b[H')
            self.stream.flush()


    def write(self, lines):

        for line in lines:
            self.stream.write(line + '\n')

        self.stream.flush()


# end of class Console



class Renderer:
    """ Turns decoded data replies into console output. In statistics mode
        every successful reply redraws the screen; in *one_shot* mode, or
        for any non-zero status, only the response code is written.

        :ivar finished: Event set once a one-shot response has been rendered.
        :ivar dots: Counter driving the busy indicator.
        :ivar status: Status code of the most recent reply.
    """

    def __init__(self, console=None, one_shot=False):

        if console is None:
            console = Console()

        self.console = console
        self.one_shot = one_shot
        self.dots = 0
        self.status = None
        self.finished = threading.Event()


    def busy(self):
        """ Advance and return the busy indicator: one to three dots, then
            an empty line, repeating.
        """

        self.dots += 1
        return '.' * (self.dots % 4)


    def render(self, reply):
        """ Render a :class:`swstat.protocol.frame.DataReply`. Returns the
            list of lines written.
        """

        status = reply.status
        self.status = status

        if status == fields.OK and self.one_shot == False:
            lines = [title, self.busy()]
            lines.extend(entry_lines(reply.entries))

            self.console.clear()
            self.console.write(lines)
            return lines

        if status != fields.OK:
            logger.info('server responded %d (%s)', status, describe(status))

        lines = ['Response code (%d)' % (status)]
        self.console.write(lines)

        if self.one_shot == True:
            self.finished.set()

        return lines


# end of class Renderer


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
